"""Canonical schema model produced by the normalizer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class Cardinality(StrEnum):
    """Multiplicity of a relationship, read from source to target."""

    ONE_TO_ONE = "one-to-one"
    ONE_TO_MANY = "one-to-many"
    MANY_TO_ONE = "many-to-one"
    MANY_TO_MANY = "many-to-many"


# Relationship operator -> cardinality, overridable through configuration
DEFAULT_OPERATORS: dict[str, Cardinality] = {
    ">": Cardinality.MANY_TO_ONE,
    "<": Cardinality.ONE_TO_MANY,
    "-": Cardinality.ONE_TO_ONE,
    "<>": Cardinality.MANY_TO_MANY,
}


@dataclass(frozen=True)
class Field:
    """A column of a table."""

    name: str
    type: str
    is_primary_key: bool = False
    is_unique: bool = False
    is_not_null: bool = False
    is_foreign_key: bool = False
    is_increment: bool = False
    note: str | None = None
    default: str | None = None


@dataclass(frozen=True)
class Table:
    """A table and its fields in declaration order."""

    name: str
    fields: tuple[Field, ...] = ()
    alias: str | None = None
    note: str | None = None

    def field(self, name: str) -> Field | None:
        """Look up a field by exact name."""
        return next((f for f in self.fields if f.name == name), None)

    @property
    def primary_keys(self) -> list[str]:
        """Names of all primary key fields (supports composite keys)."""
        return [f.name for f in self.fields if f.is_primary_key]


@dataclass(frozen=True)
class EnumValue:
    """A single member of an enum."""

    name: str
    note: str | None = None


@dataclass(frozen=True)
class Enum:
    """A named set of values usable as a field type."""

    name: str
    values: tuple[EnumValue, ...] = ()

    @property
    def value_names(self) -> list[str]:
        """Member names in declaration order."""
        return [value.name for value in self.values]


@dataclass(frozen=True)
class Endpoint:
    """One side of a relationship."""

    table: str
    field: str

    def __str__(self) -> str:
        return f"{self.table}.{self.field}"


@dataclass(frozen=True)
class Relationship:
    """A reference between two fields, with names resolved to declared tables."""

    source: Endpoint
    target: Endpoint
    cardinality: Cardinality
    name: str | None = None

    @property
    def foreign_key(self) -> Endpoint | None:
        """Endpoint that holds the foreign key, i.e. the "many" side."""
        match self.cardinality:
            case Cardinality.MANY_TO_ONE | Cardinality.ONE_TO_ONE:
                return self.source
            case Cardinality.ONE_TO_MANY:
                return self.target
            case _:
                return None

    @property
    def referenced(self) -> Endpoint | None:
        """Endpoint the foreign key points at."""
        holder = self.foreign_key
        if holder is None:
            return None
        return self.target if holder == self.source else self.source


@dataclass(frozen=True)
class SchemaModel:
    """Root aggregate of one compilation."""

    tables: tuple[Table, ...] = ()
    enums: tuple[Enum, ...] = ()
    relationships: tuple[Relationship, ...] = ()
    _tables_by_name: dict[str, Table] = field(
        init=False,
        repr=False,
        compare=False,
    )

    def __post_init__(self) -> None:
        """Index tables by name for reference lookups."""
        object.__setattr__(
            self,
            "_tables_by_name",
            {table.name: table for table in self.tables},
        )

    def table(self, name: str) -> Table | None:
        """Look up a table by exact name."""
        return self._tables_by_name.get(name)

    def enum(self, name: str) -> Enum | None:
        """Look up an enum by exact name."""
        return next((e for e in self.enums if e.name == name), None)
