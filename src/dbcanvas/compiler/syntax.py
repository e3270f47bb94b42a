"""Syntax tree produced by the parser.

Nodes keep names exactly as written and carry the position of the token
that introduced them. Nothing here is resolved: a ColumnRef may name a
table alias or a table that does not exist.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ColumnRef:
    """``table.field`` as written in a reference."""

    table: str
    field: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.table}.{self.field}"


@dataclass(frozen=True)
class InlineRef:
    """``[ref: > table.field]`` attached to a field."""

    operator: str
    target: ColumnRef
    line: int
    column: int


@dataclass(frozen=True)
class FieldDecl:
    """A field line inside a table body."""

    name: str
    type: str
    line: int
    column: int
    primary_key: bool = False
    unique: bool = False
    not_null: bool = False
    increment: bool = False
    note: str | None = None
    default: str | None = None
    refs: tuple[InlineRef, ...] = ()


@dataclass(frozen=True)
class IndexDecl:
    """An entry of a table's ``indexes { ... }`` block."""

    columns: tuple[str, ...]
    line: int
    column: int
    primary_key: bool = False
    unique: bool = False


@dataclass(frozen=True)
class TableDecl:
    """``Table name [as alias] { ... }``."""

    name: str
    line: int
    column: int
    alias: str | None = None
    fields: tuple[FieldDecl, ...] = ()
    indexes: tuple[IndexDecl, ...] = ()
    note: str | None = None


@dataclass(frozen=True)
class EnumValueDecl:
    """A member line inside an enum body."""

    name: str
    line: int
    column: int
    note: str | None = None


@dataclass(frozen=True)
class EnumDecl:
    """``Enum name { ... }``."""

    name: str
    line: int
    column: int
    values: tuple[EnumValueDecl, ...] = ()


@dataclass(frozen=True)
class RefDecl:
    """A top-level reference, from either ``Ref: ...`` or a ``Ref { ... }`` block."""

    source: ColumnRef
    operator: str
    target: ColumnRef
    line: int
    column: int
    name: str | None = None


type Declaration = TableDecl | EnumDecl | RefDecl


@dataclass(frozen=True)
class Document:
    """Top-level declarations in source order."""

    declarations: tuple[Declaration, ...] = ()

    @property
    def tables(self) -> list[TableDecl]:
        """Table declarations in source order."""
        return [d for d in self.declarations if isinstance(d, TableDecl)]

    @property
    def enums(self) -> list[EnumDecl]:
        """Enum declarations in source order."""
        return [d for d in self.declarations if isinstance(d, EnumDecl)]

    @property
    def refs(self) -> list[RefDecl]:
        """Top-level reference declarations in source order."""
        return [d for d in self.declarations if isinstance(d, RefDecl)]
