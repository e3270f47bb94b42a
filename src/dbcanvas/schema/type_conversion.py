"""Module for mapping free-form field type names onto SQLAlchemy types."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, NamedTuple

from sqlalchemy.types import (
    JSON,
    BigInteger,
    Boolean,
    Date,
    DateTime,
    Float,
    Integer,
    LargeBinary,
    Numeric,
    SmallInteger,
    String,
    Text,
    Time,
    TypeEngine,
    UserDefinedType,
    Uuid,
)
from sqlalchemy.types import Enum as SQLEnum

if TYPE_CHECKING:
    from collections.abc import Mapping

    from dbcanvas.compiler.types import Enum

# Reusable regex components for type names like "decimal(10, 2)" or "int[]"
BASE = r"(?P<base>[^()\[\]]+?)"  # Type name, may contain spaces
ARGS = r"(?:\((?P<args>[^)]*)\))?"  # Optional parenthesized arguments
ARRAY = r"(?P<array>\[\])?"  # Optional array suffix
WHITESPACE = r"\s*"

TYPE_PATTERN = re.compile(WHITESPACE.join(("^", BASE, ARGS, ARRAY, "$")))


class TypeName(NamedTuple):
    """A field type name split into its parts."""

    base: str
    args: list[str]
    array: bool


class RawType(UserDefinedType[Any]):
    """Column type rendered exactly as written in the schema."""

    cache_ok = True

    def __init__(self, spec: str) -> None:
        self.spec = spec

    def get_col_spec(self, **_kw: Any) -> str:  # noqa: ANN401
        """Render the type verbatim in DDL."""
        return self.spec


def split_type_name(type_name: str) -> TypeName:
    """Split ``decimal(10,2)`` into ``("decimal", ["10", "2"], False)``.

    Names that do not fit the pattern come back whole with no arguments.
    """
    if match := TYPE_PATTERN.match(type_name):
        args = [a.strip() for a in (match["args"] or "").split(",") if a.strip()]
        return TypeName(match["base"], args, bool(match["array"]))
    return TypeName(type_name, [], False)


def _int_arg(args: list[str], index: int) -> int | None:
    try:
        return int(args[index])
    except (IndexError, ValueError):
        return None


def type_name_to_sql(  # noqa: C901, PLR0911
    type_name: str,
    enums: Mapping[str, Enum] | None = None,
) -> TypeEngine[Any]:
    """Map a field type name to a SQLAlchemy type.

    Examples:
        varchar(255) -> String(255)
        decimal(10,2) -> Numeric(10, 2)
        post_status -> Enum("draft", "published", name="post_status")
        geometry -> RawType("geometry")

    """
    parsed = split_type_name(type_name)
    if parsed.array:
        return RawType(type_name)

    if enums and (enum := enums.get(parsed.base)):
        return SQLEnum(*enum.value_names, name=enum.name)

    match parsed.base.lower():
        case "int" | "integer" | "int4" | "serial" | "mediumint":
            return Integer()
        case "bigint" | "int8" | "bigserial":
            return BigInteger()
        case "smallint" | "int2" | "tinyint":
            return SmallInteger()
        case "varchar" | "char" | "character varying" | "nvarchar" | "string":
            return String(_int_arg(parsed.args, 0))
        case "text" | "mediumtext" | "longtext" | "clob":
            return Text()
        case "decimal" | "numeric":
            return Numeric(_int_arg(parsed.args, 0), _int_arg(parsed.args, 1))
        case "float" | "real" | "double" | "double precision" | "float8":
            return Float()
        case "bool" | "boolean":
            return Boolean()
        case "date":
            return Date()
        case "timestamp" | "datetime":
            return DateTime()
        case "timestamptz":
            return DateTime(timezone=True)
        case "time":
            return Time()
        case "blob" | "bytea" | "binary" | "varbinary":
            return LargeBinary()
        case "uuid":
            return Uuid()
        case "json" | "jsonb":
            return JSON()
        case _:
            return RawType(type_name)
