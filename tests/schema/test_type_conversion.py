"""Tests for mapping field type names onto SQLAlchemy types."""

import pytest
from sqlalchemy.types import (
    BigInteger,
    Boolean,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
    TypeEngine,
)
from sqlalchemy.types import Enum as SQLEnum

from dbcanvas.compiler import Enum, EnumValue
from dbcanvas.schema import RawType, split_type_name, type_name_to_sql


@pytest.mark.parametrize(
    ("type_name", "expected"),
    [
        ("int", ("int", [], False)),
        ("decimal(10,2)", ("decimal", ["10", "2"], False)),
        ("varchar( 255 )", ("varchar", ["255"], False)),
        ("text[]", ("text", [], True)),
        ("character varying(40)", ("character varying", ["40"], False)),
    ],
)
def test_split_type_name(
    type_name: str,
    expected: tuple[str, list[str], bool],
) -> None:
    """Test splitting names into base, arguments and array marker."""
    assert tuple(split_type_name(type_name)) == expected


@pytest.mark.parametrize(
    ("type_name", "expected_type"),
    [
        ("integer", Integer),
        ("INT", Integer),
        ("bigint", BigInteger),
        ("text", Text),
        ("boolean", Boolean),
        ("timestamp", DateTime),
    ],
)
def test_common_types(type_name: str, expected_type: type[TypeEngine[object]]) -> None:
    """Test case-insensitive mapping of common type names."""
    assert isinstance(type_name_to_sql(type_name), expected_type)


def test_type_arguments() -> None:
    """Test that length, precision and scale are kept."""
    varchar = type_name_to_sql("varchar(255)")
    assert isinstance(varchar, String)
    assert varchar.length == 255
    decimal = type_name_to_sql("decimal(10,2)")
    assert isinstance(decimal, Numeric)
    assert (decimal.precision, decimal.scale) == (10, 2)


def test_enum_type() -> None:
    """Test that a declared enum name becomes a SQL enum."""
    enums = {
        "post_status": Enum(
            "post_status",
            (EnumValue("draft"), EnumValue("published")),
        ),
    }
    sql_type = type_name_to_sql("post_status", enums)
    assert isinstance(sql_type, SQLEnum)
    assert sql_type.enums == ["draft", "published"]
    assert sql_type.name == "post_status"


@pytest.mark.parametrize("type_name", ["geometry", "int[]", "money"])
def test_unknown_types_render_verbatim(type_name: str) -> None:
    """Test the verbatim fallback for unknown and array types."""
    sql_type = type_name_to_sql(type_name)
    assert isinstance(sql_type, RawType)
    assert sql_type.get_col_spec() == type_name
