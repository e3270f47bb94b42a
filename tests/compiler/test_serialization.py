"""Tests for the canonical JSON export of schema models."""

import json

import pytest

from dbcanvas.compiler import (
    SchemaModel,
    parse_schema,
    schema_from_json,
    schema_to_json,
)

SHOP_SCHEMA = """
Enum order_status {
  pending
  shipped [note: 'left the warehouse']
}

Table customers as C {
  id integer [pk, increment]
  email varchar(255) [unique, not null]
  Note: 'Registered buyers'
}

Table orders {
  id integer [pk]
  customer_id integer [not null]
  status order_status [default: 'pending']
}

Ref fk_orders_customer: orders.customer_id > C.id
"""


@pytest.fixture(name="shop")
def shop_model() -> SchemaModel:
    """Compile the shop schema."""
    return parse_schema(SHOP_SCHEMA)


def test_flags_emitted_only_when_true(shop: SchemaModel) -> None:
    """Test the field entries of the export."""
    customers = schema_to_json(shop)["tables"][0]
    assert customers == {
        "name": "customers",
        "fields": [
            {"name": "id", "type": "integer", "pk": True, "increment": True},
            {
                "name": "email",
                "type": "varchar(255)",
                "unique": True,
                "notNull": True,
            },
        ],
        "alias": "C",
        "note": "Registered buyers",
    }


def test_foreign_key_points_at_referenced_field(shop: SchemaModel) -> None:
    """Test that the many side carries an fk entry."""
    orders = schema_to_json(shop)["tables"][1]
    assert orders["fields"][1] == {
        "name": "customer_id",
        "type": "integer",
        "notNull": True,
        "fk": {"table": "customers", "field": "id"},
    }
    assert orders["fields"][2]["default"] == "pending"


def test_refs_and_enums(shop: SchemaModel) -> None:
    """Test the refs and enums sections."""
    document = schema_to_json(shop)
    assert document["refs"] == [
        {
            "source": {"table": "orders", "field": "customer_id"},
            "target": {"table": "customers", "field": "id"},
            "cardinality": "many-to-one",
            "name": "fk_orders_customer",
        },
    ]
    assert document["enums"] == [
        {
            "name": "order_status",
            "values": [
                {"name": "pending"},
                {"name": "shipped", "note": "left the warehouse"},
            ],
        },
    ]


def test_enums_key_omitted_without_enums() -> None:
    """Test that schemas without enums export only tables and refs."""
    document = schema_to_json(parse_schema("Table a { id int }"))
    assert set(document) == {"tables", "refs"}


def test_export_is_json_serializable(shop: SchemaModel) -> None:
    """Test that the export survives a JSON text round trip."""
    text = json.dumps(schema_to_json(shop))
    assert schema_from_json(json.loads(text)) == shop


def test_reader_rejects_unknown_cardinality() -> None:
    """Test that a bad cardinality is a ValueError."""
    document = {
        "tables": [],
        "refs": [
            {
                "source": {"table": "a", "field": "b"},
                "target": {"table": "c", "field": "d"},
                "cardinality": "some-to-some",
            },
        ],
    }
    with pytest.raises(ValueError, match="some-to-some"):
        schema_from_json(document)


def test_reader_rejects_missing_keys() -> None:
    """Test that a document without refs is a ValueError."""
    with pytest.raises(ValueError, match="missing key 'refs'"):
        schema_from_json({"tables": []})


def test_reader_defaults() -> None:
    """Test that absent flags read back as false."""
    model = schema_from_json(
        {
            "tables": [{"name": "t", "fields": [{"name": "id", "type": "int"}]}],
            "refs": [],
        },
    )
    field = model.tables[0].fields[0]
    assert not (field.is_primary_key or field.is_foreign_key or field.is_unique)
    assert model.relationships == ()
