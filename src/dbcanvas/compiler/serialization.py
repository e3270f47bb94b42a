"""Canonical JSON-shaped export of the schema model.

Flags are emitted only when true and optional text only when set, so the
export stays small and stable for persistence and diffing.
"""

from __future__ import annotations

from typing import Any, NotRequired, TypedDict

from dbcanvas.compiler.types import (
    Cardinality,
    Endpoint,
    Enum,
    EnumValue,
    Field,
    Relationship,
    SchemaModel,
    Table,
)


class EndpointSchema(TypedDict):
    """One side of a reference."""

    table: str
    field: str


class FieldSchema(TypedDict):
    """Schema for a table field."""

    name: str
    type: str
    pk: NotRequired[bool]
    unique: NotRequired[bool]
    notNull: NotRequired[bool]
    increment: NotRequired[bool]
    fk: NotRequired[EndpointSchema]  # Endpoint this foreign key points at
    note: NotRequired[str]
    default: NotRequired[str]


class TableSchema(TypedDict):
    """Schema for a table."""

    name: str
    fields: list[FieldSchema]
    alias: NotRequired[str]
    note: NotRequired[str]


class EnumValueSchema(TypedDict):
    """Schema for an enum member."""

    name: str
    note: NotRequired[str]


class EnumSchema(TypedDict):
    """Schema for an enum."""

    name: str
    values: list[EnumValueSchema]


class RefSchema(TypedDict):
    """Schema for a relationship."""

    source: EndpointSchema
    target: EndpointSchema
    cardinality: str
    name: NotRequired[str]


class SchemaDocument(TypedDict):
    """Root of the canonical export."""

    tables: list[TableSchema]
    refs: list[RefSchema]
    enums: NotRequired[list[EnumSchema]]


def _endpoint_to_json(endpoint: Endpoint) -> EndpointSchema:
    return {"table": endpoint.table, "field": endpoint.field}


def _field_to_json(field: Field, references: Endpoint | None) -> FieldSchema:
    data: FieldSchema = {"name": field.name, "type": field.type}
    if field.is_primary_key:
        data["pk"] = True
    if field.is_unique:
        data["unique"] = True
    if field.is_not_null:
        data["notNull"] = True
    if field.is_increment:
        data["increment"] = True
    if field.is_foreign_key and references is not None:
        data["fk"] = _endpoint_to_json(references)
    if field.note is not None:
        data["note"] = field.note
    if field.default is not None:
        data["default"] = field.default
    return data


def _table_to_json(table: Table, references: dict[Endpoint, Endpoint]) -> TableSchema:
    data: TableSchema = {
        "name": table.name,
        "fields": [
            _field_to_json(f, references.get(Endpoint(table.name, f.name)))
            for f in table.fields
        ],
    }
    if table.alias is not None:
        data["alias"] = table.alias
    if table.note is not None:
        data["note"] = table.note
    return data


def _enum_to_json(enum: Enum) -> EnumSchema:
    values: list[EnumValueSchema] = []
    for value in enum.values:
        item: EnumValueSchema = {"name": value.name}
        if value.note is not None:
            item["note"] = value.note
        values.append(item)
    return {"name": enum.name, "values": values}


def _ref_to_json(relationship: Relationship) -> RefSchema:
    data: RefSchema = {
        "source": _endpoint_to_json(relationship.source),
        "target": _endpoint_to_json(relationship.target),
        "cardinality": str(relationship.cardinality),
    }
    if relationship.name is not None:
        data["name"] = relationship.name
    return data


def schema_to_json(model: SchemaModel) -> SchemaDocument:
    """Export a model as ``{tables, refs}``, plus ``enums`` when any are declared."""
    # First relationship wins when a field holds several foreign keys
    references: dict[Endpoint, Endpoint] = {}
    for relationship in model.relationships:
        holder, referenced = relationship.foreign_key, relationship.referenced
        if holder is not None and referenced is not None:
            references.setdefault(holder, referenced)

    document: SchemaDocument = {
        "tables": [_table_to_json(table, references) for table in model.tables],
        "refs": [_ref_to_json(ref) for ref in model.relationships],
    }
    if model.enums:
        document["enums"] = [_enum_to_json(enum) for enum in model.enums]
    return document


def _field_from_json(data: dict[str, Any]) -> Field:
    return Field(
        name=data["name"],
        type=data["type"],
        is_primary_key=data.get("pk", False),
        is_unique=data.get("unique", False),
        is_not_null=data.get("notNull", False),
        is_foreign_key="fk" in data,
        is_increment=data.get("increment", False),
        note=data.get("note"),
        default=data.get("default"),
    )


def schema_from_json(data: SchemaDocument | dict[str, Any]) -> SchemaModel:
    """Rebuild a model from a canonical export, e.g. a cached copy.

    Raises:
        ValueError: A reference carries an unknown cardinality or the
            document is missing a required key.

    """
    try:
        tables = tuple(
            Table(
                name=table["name"],
                fields=tuple(_field_from_json(f) for f in table["fields"]),
                alias=table.get("alias"),
                note=table.get("note"),
            )
            for table in data["tables"]
        )
        enums = tuple(
            Enum(
                name=enum["name"],
                values=tuple(
                    EnumValue(v["name"], v.get("note")) for v in enum["values"]
                ),
            )
            for enum in data.get("enums", [])
        )
        relationships = tuple(
            Relationship(
                source=Endpoint(ref["source"]["table"], ref["source"]["field"]),
                target=Endpoint(ref["target"]["table"], ref["target"]["field"]),
                cardinality=Cardinality(ref["cardinality"]),
                name=ref.get("name"),
            )
            for ref in data["refs"]
        )
    except KeyError as err:
        msg = f"Schema document is missing key {err}"
        raise ValueError(msg) from err

    return SchemaModel(tables=tables, enums=enums, relationships=relationships)
