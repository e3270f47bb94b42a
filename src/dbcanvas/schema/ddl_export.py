"""SQL DDL generation from the schema model through SQLAlchemy."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import Column, ForeignKeyConstraint, MetaData
from sqlalchemy import Table as AlchemyTable
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import CompileError
from sqlalchemy.schema import CreateTable

from dbcanvas.schema.type_conversion import type_name_to_sql

if TYPE_CHECKING:
    from sqlalchemy.engine import Dialect as AlchemyDialect

    from dbcanvas.compiler.types import Enum, Field, SchemaModel

logger = getLogger(__name__)

type Dialect = Literal["sqlite", "postgresql", "mysql"]

DIALECTS: dict[str, type[AlchemyDialect]] = {
    "sqlite": sqlite.dialect,
    "postgresql": postgresql.dialect,
    "mysql": mysql.dialect,
}


def _column(field: Field, enums: dict[str, Enum]) -> Column[Any]:
    """Build a column; primary keys are implicitly not null."""
    return Column(
        field.name,
        type_name_to_sql(field.type, enums),
        primary_key=field.is_primary_key,
        unique=field.is_unique and not field.is_primary_key,
        nullable=not (field.is_not_null or field.is_primary_key),
        autoincrement=True if field.is_increment else "auto",
        comment=field.note,
    )


def schema_to_metadata(model: SchemaModel) -> MetaData:
    """Build SQLAlchemy tables for every table and foreign key of a model.

    Foreign keys go on the "many" side of each relationship. Many-to-many
    relationships have no such side and are skipped with a warning.
    """
    metadata = MetaData()
    enums = {enum.name: enum for enum in model.enums}

    for table in model.tables:
        AlchemyTable(
            table.name,
            metadata,
            *(_column(field, enums) for field in table.fields),
            comment=table.note,
        )

    for relationship in model.relationships:
        holder, referenced = relationship.foreign_key, relationship.referenced
        if holder is None or referenced is None:
            logger.warning(
                "Skipping %s relationship %s - %s: no foreign key column",
                relationship.cardinality,
                relationship.source,
                relationship.target,
            )
            continue
        metadata.tables[holder.table].append_constraint(
            ForeignKeyConstraint(
                [holder.field],
                [f"{referenced.table}.{referenced.field}"],
                name=relationship.name,
            ),
        )

    return metadata


def schema_to_ddl(model: SchemaModel, dialect: Dialect = "sqlite") -> str:
    """Render ``CREATE TABLE`` statements in table declaration order.

    Raises:
        ValueError: The dialect is unknown or cannot express a column type,
            e.g. MySQL with a ``varchar`` that has no length.

    """
    try:
        sql_dialect = DIALECTS[dialect]()
    except KeyError as err:
        msg = f"Unsupported SQL dialect: {dialect}"
        raise ValueError(msg) from err

    metadata = schema_to_metadata(model)
    statements: list[str] = []
    for table in model.tables:
        try:
            ddl = CreateTable(metadata.tables[table.name]).compile(dialect=sql_dialect)
        except CompileError as err:
            msg = f"Cannot render table '{table.name}' for {dialect}: {err}"
            raise ValueError(msg) from err
        statements.append(f"{str(ddl).strip()};")

    return "\n\n".join(statements) + "\n" if statements else ""
