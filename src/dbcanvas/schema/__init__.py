"""SQL export of compiled schema models."""

from dbcanvas.schema.ddl_export import Dialect, schema_to_ddl, schema_to_metadata
from dbcanvas.schema.type_conversion import RawType, split_type_name, type_name_to_sql

__all__ = [
    "Dialect",
    "RawType",
    "schema_to_ddl",
    "schema_to_metadata",
    "split_type_name",
    "type_name_to_sql",
]
