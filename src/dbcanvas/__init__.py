"""Compile database schema notation into validated models and grid diagrams."""

from dbcanvas.compiler import (
    CompileFailure,
    CompileResult,
    CompileSuccess,
    SchemaError,
    SchemaModel,
    compile_schema,
    parse_schema,
    validate,
)
from dbcanvas.config import Settings, load_settings
from dbcanvas.diagram import Layout, LayoutConfig, layout

__all__ = [
    "CompileFailure",
    "CompileResult",
    "CompileSuccess",
    "Layout",
    "LayoutConfig",
    "SchemaError",
    "SchemaModel",
    "Settings",
    "compile_schema",
    "layout",
    "load_settings",
    "parse_schema",
    "validate",
]
