"""Schema compiler: notation text to a validated schema model."""

from dbcanvas.compiler.errors import (
    Diagnostic,
    DiagnosticKind,
    DuplicateEnumError,
    DuplicateFieldError,
    DuplicateTableError,
    LayoutConsistencyError,
    LexError,
    SchemaError,
    SchemaSyntaxError,
    SemanticError,
    UnresolvedReferenceError,
)
from dbcanvas.compiler.lexer import Token, TokenKind, tokenize
from dbcanvas.compiler.main import compile_schema, parse_schema, validate
from dbcanvas.compiler.normalizer import normalize
from dbcanvas.compiler.parser import parse
from dbcanvas.compiler.results import (
    CompileFailure,
    CompileResult,
    CompileSuccess,
    ValidationResult,
)
from dbcanvas.compiler.serialization import (
    SchemaDocument,
    schema_from_json,
    schema_to_json,
)
from dbcanvas.compiler.types import (
    DEFAULT_OPERATORS,
    Cardinality,
    Endpoint,
    Enum,
    EnumValue,
    Field,
    Relationship,
    SchemaModel,
    Table,
)

__all__ = [
    "DEFAULT_OPERATORS",
    "Cardinality",
    "CompileFailure",
    "CompileResult",
    "CompileSuccess",
    "Diagnostic",
    "DiagnosticKind",
    "DuplicateEnumError",
    "DuplicateFieldError",
    "DuplicateTableError",
    "Endpoint",
    "Enum",
    "EnumValue",
    "Field",
    "LayoutConsistencyError",
    "LexError",
    "Relationship",
    "SchemaDocument",
    "SchemaError",
    "SchemaModel",
    "SchemaSyntaxError",
    "SemanticError",
    "Table",
    "Token",
    "TokenKind",
    "UnresolvedReferenceError",
    "ValidationResult",
    "compile_schema",
    "normalize",
    "parse",
    "parse_schema",
    "schema_from_json",
    "schema_to_json",
    "tokenize",
    "validate",
]
