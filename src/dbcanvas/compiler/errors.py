"""Diagnostics and the error taxonomy of the schema compiler."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum, auto


class DiagnosticKind(StrEnum):
    """Which check produced a diagnostic."""

    LEX = auto()
    SYNTAX = auto()
    DUPLICATE_TABLE = auto()
    DUPLICATE_FIELD = auto()
    DUPLICATE_ENUM = auto()
    UNRESOLVED_REFERENCE = auto()
    LAYOUT = auto()


@dataclass(frozen=True)
class Diagnostic:
    """A message anchored to a position in the source text."""

    message: str
    kind: DiagnosticKind
    line: int | None = None
    column: int | None = None

    def __str__(self) -> str:
        """Render as ``line:column: message`` when the position is known."""
        if self.line is None:
            return self.message
        if self.column is None:
            return f"{self.line}: {self.message}"
        return f"{self.line}:{self.column}: {self.message}"


class SchemaError(Exception):
    """Base class for every error the compiler reports."""

    kind = DiagnosticKind.SYNTAX

    def __init__(
        self,
        message: str,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        super().__init__(message)
        self.diagnostic = Diagnostic(message, self.kind, line, column)

    @property
    def message(self) -> str:
        """Human readable message without position."""
        return self.diagnostic.message

    @property
    def line(self) -> int | None:
        """1-based line of the offending text."""
        return self.diagnostic.line

    @property
    def column(self) -> int | None:
        """1-based column of the offending text."""
        return self.diagnostic.column

    def __str__(self) -> str:
        return str(self.diagnostic)


class LexError(SchemaError):
    """Malformed token: unterminated string or comment, or a stray character."""

    kind = DiagnosticKind.LEX


class SchemaSyntaxError(SchemaError):
    """Malformed declaration structure."""

    kind = DiagnosticKind.SYNTAX


class SemanticError(SchemaError):
    """Well-formed text that does not describe a consistent schema."""


class DuplicateTableError(SemanticError):
    """Two tables (or a table and an alias) share a name."""

    kind = DiagnosticKind.DUPLICATE_TABLE

    def __init__(
        self,
        table: str,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.table = table
        super().__init__(f"Table '{table}' is already declared", line, column)


class DuplicateFieldError(SemanticError):
    """A table declares the same field name twice."""

    kind = DiagnosticKind.DUPLICATE_FIELD

    def __init__(
        self,
        table: str,
        field: str,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.table = table
        self.field = field
        super().__init__(
            f"Field '{field}' is already declared in table '{table}'",
            line,
            column,
        )


class DuplicateEnumError(SemanticError):
    """Two enums share a name."""

    kind = DiagnosticKind.DUPLICATE_ENUM

    def __init__(
        self,
        enum: str,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.enum = enum
        super().__init__(f"Enum '{enum}' is already declared", line, column)


class UnresolvedReferenceError(SemanticError):
    """A reference names a table or field that was never declared."""

    kind = DiagnosticKind.UNRESOLVED_REFERENCE

    def __init__(  # noqa: PLR0913
        self,
        table: str,
        field: str | None = None,
        *,
        context: str = "",
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.table = table
        self.field = field
        if field is None:
            message = f"Unknown table '{table}'"
        else:
            message = f"Unknown field '{field}' in table '{table}'"
        if context:
            message = f"{message} in {context}"
        super().__init__(message, line, column)


class LayoutConsistencyError(SchemaError):
    """An edge points at a node the layout never produced."""

    kind = DiagnosticKind.LAYOUT
