"""Compiler pipeline: text to tokens to syntax tree to schema model."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from dbcanvas.compiler.errors import LexError, SchemaSyntaxError
from dbcanvas.compiler.lexer import tokenize
from dbcanvas.compiler.normalizer import normalize
from dbcanvas.compiler.parser import parse
from dbcanvas.compiler.results import (
    CompileFailure,
    CompileResult,
    CompileSuccess,
    ValidationResult,
)
from dbcanvas.compiler.types import DEFAULT_OPERATORS

if TYPE_CHECKING:
    from collections.abc import Mapping

    from dbcanvas.compiler.types import Cardinality, SchemaModel

logger = getLogger(__name__)


def compile_schema(
    text: str,
    *,
    operators: Mapping[str, Cardinality] = DEFAULT_OPERATORS,
) -> CompileResult:
    """Compile schema text, stopping at the first stage that fails.

    The whole text is lexed before parsing starts, so a lexical error is
    reported on its own even when a syntax error precedes it.
    """
    try:
        tokens = list(tokenize(text))
    except LexError as err:
        return CompileFailure((err,))
    logger.debug("Lexed %d tokens", len(tokens))

    try:
        document = parse(tokens)
    except SchemaSyntaxError as err:
        return CompileFailure((err,))

    return normalize(document, operators=operators)


def parse_schema(
    text: str,
    *,
    operators: Mapping[str, Cardinality] = DEFAULT_OPERATORS,
) -> SchemaModel:
    """Compile schema text or raise.

    Raises:
        LexError: The text contains a malformed token.
        SchemaSyntaxError: A declaration is structurally malformed.
        ExceptionGroup: One or more semantic errors, all of them grouped.

    """
    match compile_schema(text, operators=operators):
        case CompileSuccess(model=model):
            return model
        case CompileFailure(errors=(LexError() | SchemaSyntaxError() as error,)):
            raise error
        case CompileFailure(errors=errors):
            msg = f"Schema has {len(errors)} error(s)"
            raise ExceptionGroup(msg, list(errors))


def validate(
    text: str,
    *,
    operators: Mapping[str, Cardinality] = DEFAULT_OPERATORS,
) -> ValidationResult:
    """Report whether the text compiles, discarding the model."""
    result = compile_schema(text, operators=operators)
    return ValidationResult(valid=result.ok, diagnostics=result.diagnostics)
