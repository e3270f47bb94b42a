"""Tagged results of a compiler run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from dbcanvas.compiler.errors import Diagnostic, SchemaError
    from dbcanvas.compiler.types import SchemaModel


@dataclass(frozen=True)
class CompileSuccess:
    """The text compiled into a complete model."""

    model: SchemaModel
    ok: Literal[True] = True

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        """Always empty; present so both variants can be read the same way."""
        return ()


@dataclass(frozen=True)
class CompileFailure:
    """Compilation stopped; ``errors`` holds everything the failing stage found."""

    errors: tuple[SchemaError, ...]
    ok: Literal[False] = False

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        """Diagnostics of every collected error, in source order."""
        return tuple(error.diagnostic for error in self.errors)


type CompileResult = CompileSuccess | CompileFailure


@dataclass(frozen=True)
class ValidationResult:
    """Pass/fail verdict for editors; never carries a model."""

    valid: bool
    diagnostics: tuple[Diagnostic, ...] = ()
