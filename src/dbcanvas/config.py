"""Module for loading layout and notation settings from TOML."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from logging import getLogger
from tomllib import TOMLDecodeError, load
from typing import TYPE_CHECKING, Any

from dbcanvas.compiler.parser import RELATION_OPERATORS
from dbcanvas.compiler.types import DEFAULT_OPERATORS, Cardinality
from dbcanvas.diagram.types import LayoutConfig

if TYPE_CHECKING:
    from pathlib import Path

logger = getLogger(__name__)

LAYOUT_KEYS = frozenset(f.name for f in fields(LayoutConfig))


@dataclass(frozen=True)
class Settings:
    """Everything a compile-and-layout run can be configured with."""

    layout: LayoutConfig = field(default_factory=LayoutConfig)
    operators: dict[str, Cardinality] = field(
        default_factory=lambda: dict(DEFAULT_OPERATORS),
    )


def parse_layout(table: dict[str, Any]) -> LayoutConfig:
    """Build a LayoutConfig from a ``[layout]`` table."""
    if unknown := set(table) - LAYOUT_KEYS:
        msg = f"Unknown layout option(s): {', '.join(sorted(unknown))}"
        raise ValueError(msg)
    return LayoutConfig(**table)


def parse_operators(table: dict[str, Any]) -> dict[str, Cardinality]:
    """Overlay a ``[cardinality]`` table onto the default operator mapping."""
    operators = dict(DEFAULT_OPERATORS)
    for operator, name in table.items():
        if operator not in RELATION_OPERATORS:
            msg = f"Unknown relationship operator: {operator!r}"
            raise ValueError(msg)
        try:
            operators[operator] = Cardinality(name)
        except ValueError as err:
            msg = f"Unknown cardinality for {operator!r}: {name!r}"
            raise ValueError(msg) from err
    return operators


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from a TOML file, or the defaults when no path is given."""
    if path is None:
        return Settings()

    try:
        with path.open("rb") as f:
            data = load(f)
    except TOMLDecodeError as err:
        msg = f"Invalid TOML in {path}: {err}"
        raise ValueError(msg) from err

    logger.debug("Loaded settings from %s", path)
    return Settings(
        layout=parse_layout(data.get("layout", {})),
        operators=parse_operators(data.get("cardinality", {})),
    )
