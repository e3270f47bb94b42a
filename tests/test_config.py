"""Tests for TOML settings loading."""

from pathlib import Path

import pytest

from dbcanvas.compiler import DEFAULT_OPERATORS, Cardinality
from dbcanvas.config import Settings, load_settings
from dbcanvas.diagram import LayoutConfig


def write_config(tmp_path: Path, text: str) -> Path:
    """Write a config file and return its path."""
    path = tmp_path / "dbcanvas.toml"
    path.write_text(text)
    return path


def test_defaults_without_path() -> None:
    """Test that no config file means default settings."""
    settings = load_settings()
    assert settings == Settings()
    assert settings.layout == LayoutConfig()
    assert settings.operators == DEFAULT_OPERATORS


def test_layout_section(tmp_path: Path) -> None:
    """Test that layout options are read."""
    path = write_config(
        tmp_path,
        "[layout]\ntable_width = 300\npadding = 20\n"
        "columns_per_row = 4\nmax_nodes = 50\n",
    )
    settings = load_settings(path)
    assert settings.layout == LayoutConfig(
        table_width=300,
        padding=20,
        columns_per_row=4,
        max_nodes=50,
    )


def test_cardinality_overrides_merge_with_defaults(tmp_path: Path) -> None:
    """Test that overriding one operator keeps the others."""
    path = write_config(tmp_path, '[cardinality]\n">" = "one-to-many"\n')
    operators = load_settings(path).operators
    assert operators[">"] is Cardinality.ONE_TO_MANY
    assert operators["<"] is Cardinality.ONE_TO_MANY
    assert operators["<>"] is Cardinality.MANY_TO_MANY


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    """Test that an empty file is valid."""
    assert load_settings(write_config(tmp_path, "")) == Settings()


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("[layout]\nwidth = 10\n", "Unknown layout option"),
        ("[layout]\ncolumns_per_row = 0\n", "columns_per_row must be at least 1"),
        ("[layout]\ncolumns_per_row = 2.5\n", "columns_per_row must be an integer"),
        ('[cardinality]\n"=>" = "one-to-one"\n', "Unknown relationship operator"),
        ('[cardinality]\n">" = "few-to-one"\n', "Unknown cardinality"),
        ("[layout\n", "Invalid TOML"),
    ],
)
def test_invalid_settings(tmp_path: Path, text: str, message: str) -> None:
    """Test that bad config values are ValueErrors."""
    with pytest.raises(ValueError, match=message):
        load_settings(write_config(tmp_path, text))
