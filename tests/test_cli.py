"""Tests for the dbcanvas command line."""

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from dbcanvas.cli import app, diagram, schema, summary, validate

BLOG_SCHEMA = """
Table users { id integer [primary key] name varchar }
Table posts { id integer [primary key] user_id integer }
Ref: posts.user_id > users.id
"""


def flatten(text: str) -> str:
    """Undo console line wrapping."""
    return " ".join(text.split())


@pytest.fixture(name="blog_file")
def blog_schema_file(tmp_path: Path) -> Path:
    """Write the blog schema to a file."""
    path = tmp_path / "blog.dbml"
    path.write_text(BLOG_SCHEMA)
    return path


@pytest.fixture(name="broken_file")
def broken_schema_file(tmp_path: Path) -> Path:
    """Write a schema with a dangling reference."""
    path = tmp_path / "broken.dbml"
    path.write_text("Table posts { user_id int }\nRef: posts.user_id > users.id\n")
    return path


def test_validate_valid_file(
    blog_file: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Test that a valid file reports success on stderr."""
    validate(blog_file)
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "is valid" in flatten(captured.err)


def test_validate_invalid_file_exits(
    broken_file: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Test the exit code and diagnostic for an invalid file."""
    with pytest.raises(SystemExit) as exc_info:
        validate(broken_file)
    assert exc_info.value.code == 1
    assert "Unknown table 'users'" in flatten(capsys.readouterr().err)


def test_validate_json_through_app(
    broken_file: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Test argument parsing and the JSON verdict."""
    with pytest.raises(SystemExit) as exc_info:
        app(["validate", str(broken_file), "--fmt", "json"])
    assert exc_info.value.code == 1
    verdict = json.loads(capsys.readouterr().out)
    assert verdict["valid"] is False
    assert verdict["error"].startswith("2:")
    assert verdict["diagnostics"][0]["kind"] == "unresolved_reference"


def test_missing_source_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that a missing file is reported."""
    with pytest.raises(SystemExit):
        schema(tmp_path / "absent.dbml")
    assert "does not exist" in flatten(capsys.readouterr().err)


def test_schema_json(blog_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test the canonical JSON on stdout."""
    schema(blog_file)
    document = json.loads(capsys.readouterr().out)
    assert [t["name"] for t in document["tables"]] == ["users", "posts"]
    assert document["refs"][0]["cardinality"] == "many-to-one"


def test_schema_sql(blog_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test the DDL on stdout."""
    schema(blog_file, "sql", dialect="postgresql")
    out = capsys.readouterr().out
    assert out.count("CREATE TABLE") == 2
    assert "REFERENCES users (id)" in out


def test_schema_fails_on_invalid_file(
    broken_file: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Test that nothing is written to stdout on failure."""
    with pytest.raises(SystemExit):
        schema(broken_file)
    captured = capsys.readouterr()
    assert captured.out == ""
    assert f"{broken_file}:2:" in captured.err.replace("\n", "")


def test_diagram_json(blog_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test the node/edge JSON on stdout."""
    diagram(blog_file)
    flow = json.loads(capsys.readouterr().out)
    assert [(n["id"], n["position"]) for n in flow["nodes"]] == [
        ("users", {"x": 50, "y": 50}),
        ("posts", {"x": 300, "y": 50}),
    ]
    assert flow["edges"][0]["data"]["label"] == "user_id → id"


def test_diagram_uses_config(
    blog_file: Path,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Test that layout options come from the config file."""
    config = tmp_path / "dbcanvas.toml"
    config.write_text("[layout]\ncolumns_per_row = 1\n")
    diagram(blog_file, config=config)
    flow = json.loads(capsys.readouterr().out)
    assert flow["nodes"][1]["position"] == {"x": 50, "y": 300}


def test_diagram_rejects_bad_config(
    blog_file: Path,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Test that config errors exit with a message."""
    config = tmp_path / "dbcanvas.toml"
    config.write_text("[layout]\nmax_nodes = 1\n")
    with pytest.raises(SystemExit):
        diagram(blog_file, config=config)
    assert "layout limit is 1" in flatten(capsys.readouterr().err)


def test_diagram_html(blog_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test the HTML page titled after the file."""
    diagram(blog_file, "html")
    out = capsys.readouterr().out
    assert "<title>blog</title>" in out
    assert 'data-table="posts"' in out


def test_summary(blog_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test the overview table."""
    summary(blog_file)
    out = capsys.readouterr().out
    assert "users" in out
    assert "posts" in out
    assert "2 tables, 0 enums, 1 relationships" in out


@pytest.mark.parametrize("command", [validate, schema, diagram, summary])
def test_undecodable_source_file(
    command: Callable[[Path], None],
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Test that a file that is not UTF-8 exits with a message."""
    path = tmp_path / "latin1.dbml"
    path.write_bytes(b"Table t { id int [note: '\xff'] }\n")
    with pytest.raises(SystemExit) as exc_info:
        command(path)
    assert exc_info.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "not valid UTF-8" in flatten(captured.err)


def test_utf8_source_decoded_regardless_of_locale(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Test that non-ASCII notes survive into the JSON model."""
    path = tmp_path / "notes.dbml"
    path.write_bytes("Table t { id int [note: 'clé primaire'] }\n".encode())
    schema(path)
    document = json.loads(capsys.readouterr().out)
    assert document["tables"][0]["fields"][0]["note"] == "clé primaire"
