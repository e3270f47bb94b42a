"""Tests for the schema notation tokenizer."""

import pytest

from dbcanvas.compiler import LexError, Token, TokenKind, tokenize


def kinds_and_values(text: str) -> list[tuple[TokenKind, str]]:
    """Tokenize text and drop positions."""
    return [(token.kind, token.value) for token in tokenize(text)]


def test_table_header_tokens() -> None:
    """Test keywords, identifiers and symbols of a table header."""
    assert kinds_and_values("Table users {") == [
        (TokenKind.KEYWORD, "Table"),
        (TokenKind.IDENTIFIER, "users"),
        (TokenKind.SYMBOL, "{"),
        (TokenKind.EOF, ""),
    ]


def test_keywords_keep_source_spelling() -> None:
    """Test that keywords match case-insensitively but keep their spelling."""
    tokens = list(tokenize("TABLE enum Ref"))
    assert [t.kind for t in tokens[:3]] == [TokenKind.KEYWORD] * 3
    assert [t.value for t in tokens[:3]] == ["TABLE", "enum", "Ref"]
    assert tokens[0].is_word("table")


def test_positions_are_one_based() -> None:
    """Test line and column tracking across newlines."""
    tokens = list(tokenize("Table a {\n  id int\n}"))
    assert (tokens[0].line, tokens[0].column) == (1, 1)
    field = tokens[3]
    assert field.value == "id"
    assert (field.line, field.column) == (2, 3)
    closing = tokens[5]
    assert closing.is_symbol("}")
    assert (closing.line, closing.column) == (3, 1)


def test_many_to_many_operator_is_one_symbol() -> None:
    """Test that '<>' is not split into '<' and '>'."""
    values = [t.value for t in tokenize("a.b <> c.d")]
    assert values == ["a", ".", "b", "<>", "c", ".", "d", ""]


def test_line_comments_dropped_by_default() -> None:
    """Test that line comments produce no tokens."""
    assert kinds_and_values("// header\nTable") == [
        (TokenKind.KEYWORD, "Table"),
        (TokenKind.EOF, ""),
    ]


def test_comments_kept_on_request() -> None:
    """Test that comments become COMMENT tokens with keep_comments."""
    tokens = list(tokenize("/* block */ x // tail", keep_comments=True))
    assert [(t.kind, t.value) for t in tokens] == [
        (TokenKind.COMMENT, "/* block */"),
        (TokenKind.IDENTIFIER, "x"),
        (TokenKind.COMMENT, "// tail"),
        (TokenKind.EOF, ""),
    ]


def test_string_quotes_and_escapes() -> None:
    """Test every quote style and backslash escapes."""
    tokens = list(tokenize(r"""'it\'s' "a\tb" `now()` '''multi
line'''"""))
    assert [t.kind for t in tokens[:4]] == [TokenKind.STRING] * 4
    assert [t.value for t in tokens[:4]] == ["it's", "a\tb", "now()", "multi\nline"]


def test_numbers_with_fraction() -> None:
    """Test integer and decimal numbers."""
    assert kinds_and_values("10 2.5") == [
        (TokenKind.NUMBER, "10"),
        (TokenKind.NUMBER, "2.5"),
        (TokenKind.EOF, ""),
    ]


def test_unterminated_string_reports_opening_position() -> None:
    """Test that an unterminated string fails at its opening quote."""
    with pytest.raises(LexError, match="Unterminated string literal") as exc_info:
        list(tokenize("Table a {\n  note varchar [note: 'oops]\n}"))
    assert (exc_info.value.line, exc_info.value.column) == (2, 23)


def test_newline_ends_single_line_string() -> None:
    """Test that a single-quoted string cannot span lines."""
    with pytest.raises(LexError, match="Unterminated string literal"):
        list(tokenize("'first\nsecond'"))


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("'''never closed", "Unterminated multi-line string"),
        ("/* never closed", "Unterminated block comment"),
        ("Table a { id int @ }", "Unexpected character '@'"),
    ],
)
def test_malformed_tokens(text: str, message: str) -> None:
    """Test each kind of lexical failure."""
    with pytest.raises(LexError, match=message):
        list(tokenize(text))


def test_tokenize_is_lazy() -> None:
    """Test that tokens before a lexical error are still produced."""
    tokens = tokenize("Table users @")
    assert next(tokens) == Token(TokenKind.KEYWORD, "Table", 1, 1)
    assert next(tokens).value == "users"
    with pytest.raises(LexError):
        next(tokens)


def test_empty_input_yields_only_eof() -> None:
    """Test that empty text still terminates with EOF."""
    assert list(tokenize("")) == [Token(TokenKind.EOF, "", 1, 1)]
