"""Tokenizer for the schema notation."""

from __future__ import annotations

from enum import StrEnum, auto
from typing import TYPE_CHECKING, NamedTuple

from dbcanvas.compiler.errors import LexError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


class TokenKind(StrEnum):
    """Kinds of tokens the lexer produces."""

    IDENTIFIER = auto()
    KEYWORD = auto()
    SYMBOL = auto()
    STRING = auto()
    NUMBER = auto()
    COMMENT = auto()
    EOF = auto()


class Token(NamedTuple):
    """A token and the 1-based position of its first character."""

    kind: TokenKind
    value: str
    line: int
    column: int

    def is_word(self, word: str) -> bool:
        """Check for a bare word, ignoring case."""
        return (
            self.kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD)
            and self.value.lower() == word
        )

    def is_symbol(self, symbol: str) -> bool:
        """Check for a specific symbol."""
        return self.kind is TokenKind.SYMBOL and self.value == symbol

    def describe(self) -> str:
        """Short form used in error messages."""
        if self.kind is TokenKind.EOF:
            return "end of input"
        if self.kind is TokenKind.STRING:
            return "string literal"
        return f"'{self.value}'"


# Declaration keywords, matched case-insensitively; tokens keep the source spelling
KEYWORDS = frozenset({"table", "enum", "ref"})

# Longest symbols first so "<>" wins over "<"
SYMBOLS = ("<>", "{", "}", "[", "]", "(", ")", ":", ",", ".", ">", "<", "-", "#")

QUOTES = "'\"`"

ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", "'": "'", '"': '"', "`": "`"}


def _is_name_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def _is_name_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


class _Scanner:
    """Cursor over the source text that tracks line and column."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.line = 1
        self.column = 1

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def startswith(self, prefix: str) -> bool:
        return self.text.startswith(prefix, self.pos)

    def advance(self, count: int = 1) -> str:
        chunk = self.text[self.pos : self.pos + count]
        for ch in chunk:
            if ch == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        self.pos += len(chunk)
        return chunk

    def take_while(self, predicate: Callable[[str], bool]) -> str:
        start = self.pos
        while self.peek() and predicate(self.peek()):
            self.advance()
        return self.text[start : self.pos]


def _read_string(scanner: _Scanner) -> str:
    """Read a quoted literal starting at the opening quote."""
    line, column = scanner.line, scanner.column
    if scanner.startswith("'''"):
        scanner.advance(3)
        end = scanner.text.find("'''", scanner.pos)
        if end == -1:
            msg = "Unterminated multi-line string"
            raise LexError(msg, line, column)
        value = scanner.advance(end - scanner.pos)
        scanner.advance(3)
        return value

    quote = scanner.advance()
    chars: list[str] = []
    while True:
        ch = scanner.peek()
        if not ch or ch == "\n":
            msg = "Unterminated string literal"
            raise LexError(msg, line, column)
        scanner.advance()
        if ch == quote:
            return "".join(chars)
        if ch == "\\" and scanner.peek():
            escaped = scanner.advance()
            chars.append(ESCAPES.get(escaped, "\\" + escaped))
        else:
            chars.append(ch)


def _read_block_comment(scanner: _Scanner) -> str:
    line, column = scanner.line, scanner.column
    end = scanner.text.find("*/", scanner.pos + 2)
    if end == -1:
        msg = "Unterminated block comment"
        raise LexError(msg, line, column)
    return scanner.advance(end + 2 - scanner.pos)


def tokenize(text: str, *, keep_comments: bool = False) -> Iterator[Token]:
    """Lazily split source text into tokens, ending with a single EOF token.

    Whitespace is dropped. Comments (``// ...`` and ``/* ... */``) are dropped
    unless ``keep_comments`` is set, in which case they are yielded as
    COMMENT tokens. Raises LexError at the first malformed token; nothing
    after it is produced.
    """
    scanner = _Scanner(text)

    while ch := scanner.peek():
        line, column = scanner.line, scanner.column

        if ch.isspace():
            scanner.advance()
            continue

        if scanner.startswith("//"):
            comment = scanner.take_while(lambda c: c != "\n")
            if keep_comments:
                yield Token(TokenKind.COMMENT, comment, line, column)
            continue

        if scanner.startswith("/*"):
            comment = _read_block_comment(scanner)
            if keep_comments:
                yield Token(TokenKind.COMMENT, comment, line, column)
            continue

        if ch in QUOTES:
            yield Token(TokenKind.STRING, _read_string(scanner), line, column)
            continue

        if ch.isdigit():
            number = scanner.take_while(str.isdigit)
            if scanner.peek() == "." and scanner.peek(1).isdigit():
                number += scanner.advance() + scanner.take_while(str.isdigit)
            yield Token(TokenKind.NUMBER, number, line, column)
            continue

        if _is_name_start(ch):
            name = scanner.take_while(_is_name_char)
            if name.lower() in KEYWORDS:
                yield Token(TokenKind.KEYWORD, name, line, column)
            else:
                yield Token(TokenKind.IDENTIFIER, name, line, column)
            continue

        symbol = next((s for s in SYMBOLS if scanner.startswith(s)), None)
        if symbol is None:
            msg = f"Unexpected character {ch!r}"
            raise LexError(msg, line, column)
        scanner.advance(len(symbol))
        yield Token(TokenKind.SYMBOL, symbol, line, column)

    yield Token(TokenKind.EOF, "", scanner.line, scanner.column)
