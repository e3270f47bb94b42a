"""Recursive descent parser from tokens to a syntax tree."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, NamedTuple

from dbcanvas.compiler.errors import SchemaSyntaxError
from dbcanvas.compiler.lexer import Token, TokenKind
from dbcanvas.compiler.syntax import (
    ColumnRef,
    Declaration,
    Document,
    EnumDecl,
    EnumValueDecl,
    FieldDecl,
    IndexDecl,
    InlineRef,
    RefDecl,
    TableDecl,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = getLogger(__name__)

RELATION_OPERATORS = frozenset({">", "<", "-", "<>"})

NAME_KINDS = (TokenKind.IDENTIFIER, TokenKind.KEYWORD)
# Table, field and enum names may also be quoted, as in "order items"
IDENTIFIER_KINDS = (*NAME_KINDS, TokenKind.STRING)

OPENERS = {"(": ")", "[": "]", "{": "}"}


class _Setting(NamedTuple):
    """One ``key[: value]`` entry of a ``[...]`` settings list."""

    key: str
    token: Token
    value: str | None = None
    ref: InlineRef | None = None


class Parser:
    """Parses one token stream into a Document."""

    def __init__(self, tokens: Iterable[Token]) -> None:
        self.tokens = [t for t in tokens if t.kind is not TokenKind.COMMENT]
        if not self.tokens or self.tokens[-1].kind is not TokenKind.EOF:
            last = self.tokens[-1] if self.tokens else None
            line, column = (last.line, last.column) if last else (1, 1)
            self.tokens.append(Token(TokenKind.EOF, "", line, column))
        self.pos = 0

    # Token helpers

    def peek(self, offset: int = 0) -> Token:
        return self.tokens[min(self.pos + offset, len(self.tokens) - 1)]

    def advance(self) -> Token:
        token = self.peek()
        if token.kind is not TokenKind.EOF:
            self.pos += 1
        return token

    def error(self, message: str, token: Token | None = None) -> SchemaSyntaxError:
        token = token or self.peek()
        return SchemaSyntaxError(
            f"{message}, found {token.describe()}",
            token.line,
            token.column,
        )

    def expect_symbol(self, symbol: str, context: str) -> Token:
        if not self.peek().is_symbol(symbol):
            msg = f"Expected '{symbol}' {context}"
            raise self.error(msg)
        return self.advance()

    def expect_name(self, what: str) -> Token:
        if self.peek().kind not in NAME_KINDS:
            msg = f"Expected {what}"
            raise self.error(msg)
        return self.advance()

    def expect_identifier(self, what: str) -> Token:
        if self.peek().kind not in IDENTIFIER_KINDS:
            msg = f"Expected {what}"
            raise self.error(msg)
        return self.advance()

    def expect_string(self, what: str) -> str:
        if self.peek().kind is not TokenKind.STRING:
            msg = f"Expected {what}"
            raise self.error(msg)
        return self.advance().value

    def check_unclosed(self, opener: Token, what: str) -> None:
        """Raise if the body opened at ``opener`` runs into end of input."""
        if self.peek().kind is TokenKind.EOF:
            msg = (
                f"Unclosed '{opener.value}' of {what} "
                f"opened at line {opener.line}, column {opener.column}"
            )
            raise self.error(msg)

    # Declarations

    def parse_document(self) -> Document:
        declarations: list[Declaration] = []
        while (token := self.peek()).kind is not TokenKind.EOF:
            if token.is_word("table"):
                declarations.append(self.parse_table())
            elif token.is_word("enum"):
                declarations.append(self.parse_enum())
            elif token.is_word("ref"):
                declarations.extend(self.parse_ref())
            else:
                msg = "Expected 'Table', 'Enum' or 'Ref'"
                raise self.error(msg)
        logger.debug("Parsed %d declarations", len(declarations))
        return Document(tuple(declarations))

    def parse_table(self) -> TableDecl:
        """``Table name [as alias] [settings] { field* indexes? note? }``."""
        self.advance()
        name = self.expect_identifier("table name")
        alias = None
        if self.peek().is_word("as"):
            self.advance()
            alias = self.expect_identifier("table alias").value
        if self.peek().is_symbol("["):
            self.parse_settings()
        opener = self.expect_symbol("{", f"to open table '{name.value}'")

        fields: list[FieldDecl] = []
        indexes: list[IndexDecl] = []
        note = None
        while not self.peek().is_symbol("}"):
            self.check_unclosed(opener, f"table '{name.value}'")
            token, following = self.peek(), self.peek(1)
            if token.is_word("note") and (
                following.is_symbol(":") or following.is_symbol("{")
            ):
                note = self.parse_note()
            elif token.is_word("indexes") and following.is_symbol("{"):
                indexes.extend(self.parse_indexes())
            else:
                fields.append(self.parse_field())
        self.advance()

        return TableDecl(
            name=name.value,
            line=name.line,
            column=name.column,
            alias=alias,
            fields=tuple(fields),
            indexes=tuple(indexes),
            note=note,
        )

    def parse_note(self) -> str:
        """``Note: 'text'`` or ``Note { 'text' }``."""
        self.advance()
        if self.peek().is_symbol(":"):
            self.advance()
            return self.expect_string("note text")
        opener = self.advance()
        text = self.expect_string("note text")
        self.check_unclosed(opener, "note")
        self.expect_symbol("}", "to close note")
        return text

    def parse_field(self) -> FieldDecl:
        """``name type [settings]``."""
        name = self.expect_identifier("field name")
        type_name = self.parse_type(name.value)

        primary_key = unique = not_null = increment = False
        note = default = None
        refs: list[InlineRef] = []
        for setting in self.parse_settings() if self.peek().is_symbol("[") else []:
            match setting.key:
                case "pk" | "primary key":
                    primary_key = True
                case "unique":
                    unique = True
                case "not null":
                    not_null = True
                case "null":
                    not_null = False
                case "increment":
                    increment = True
                case "note":
                    note = setting.value
                case "default":
                    default = setting.value
                case "ref" if setting.ref is not None:
                    refs.append(setting.ref)
                case _:
                    logger.debug(
                        "Ignoring setting '%s' on field '%s' at %d:%d",
                        setting.key,
                        name.value,
                        setting.token.line,
                        setting.token.column,
                    )

        return FieldDecl(
            name=name.value,
            type=type_name,
            line=name.line,
            column=name.column,
            primary_key=primary_key,
            unique=unique,
            not_null=not_null,
            increment=increment,
            note=note,
            default=default,
            refs=tuple(refs),
        )

    def parse_type(self, field_name: str) -> str:
        """``name``, ``"quoted name"``, ``name(args)`` or ``name[]``."""
        token = self.peek()
        if token.kind not in IDENTIFIER_KINDS:
            msg = f"Expected type for field '{field_name}'"
            raise self.error(msg)
        self.advance()
        type_name = token.value

        if self.peek().is_symbol("("):
            opener = self.advance()
            args: list[str] = []
            while not self.peek().is_symbol(")"):
                self.check_unclosed(opener, f"type of field '{field_name}'")
                arg = self.advance()
                if arg.kind in (TokenKind.NUMBER, TokenKind.STRING, *NAME_KINDS):
                    args.append(arg.value)
                elif not arg.is_symbol(","):
                    msg = f"Unexpected token in type of field '{field_name}'"
                    raise self.error(msg, arg)
            self.advance()
            type_name = f"{type_name}({','.join(args)})"

        if self.peek().is_symbol("[") and self.peek(1).is_symbol("]"):
            self.advance()
            self.advance()
            type_name = f"{type_name}[]"

        return type_name

    def parse_indexes(self) -> list[IndexDecl]:
        """``indexes { column [settings]  (a, b) [settings] }``."""
        self.advance()
        opener = self.advance()
        indexes: list[IndexDecl] = []
        while not self.peek().is_symbol("}"):
            self.check_unclosed(opener, "indexes")
            start = self.peek()
            if start.is_symbol("("):
                self.advance()
                columns = [self.expect_identifier("index column").value]
                while self.peek().is_symbol(","):
                    self.advance()
                    columns.append(self.expect_identifier("index column").value)
                self.expect_symbol(")", "to close index columns")
            else:
                columns = [self.expect_identifier("index column").value]

            keys = (
                {s.key for s in self.parse_settings()}
                if self.peek().is_symbol("[")
                else set()
            )
            indexes.append(
                IndexDecl(
                    columns=tuple(columns),
                    line=start.line,
                    column=start.column,
                    primary_key=bool(keys & {"pk", "primary key"}),
                    unique="unique" in keys,
                ),
            )
        self.advance()
        return indexes

    def parse_enum(self) -> EnumDecl:
        """``Enum name { value [settings] ... }``."""
        self.advance()
        name = self.expect_identifier("enum name")
        opener = self.expect_symbol("{", f"to open enum '{name.value}'")
        values: list[EnumValueDecl] = []
        while not self.peek().is_symbol("}"):
            self.check_unclosed(opener, f"enum '{name.value}'")
            token = self.peek()
            if token.kind not in IDENTIFIER_KINDS:
                msg = f"Expected value of enum '{name.value}'"
                raise self.error(msg)
            self.advance()
            note = None
            if self.peek().is_symbol("["):
                for setting in self.parse_settings():
                    if setting.key == "note":
                        note = setting.value
            values.append(EnumValueDecl(token.value, token.line, token.column, note))
        self.advance()
        return EnumDecl(name.value, name.line, name.column, tuple(values))

    def parse_ref(self) -> list[RefDecl]:
        """``Ref [name]: a.b > c.d`` or ``Ref [name] { a.b > c.d ... }``."""
        keyword = self.advance()
        name = None
        if self.peek().kind in NAME_KINDS:
            name = self.advance().value

        if self.peek().is_symbol(":"):
            self.advance()
            return [self.parse_ref_body(name, keyword)]

        if self.peek().is_symbol("{"):
            opener = self.advance()
            refs: list[RefDecl] = []
            while not self.peek().is_symbol("}"):
                self.check_unclosed(opener, "Ref block")
                refs.append(self.parse_ref_body(name))
            self.advance()
            return refs

        msg = "Expected ':' after 'Ref'"
        raise self.error(msg)

    def parse_ref_body(self, name: str | None, anchor: Token | None = None) -> RefDecl:
        source = self.parse_column_ref()
        operator = self.parse_operator()
        target = self.parse_column_ref()
        if self.peek().is_symbol("["):
            self.parse_settings()
        return RefDecl(
            source=source,
            operator=operator,
            target=target,
            line=anchor.line if anchor else source.line,
            column=anchor.column if anchor else source.column,
            name=name,
        )

    def parse_operator(self) -> str:
        token = self.peek()
        if token.kind is not TokenKind.SYMBOL or token.value not in RELATION_OPERATORS:
            msg = "Expected relationship operator '>', '<', '-' or '<>'"
            raise self.error(msg)
        return self.advance().value

    def parse_column_ref(self) -> ColumnRef:
        """``table.field``."""
        table = self.expect_identifier("table name")
        self.expect_symbol(".", f"after table name '{table.value}'")
        field = self.expect_identifier(f"field name after '{table.value}.'")
        return ColumnRef(table.value, field.value, table.line, table.column)

    # Settings

    def parse_settings(self) -> list[_Setting]:
        """``[ key, key: value, ... ]``, keys lowercased with words space-joined."""
        opener = self.advance()
        settings: list[_Setting] = []
        while not self.peek().is_symbol("]"):
            self.check_unclosed(opener, "settings")
            start = self.peek()
            words = [self.expect_name("setting name").value.lower()]
            while self.peek().kind in NAME_KINDS:
                words.append(self.advance().value.lower())
            key = " ".join(words)

            setting = _Setting(key, start)
            if self.peek().is_symbol(":"):
                self.advance()
                if key == "ref":
                    operator_token = self.peek()
                    operator = self.parse_operator()
                    ref = InlineRef(
                        operator,
                        self.parse_column_ref(),
                        operator_token.line,
                        operator_token.column,
                    )
                    setting = _Setting(key, start, ref=ref)
                elif key == "note":
                    setting = _Setting(key, start, self.expect_string("note text"))
                elif key == "default":
                    setting = _Setting(key, start, self.parse_default())
                else:
                    self.skip_value(opener)
            settings.append(setting)

            if self.peek().is_symbol(","):
                self.advance()
            elif not self.peek().is_symbol("]"):
                self.check_unclosed(opener, "settings")
                msg = "Expected ',' or ']' in settings"
                raise self.error(msg)
        self.advance()
        return settings

    def parse_default(self) -> str:
        token = self.peek()
        if token.is_symbol("-") and self.peek(1).kind is TokenKind.NUMBER:
            self.advance()
            return "-" + self.advance().value
        if token.kind in (TokenKind.STRING, TokenKind.NUMBER, *NAME_KINDS):
            return self.advance().value
        msg = "Expected default value"
        raise self.error(msg)

    def skip_value(self, opener: Token) -> None:
        """Skip an unrecognized setting value up to the next ',' or ']'."""
        closers: list[str] = []
        while True:
            self.check_unclosed(opener, "settings")
            token = self.peek()
            if not closers and (token.is_symbol(",") or token.is_symbol("]")):
                return
            if token.kind is TokenKind.SYMBOL and token.value in OPENERS:
                closers.append(OPENERS[token.value])
            elif closers and token.is_symbol(closers[-1]):
                closers.pop()
            self.advance()


def parse(tokens: Iterable[Token]) -> Document:
    """Parse a token stream into a syntax tree; raises SchemaSyntaxError."""
    return Parser(tokens).parse_document()
