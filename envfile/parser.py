"""Assemble lexer tokens into ordered key/value entries."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, Iterator, Union

from envfile.lexer import Lexer
from envfile.tokens import Token, TokenKind

Source = Union[str, Iterable[Token]]

_VALUE_KINDS = frozenset({TokenKind.VALUE, TokenKind.RAW_VALUE})
_LINE_END_KINDS = frozenset({TokenKind.COMMENT, TokenKind.EOL, TokenKind.EOF})


class ParseError(ValueError):
    """Raised when .env text does not match the assignment grammar."""


class UnexpectedToken(ParseError):
    """A token that cannot appear where the strict parser found it."""

    def __init__(self, token: Token) -> None:
        super().__init__(f"Unexpected token {token}")
        self.token = token

    @property
    def kind(self) -> TokenKind:
        return self.token.kind

    @property
    def literal(self) -> str:
        return self.token.literal

    @property
    def line(self) -> int:
        return self.token.line

    @property
    def column(self) -> int:
        return self.token.column


@dataclass(frozen=True)
class ParseEntry:
    key: str
    value: str
    raw: bool = False


class _MatchState(enum.Enum):
    IDLE = "idle"
    SAW_KEY = "saw_key"
    SAW_KEY_EQUALS = "saw_key_equals"


def parse(source: Source) -> list[ParseEntry]:
    """Best-effort parse; incomplete or malformed assignments are dropped."""
    entries: list[ParseEntry] = []
    state = _MatchState.IDLE
    key = ""
    for token in _tokens(source):
        kind = token.kind
        if kind is TokenKind.IDENT:
            state = _MatchState.SAW_KEY
            key = token.literal
        elif kind is TokenKind.EQUALS:
            if state is _MatchState.SAW_KEY:
                state = _MatchState.SAW_KEY_EQUALS
        else:
            if state is _MatchState.SAW_KEY_EQUALS:
                if kind in _VALUE_KINDS:
                    entries.append(
                        ParseEntry(
                            key, token.literal, raw=kind is TokenKind.RAW_VALUE
                        )
                    )
                elif kind in _LINE_END_KINDS:
                    entries.append(ParseEntry(key, ""))
            state = _MatchState.IDLE
        if kind is TokenKind.EOF:
            break
    return entries


def parse_strict(
    source: Source,
) -> tuple[list[ParseEntry], UnexpectedToken | None]:
    """Parse until the first token that breaks the grammar.

    Returns the entries read so far together with the error, or ``None``
    when the whole input was valid. The error is returned, never raised.
    """
    tokens = _tokens(source)
    entries: list[ParseEntry] = []
    try:
        for token in tokens:
            if token.kind is TokenKind.EOF:
                break
            if token.kind in _LINE_END_KINDS:
                continue
            if token.kind is TokenKind.EXPORT:
                token = _expect(tokens, token, TokenKind.IDENT)
            if token.kind is not TokenKind.IDENT:
                raise UnexpectedToken(token)
            equals = _expect(tokens, token, TokenKind.EQUALS)
            value = _next(tokens, equals)
            if value.kind in _VALUE_KINDS:
                entries.append(
                    ParseEntry(
                        token.literal,
                        value.literal,
                        raw=value.kind is TokenKind.RAW_VALUE,
                    )
                )
            elif value.kind in _LINE_END_KINDS:
                entries.append(ParseEntry(token.literal, ""))
                if value.kind is TokenKind.EOF:
                    break
            else:
                raise UnexpectedToken(value)
    except UnexpectedToken as exc:
        return entries, exc
    return entries, None


def _tokens(source: Source) -> Iterator[Token]:
    if isinstance(source, str):
        return iter(Lexer(source))
    return iter(source)


def _next(tokens: Iterator[Token], previous: Token) -> Token:
    token = next(tokens, None)
    if token is None:
        return Token(previous.line, previous.column, TokenKind.EOF)
    return token


def _expect(tokens: Iterator[Token], previous: Token, kind: TokenKind) -> Token:
    token = _next(tokens, previous)
    if token.kind is not kind:
        raise UnexpectedToken(token)
    return token
