"""Context-sensitive lexer for .env text."""

from __future__ import annotations

from typing import Iterator

from envfile.tokens import Token, TokenKind

_WHITESPACE = frozenset("\t\v\f \x85\xa0")
_LINE_BREAKS = frozenset("\r\n")
_EXPORT = "export"


class Lexer:
    """Turns .env text into tokens, one call at a time.

    Whether the text after ``=`` is read as an identifier or as a free-form
    value depends on the previous token, so the lexer keeps the kind of the
    last token it returned. Lines are counted from 0, columns from 1.
    """

    def __init__(self, text: str) -> None:
        self._data = text
        self._pos = 0
        self._line = 0
        self._line_start = 0
        self._prev_kind: TokenKind | None = None

    def next_token(self) -> Token:
        token = self._scan()
        self._prev_kind = token.kind
        return token

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.kind is TokenKind.EOF:
                return

    def _scan(self) -> Token:
        while self._peek() in _WHITESPACE:
            self._pos += 1

        char = self._peek()
        line = self._line
        column = self._pos - self._line_start + 1

        if char in _LINE_BREAKS:
            self._consume_line_break()
            return Token(line, column, TokenKind.EOL)
        if not char:
            return Token(line, column, TokenKind.EOF)
        if char == "#":
            return Token(line, column, TokenKind.COMMENT, self._read_comment())
        if char == "=":
            self._pos += 1
            return Token(line, column, TokenKind.EQUALS, "=")
        if char in ("'", '"'):
            literal, closed = self._read_quoted(char)
            if not closed:
                return Token(line, column, TokenKind.ILLEGAL, literal)
            kind = TokenKind.RAW_VALUE if char == "'" else TokenKind.VALUE
            return Token(line, column, kind, literal)
        if self._at_export():
            self._pos += len(_EXPORT)
            return Token(line, column, TokenKind.EXPORT, _EXPORT)
        if self._prev_kind is TokenKind.EQUALS:
            return Token(line, column, TokenKind.VALUE, self._read_unquoted())
        if not _is_ident_start(char):
            self._pos += 1
            return Token(line, column, TokenKind.ILLEGAL, char)
        return Token(line, column, TokenKind.IDENT, self._read_identifier())

    def _peek(self, offset: int = 0) -> str:
        index = self._pos + offset
        if index >= len(self._data):
            return ""
        return self._data[index]

    def _consume_line_break(self) -> None:
        if self._peek() == "\r" and self._peek(1) == "\n":
            self._pos += 1
        self._pos += 1
        self._line += 1
        self._line_start = self._pos

    def _at_export(self) -> bool:
        if not self._data.startswith(_EXPORT, self._pos):
            return False
        return not _is_ident_char(self._peek(len(_EXPORT)))

    def _read_comment(self) -> str:
        self._pos += 1
        start = self._pos
        while self._peek() and self._peek() not in _LINE_BREAKS:
            self._pos += 1
        return self._data[start : self._pos].strip()

    def _read_quoted(self, quote: str) -> tuple[str, bool]:
        self._pos += 1
        chars: list[str] = []
        while self._pos < len(self._data):
            char = self._data[self._pos]
            if char == "\\" and self._peek(1) == quote:
                chars.append(quote)
                self._pos += 2
                continue
            if char == quote:
                self._pos += 1
                return "".join(chars), True
            if char in _LINE_BREAKS:
                start = self._pos
                self._consume_line_break()
                chars.append(self._data[start : self._pos])
                continue
            chars.append(char)
            self._pos += 1
        return "".join(chars), False

    def _read_unquoted(self) -> str:
        start = self._pos
        while self._pos < len(self._data):
            char = self._data[self._pos]
            if char in _LINE_BREAKS:
                break
            if char.isspace() and self._peek(1) == "#":
                break
            self._pos += 1
        return self._data[start : self._pos].strip()

    def _read_identifier(self) -> str:
        start = self._pos
        self._pos += 1
        while _is_ident_char(self._peek()):
            self._pos += 1
        return self._data[start : self._pos]


def tokenize(text: str) -> list[Token]:
    """Return every token of ``text`` up to and including ``EOF``."""
    return list(Lexer(text))


def _is_ident_start(char: str) -> bool:
    return char == "_" or ("a" <= char <= "z") or ("A" <= char <= "Z")


def _is_ident_char(char: str) -> bool:
    return _is_ident_start(char) or ("0" <= char <= "9")
