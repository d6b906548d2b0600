"""Token types produced by the lexer."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class TokenKind(str, enum.Enum):
    EXPORT = "EXPORT"
    IDENT = "IDENT"
    EQUALS = "EQUALS"
    VALUE = "VALUE"
    RAW_VALUE = "RAW_VALUE"
    COMMENT = "COMMENT"
    EOL = "EOL"
    EOF = "EOF"
    ILLEGAL = "ILLEGAL"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Token:
    line: int
    column: int
    kind: TokenKind
    literal: str = ""

    def __str__(self) -> str:
        return (
            f"{self.kind} value={self.literal} "
            f"line={self.line} pos={self.column}"
        )
