"""Typed environment variable accessors with fallback values."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import ClassVar, Generic, Mapping, TypeVar

T = TypeVar("T")

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_LEADING_ZERO_OCTAL = re.compile(r"[+-]?0[0-7]+")


def parse_string(raw: str) -> str:
    return raw


def parse_int(raw: str) -> int | None:
    """Parse a base-prefixed integer (``0x``, ``0o``, ``0b``) or a decimal.

    A bare leading zero marks octal, so ``017`` is 15.
    """
    if raw != raw.strip():
        return None
    if _LEADING_ZERO_OCTAL.fullmatch(raw):
        return int(raw, 8)
    try:
        return int(raw, 0)
    except ValueError:
        return None


def parse_float(raw: str) -> float | None:
    if raw != raw.strip():
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def parse_bool(raw: str) -> bool | None:
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    return None


@dataclass(frozen=True)
class EnvVar(Generic[T]):
    """A named variable read through a typed parser.

    ``get`` falls back when the variable is unset, empty or unparsable.
    ``lookup`` falls back only when the variable is unset; a set but
    unparsable value reads as the type's zero value.
    """

    name: str
    environ: Mapping[str, str] | None = None

    zero: ClassVar[object] = None

    def get(self, *fallback: T) -> T:
        raw = self._environ().get(self.name, "")
        if raw == "" and fallback:
            return fallback[0]
        parsed = self.parse(raw)
        if parsed is None:
            return fallback[0] if fallback else self.zero  # type: ignore[return-value]
        return parsed

    def lookup(self, *fallback: T) -> T:
        environ = self._environ()
        if self.name not in environ:
            return fallback[0] if fallback else self.zero  # type: ignore[return-value]
        parsed = self.parse(environ[self.name])
        return self.zero if parsed is None else parsed  # type: ignore[return-value]

    def parse(self, raw: str) -> T | None:
        raise NotImplementedError

    def _environ(self) -> Mapping[str, str]:
        return os.environ if self.environ is None else self.environ


class StringVar(EnvVar[str]):
    zero: ClassVar[object] = ""

    def parse(self, raw: str) -> str | None:
        return parse_string(raw)


class IntVar(EnvVar[int]):
    zero: ClassVar[object] = 0

    def parse(self, raw: str) -> int | None:
        return parse_int(raw)


class FloatVar(EnvVar[float]):
    zero: ClassVar[object] = 0.0

    def parse(self, raw: str) -> float | None:
        return parse_float(raw)


class BoolVar(EnvVar[bool]):
    zero: ClassVar[object] = False

    def parse(self, raw: str) -> bool | None:
        return parse_bool(raw)
