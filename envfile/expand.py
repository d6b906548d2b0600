"""Shell-style ``$NAME`` / ``${NAME}`` expansion."""

from __future__ import annotations

from typing import Callable, Optional

Lookup = Callable[[str], Optional[str]]

_SPECIAL_NAMES = frozenset("*#$@!?-0123456789")


def expand(text: str, lookup: Lookup) -> str:
    """Replace ``$NAME``, ``${NAME}`` and special names using ``lookup``.

    ``\\$`` yields a literal ``$``; inside a run of backslashes in front of
    ``$`` each pair collapses to one backslash. Unknown names expand to the
    empty string, an unterminated ``${`` drops the rest of the text, and a
    ``$`` that cannot start a name is kept as is. Never raises.
    """
    out: list[str] = []
    i = 0
    size = len(text)
    while i < size:
        char = text[i]
        if char == "\\":
            end = i
            while end < size and text[end] == "\\":
                end += 1
            if end < size and text[end] == "$":
                run = end - i
                out.append("\\" * (run // 2))
                if run % 2:
                    out.append("$")
                    i = end + 1
                else:
                    i = end
            else:
                out.append(text[i:end])
                i = end
            continue
        if char != "$":
            out.append(char)
            i += 1
            continue

        name, width = _shell_name(text, i + 1)
        if name:
            out.append(lookup(name) or "")
        elif width == 0:
            out.append("$")
        i += 1 + width
    return "".join(out)


def _shell_name(text: str, start: int) -> tuple[str, int]:
    """Return the name after a ``$`` and how many characters it spans.

    An empty name with a non-zero width is invalid syntax whose characters
    are discarded; an empty name with zero width means no name at all.
    """
    if start >= len(text):
        return "", 0
    char = text[start]
    if char == "{":
        close = text.find("}", start + 1)
        if close < 0:
            return "", len(text) - start
        return text[start + 1 : close], close + 1 - start
    if char in _SPECIAL_NAMES:
        return char, 1
    end = start
    while end < len(text) and _is_name_char(text[end]):
        end += 1
    return text[start:end], end - start


def _is_name_char(char: str) -> bool:
    return (
        char == "_"
        or ("a" <= char <= "z")
        or ("A" <= char <= "Z")
        or ("0" <= char <= "9")
    )
