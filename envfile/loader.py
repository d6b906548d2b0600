"""Load .env files into an environment mapping."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, MutableMapping, Sequence, Union

from envfile.expand import expand
from envfile.lexer import Lexer
from envfile.parser import ParseEntry, parse, parse_strict

DEFAULT_ENV_FILE = ".env"

StrPath = Union[str, os.PathLike]

_LOGGER = logging.getLogger(__name__)


def parse_file(path: StrPath) -> Lexer:
    """Return a lexer over the content of ``path``.

    Nothing is assigned; feed the result to ``parse`` or ``parse_strict``.
    """
    text = Path(path).read_text(encoding="utf-8")
    return Lexer(text)


def load(
    *paths: StrPath, environ: MutableMapping[str, str] | None = None
) -> None:
    """Load files in order, keeping variables that are already set."""
    load_files(paths, environ, strict=False, overwrite=False)


def load_strict(
    *paths: StrPath, environ: MutableMapping[str, str] | None = None
) -> None:
    """Like ``load`` but stop at the first file with invalid syntax.

    Files before the invalid one stay applied, the invalid file and every
    file after it are skipped, and the parse error is raised.
    """
    load_files(paths, environ, strict=True, overwrite=False)


def overload(
    *paths: StrPath, environ: MutableMapping[str, str] | None = None
) -> None:
    """Load files in order, replacing variables that are already set."""
    load_files(paths, environ, strict=False, overwrite=True)


def overload_strict(
    *paths: StrPath, environ: MutableMapping[str, str] | None = None
) -> None:
    """Like ``overload`` with the strict syntax policy of ``load_strict``."""
    load_files(paths, environ, strict=True, overwrite=True)


def assign_entries(
    entries: Iterable[ParseEntry],
    environ: MutableMapping[str, str],
    *,
    overwrite: bool,
    expand_values: bool = True,
) -> list[str]:
    """Assign entries to ``environ`` in order and return the assigned keys.

    Expansion reads from ``environ`` itself, so a value can refer to
    anything assigned by an earlier entry.
    """
    assigned: list[str] = []
    for entry in entries:
        if not overwrite and entry.key in environ:
            continue
        if expand_values and not entry.raw and entry.value:
            environ[entry.key] = expand(entry.value, environ.get)
        else:
            environ[entry.key] = entry.value
        assigned.append(entry.key)
    return assigned


def load_files(
    paths: Sequence[StrPath],
    environ: MutableMapping[str, str] | None = None,
    *,
    strict: bool,
    overwrite: bool,
    expand_values: bool = True,
) -> list[str]:
    """Apply each file in order and return the keys assigned, first seen first.

    With no paths the default ``.env`` is used.
    """
    target = os.environ if environ is None else environ
    assigned_keys: dict[str, None] = {}
    for path in _path_fallback(paths):
        lexer = parse_file(path)
        if strict:
            entries, error = parse_strict(lexer)
            if error is not None:
                _LOGGER.debug(
                    "event=env_file_invalid path=%s error=%s", path, error
                )
                raise error
        else:
            entries = parse(lexer)
        assigned = assign_entries(
            entries, target, overwrite=overwrite, expand_values=expand_values
        )
        assigned_keys.update(dict.fromkeys(assigned))
        _LOGGER.debug(
            "event=env_file_loaded path=%s entries=%d assigned=%d",
            path,
            len(entries),
            len(assigned),
        )
    return list(assigned_keys)


def _path_fallback(paths: Sequence[StrPath]) -> Sequence[StrPath]:
    if not paths:
        return (DEFAULT_ENV_FILE,)
    return paths
