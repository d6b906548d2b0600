"""Loading .env files into an environment mapping."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from envfile import loader
from envfile.parser import ParseEntry, UnexpectedToken, parse

FIXTURES = Path(__file__).parent / "fixtures"
BASIC = FIXTURES / "basic.env"
BROKEN = FIXTURES / "broken.env"
REPLACEMENT = FIXTURES / "replacement.env"

BASIC_ENV = {
    "DOUBLE_QUOTE": "double quote",
    "EXPORTED": "data",
    "HASH_WITH_COMMENT": "some#data",
    "SINGLE_QUOTE": "single quote",
    "UNEXPORTED": "data",
    "UNQUOTED": "unquoted data",
    "WITH_COMMENT": "some data",
}

BROKEN_ENV = {
    "EMPTY": "",
    "EMPTY_WITH_COMMENT": "",
    "EXPORTED": "exported data",
    "FINAL": "valid",
}

REPLACEMENT_ENV = {
    "VALUE": "inserted",
    "REPLACE": "inserted",
    "REPLACE_SINGLE": "${VALUE}",
    "REPLACE_DOUBLE": "inserted",
    "REPLACE_PARTIAL": "partialy inserted value",
    "REPLACE_ESCAPED": "partialy ${VALUE} value",
    "REPLACE_FROM_BASIC": "",
    "REPLACE_FROM_BROKEN": "",
}


class LoadTests(unittest.TestCase):
    def test_single_files(self) -> None:
        cases = [
            (BASIC, BASIC_ENV),
            (BROKEN, BROKEN_ENV),
            (REPLACEMENT, REPLACEMENT_ENV),
        ]
        for load in (loader.load, loader.overload):
            for path, expected in cases:
                with self.subTest(load=load.__name__, path=path.name):
                    environ: dict[str, str] = {}
                    load(path, environ=environ)
                    self.assertEqual(environ, expected)

    def test_load_keeps_existing_values(self) -> None:
        environ: dict[str, str] = {}
        loader.load(BASIC, BROKEN, REPLACEMENT, environ=environ)
        expected = {**BROKEN_ENV, **REPLACEMENT_ENV, **BASIC_ENV}
        expected["REPLACE_FROM_BASIC"] = "some#data"
        self.assertEqual(environ, expected)
        self.assertEqual(environ["EXPORTED"], "data")

    def test_overload_replaces_existing_values(self) -> None:
        environ: dict[str, str] = {}
        loader.overload(BASIC, BROKEN, REPLACEMENT, environ=environ)
        expected = {**BASIC_ENV, **BROKEN_ENV, **REPLACEMENT_ENV}
        expected["REPLACE_FROM_BASIC"] = "some#data"
        self.assertEqual(environ, expected)
        self.assertEqual(environ["EXPORTED"], "exported data")

    def test_load_does_not_touch_preset_variable(self) -> None:
        environ = {"VALUE": "preset"}
        loader.load(REPLACEMENT, environ=environ)
        self.assertEqual(environ["VALUE"], "preset")
        self.assertEqual(environ["REPLACE"], "preset")

    def test_overload_preset_variable(self) -> None:
        environ = {"VALUE": "preset"}
        loader.overload(REPLACEMENT, environ=environ)
        self.assertEqual(environ["VALUE"], "inserted")
        self.assertEqual(environ["REPLACE"], "inserted")

    def test_defaults_to_os_environ(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            loader.load(REPLACEMENT)
            self.assertEqual(os.environ["REPLACE_PARTIAL"], "partialy inserted value")
            self.assertEqual(os.environ["REPLACE_SINGLE"], "${VALUE}")

    def test_defaults_to_dotenv_in_working_directory(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / ".env"
            path.write_text("FROM_DEFAULT=yes\n", encoding="utf-8")
            environ: dict[str, str] = {}
            with mock.patch.object(loader, "DEFAULT_ENV_FILE", str(path)):
                loader.load(environ=environ)
        self.assertEqual(environ, {"FROM_DEFAULT": "yes"})

    def test_missing_file_raises(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            missing = Path(temp_dir) / "missing.env"
            with self.assertRaises(FileNotFoundError):
                loader.load(missing, environ={})


class LoadStrictTests(unittest.TestCase):
    def test_valid_file(self) -> None:
        for load in (loader.load_strict, loader.overload_strict):
            with self.subTest(load=load.__name__):
                environ: dict[str, str] = {}
                load(BASIC, environ=environ)
                self.assertEqual(environ, BASIC_ENV)

    def test_broken_file_applies_nothing(self) -> None:
        for load in (loader.load_strict, loader.overload_strict):
            with self.subTest(load=load.__name__):
                environ: dict[str, str] = {}
                with self.assertRaises(UnexpectedToken) as ctx:
                    load(BROKEN, environ=environ)
                self.assertEqual(
                    str(ctx.exception),
                    "Unexpected token IDENT value=some line=0 pos=6",
                )
                self.assertEqual(environ, {})

    def test_stops_at_first_invalid_file(self) -> None:
        for load in (loader.load_strict, loader.overload_strict):
            with self.subTest(load=load.__name__):
                environ: dict[str, str] = {}
                with self.assertRaises(UnexpectedToken):
                    load(BASIC, BROKEN, REPLACEMENT, environ=environ)
                self.assertEqual(environ, BASIC_ENV)

    def test_invalid_file_is_logged(self) -> None:
        with self.assertLogs("envfile.loader", level="DEBUG") as logs:
            with self.assertRaises(UnexpectedToken):
                loader.load_strict(BROKEN, environ={})
        self.assertTrue(
            any("event=env_file_invalid" in line for line in logs.output)
        )


class AssignEntriesTests(unittest.TestCase):
    def test_chained_expansion(self) -> None:
        environ: dict[str, str] = {}
        entries = parse("VALUE=inserted\nREPLACE=${VALUE}\n")
        assigned = loader.assign_entries(entries, environ, overwrite=False)
        self.assertEqual(assigned, ["VALUE", "REPLACE"])
        self.assertEqual(environ["REPLACE"], "inserted")

    def test_raw_values_are_not_expanded(self) -> None:
        environ = {"VALUE": "inserted"}
        loader.assign_entries(
            [ParseEntry("REPLACE_SINGLE", "${VALUE}", raw=True)],
            environ,
            overwrite=True,
        )
        self.assertEqual(environ["REPLACE_SINGLE"], "${VALUE}")

    def test_expansion_can_be_disabled(self) -> None:
        environ = {"VALUE": "inserted"}
        loader.assign_entries(
            [ParseEntry("REPLACE", "${VALUE}")],
            environ,
            overwrite=True,
            expand_values=False,
        )
        self.assertEqual(environ["REPLACE"], "${VALUE}")

    def test_skipped_keys_are_not_reported(self) -> None:
        environ = {"A": "kept"}
        assigned = loader.assign_entries(
            [ParseEntry("A", "new"), ParseEntry("B", "$A")],
            environ,
            overwrite=False,
        )
        self.assertEqual(assigned, ["B"])
        self.assertEqual(environ, {"A": "kept", "B": "kept"})

    def test_load_files_reports_assigned_keys(self) -> None:
        environ = {"EXPORTED": "preset"}
        assigned = loader.load_files(
            [BASIC, BROKEN], environ, strict=False, overwrite=False
        )
        self.assertNotIn("EXPORTED", assigned)
        self.assertEqual(assigned[:2], ["UNEXPORTED", "SINGLE_QUOTE"])
        self.assertEqual(assigned[-3:], ["EMPTY", "EMPTY_WITH_COMMENT", "FINAL"])


class ParseFileTests(unittest.TestCase):
    def test_parse_file_returns_lexer(self) -> None:
        lexer = loader.parse_file(BASIC)
        self.assertEqual(parse(lexer)[0], ParseEntry("EXPORTED", "data"))


if __name__ == "__main__":
    unittest.main()
