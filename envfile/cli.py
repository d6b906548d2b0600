"""CLI entrypoint and logging setup."""

from __future__ import annotations

import argparse
import json
import logging
import os
import subprocess
import sys
from dataclasses import replace
from pathlib import Path
from typing import Iterable

from envfile.config import (
    Config,
    ConfigError,
    GlobalConfig,
    default_config,
    load_config,
    validate_config,
)
from envfile.loader import load_files, parse_file
from envfile.parser import ParseError, parse_strict


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="envfile")
    subparsers = parser.add_subparsers(dest="command")

    check = subparsers.add_parser("check", help="validate .env syntax")
    _add_common_arguments(check)
    check.add_argument("files", nargs="*", help="files to check")

    show = subparsers.add_parser("show", help="print the loaded variables")
    _add_common_arguments(show)
    _add_load_arguments(show)
    show.add_argument("files", nargs="*", help="files to load in order")
    show.add_argument(
        "--format",
        choices=("env", "json"),
        default="env",
        help="output format",
    )

    run = subparsers.add_parser("run", help="run a command with loaded variables")
    _add_common_arguments(run)
    _add_load_arguments(run)
    run.add_argument(
        "-f",
        "--file",
        dest="files",
        action="append",
        default=[],
        help="file to load (repeatable)",
    )
    run.add_argument(
        "program", nargs=argparse.REMAINDER, help="command and its arguments"
    )

    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)
    if not argv:
        parser.print_help()
        raise SystemExit(0)
    args = parser.parse_args(argv)
    if args.command is None:
        parser.error("command required")
    return args


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="path to config.toml")
    parser.add_argument("--log-level", help="override log level")


def _add_load_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--strict",
        dest="strict",
        action="store_true",
        help="stop at the first file with invalid syntax",
    )
    parser.add_argument(
        "--override",
        dest="override",
        action="store_true",
        help="replace variables that are already set",
    )
    parser.add_argument(
        "--no-expand",
        dest="expand",
        action="store_false",
        help="assign values without $VAR expansion",
    )
    parser.set_defaults(strict=None, override=None, expand=None)


def setup_logging(level: str) -> None:
    numeric = _parse_level(level)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def main(argv: Iterable[str] | None = None) -> int:
    try:
        args = parse_args(argv)
    except SystemExit as exc:
        return int(exc.code or 0)

    try:
        config = _load_and_override_config(args)
    except ConfigError as exc:
        print(f"config error: {exc}", file=sys.stderr)
        return 2

    setup_logging(config.global_cfg.log_level)
    logging.getLogger(__name__).info(
        "event=command_start command=%s files=%s",
        args.command,
        args.files,
    )
    if args.command == "check":
        return run_check(args, config)
    if args.command == "show":
        return run_show(args, config)
    if args.command == "run":
        return run_command(args, config)
    return 2


def run_check(args: argparse.Namespace, config: Config) -> int:
    logger = logging.getLogger(__name__)
    status = 0
    for path in _selected_files(args, config):
        try:
            lexer = parse_file(path)
        except OSError as exc:
            logger.error("event=check_read_failed path=%s error=%s", path, exc)
            print(f"{path}: {exc}", file=sys.stderr)
            status = max(status, 2)
            continue
        entries, error = parse_strict(lexer)
        if error is not None:
            logger.info(
                "event=check_invalid path=%s line=%d pos=%d",
                path,
                error.line,
                error.column,
            )
            print(f"{path}: {error}")
            status = max(status, 1)
            continue
        print(f"{path}: ok ({len(entries)} entries)")
    return status


def run_show(args: argparse.Namespace, config: Config) -> int:
    environ = dict(os.environ)
    try:
        assigned = _load_into(environ, args, config)
    except _LoadFailed as exc:
        return exc.status

    values = {key: environ[key] for key in assigned}
    if args.format == "json":
        print(json.dumps(values, indent=2, sort_keys=True))
    else:
        for key, value in values.items():
            print(f"{key}={value}")
    return 0


def run_command(args: argparse.Namespace, config: Config) -> int:
    logger = logging.getLogger(__name__)
    program = list(args.program)
    if program and program[0] == "--":
        program = program[1:]
    if not program:
        print("run: command required", file=sys.stderr)
        return 2

    environ = dict(os.environ)
    try:
        _load_into(environ, args, config)
    except _LoadFailed as exc:
        return exc.status

    try:
        completed = subprocess.run(program, env=environ, check=False)
    except OSError as exc:
        logger.error("event=run_failed program=%s error=%s", program[0], exc)
        print(f"run: {exc}", file=sys.stderr)
        return 127
    logger.info(
        "event=run_complete program=%s returncode=%d",
        program[0],
        completed.returncode,
    )
    return completed.returncode


class _LoadFailed(Exception):
    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status


def _load_into(
    environ: dict[str, str], args: argparse.Namespace, config: Config
) -> list[str]:
    logger = logging.getLogger(__name__)
    strict = args.strict if args.strict is not None else config.load.strict
    override = (
        args.override if args.override is not None else config.load.override
    )
    expand = args.expand if args.expand is not None else config.load.expand
    try:
        return load_files(
            _selected_files(args, config),
            environ,
            strict=strict,
            overwrite=override,
            expand_values=expand,
        )
    except ParseError as exc:
        logger.error("event=load_invalid error=%s", exc)
        print(f"parse error: {exc}", file=sys.stderr)
        raise _LoadFailed(1) from exc
    except OSError as exc:
        logger.error("event=load_read_failed error=%s", exc)
        print(f"read error: {exc}", file=sys.stderr)
        raise _LoadFailed(2) from exc


def _selected_files(args: argparse.Namespace, config: Config) -> list[Path]:
    if args.files:
        return [Path(path).expanduser() for path in args.files]
    return list(config.load.files)


def _load_and_override_config(args: argparse.Namespace) -> Config:
    if args.config:
        config = load_config(Path(args.config).expanduser())
    else:
        config = default_config()
    if args.log_level:
        config = replace(config, global_cfg=GlobalConfig(log_level=args.log_level))
        validate_config(config)
    return config


def _parse_level(value: str) -> int:
    normalized = value.lower()
    mapping = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
        "critical": logging.CRITICAL,
    }
    if normalized not in mapping:
        raise ConfigError(f"invalid log level: {value}")
    return mapping[normalized]
