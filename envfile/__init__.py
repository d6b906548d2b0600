"""Parse .env files, expand $VARIABLES and load them into the environment."""

from envfile.env import BoolVar, FloatVar, IntVar, StringVar
from envfile.expand import expand
from envfile.lexer import Lexer, tokenize
from envfile.loader import (
    load,
    load_files,
    load_strict,
    overload,
    overload_strict,
    parse_file,
)
from envfile.parser import ParseEntry, ParseError, UnexpectedToken, parse, parse_strict
from envfile.tokens import Token, TokenKind

__version__ = "0.1.0"

__all__ = [
    "BoolVar",
    "FloatVar",
    "IntVar",
    "Lexer",
    "ParseEntry",
    "ParseError",
    "StringVar",
    "Token",
    "TokenKind",
    "UnexpectedToken",
    "expand",
    "load",
    "load_files",
    "load_strict",
    "overload",
    "overload_strict",
    "parse",
    "parse_file",
    "parse_strict",
    "tokenize",
]
