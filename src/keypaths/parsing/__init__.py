"""Parsing module for textual key path expressions."""

from keypaths.parsing.key_path_lexer import KeyPathLexer
from keypaths.parsing.key_path_parser import KeyPathExpr, KeyPathParser, default_parser

__all__ = [
    "KeyPathExpr",
    "KeyPathLexer",
    "KeyPathParser",
    "default_parser",
]
