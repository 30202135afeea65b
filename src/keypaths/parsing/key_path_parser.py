"""Parser for textual key path expressions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

import ply.yacc as yacc

from keypaths.key_path import KeyPath
from keypaths.parsing.key_path_lexer import KeyPathLexer
from keypaths.types import TypeRegistry

logger = logging.getLogger(__name__)


@dataclass
class KeyPathExpr:
    """Parsed key path before its root type is resolved."""

    type_name: str
    components: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        return "\\" + ".".join([self.type_name, *self.components])


class KeyPathParser:
    """Parser for key path expressions.

    Grammar::

        key_path       : BACKSLASH IDENTIFIER DOT component_list
                       | IDENTIFIER DOT component_list
        component_list : IDENTIFIER
                       | component_list DOT IDENTIFIER

    The leading backslash is optional.
    """

    tokens = KeyPathLexer.tokens

    def __init__(self) -> None:
        self.lexer = KeyPathLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_key_path(self, p: yacc.YaccProduction) -> None:
        """key_path : BACKSLASH IDENTIFIER DOT component_list"""
        p[0] = KeyPathExpr(type_name=p[2], components=p[4])

    def p_key_path_bare(self, p: yacc.YaccProduction) -> None:
        """key_path : IDENTIFIER DOT component_list"""
        p[0] = KeyPathExpr(type_name=p[1], components=p[3])

    def p_component_list_single(self, p: yacc.YaccProduction) -> None:
        """component_list : IDENTIFIER"""
        p[0] = [p[1]]

    def p_component_list_multiple(self, p: yacc.YaccProduction) -> None:
        """component_list : component_list DOT IDENTIFIER"""
        p[0] = p[1] + [p[3]]

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (position {p.lexpos})")
        else:
            raise SyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse_expr(self, data: str) -> KeyPathExpr:
        """Parse a key path expression without resolving it."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        expr = self.parser.parse(data, lexer=self.lexer.lexer)
        if expr is None:
            raise SyntaxError("Empty key path expression")
        return expr

    def parse(self, data: str, registry: TypeRegistry) -> KeyPath[Any, Any]:
        """Parse a key path expression and resolve it against ``registry``.

        Raises:
            SyntaxError: If the expression is malformed.
            KeyError: If the root type or a field is unknown.
            TypeError: If the chain cannot be traversed.
        """
        expr = self.parse_expr(data)
        record = registry.get_or_raise(expr.type_name)
        logger.debug("Resolving key path %s", expr)
        return KeyPath.of(record.cls, *expr.components)


@lru_cache(maxsize=None)
def default_parser() -> KeyPathParser:
    """Return a shared parser, building its tables on first use."""
    parser = KeyPathParser()
    parser.build(debug=False, write_tables=False)
    return parser
