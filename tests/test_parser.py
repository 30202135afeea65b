"""Tests for the key path expression parser."""

from dataclasses import dataclass

import pytest

from keypaths import KeyPath, TypeRegistry, WritableKeyPath
from keypaths.parsing import KeyPathExpr, KeyPathParser, default_parser
from keypaths.parsing.key_path_lexer import KeyPathLexer


@dataclass(frozen=True)
class Food:
    name: str
    calories: float


@dataclass(frozen=True)
class Cat:
    name: str
    favorite_food: Food


@dataclass(frozen=True)
class Käse:
    größe: int


@pytest.fixture
def registry():
    registry = TypeRegistry()
    registry.register(Food)
    registry.register(Cat)
    return registry


class TestKeyPathLexer:
    """Tests for the key path lexer."""

    def test_tokenize_key_path(self):
        """Test tokenizing a nested key path."""
        lexer = KeyPathLexer()
        lexer.build()

        tokens = lexer.tokenize(r"\Cat.favorite_food.calories")
        token_types = [t.type for t in tokens]

        assert token_types == [
            "BACKSLASH",
            "IDENTIFIER",
            "DOT",
            "IDENTIFIER",
            "DOT",
            "IDENTIFIER",
        ]
        assert [t.value for t in tokens if t.type == "IDENTIFIER"] == [
            "Cat",
            "favorite_food",
            "calories",
        ]

    def test_whitespace_ignored(self):
        """Test that spaces around tokens are ignored."""
        lexer = KeyPathLexer()
        lexer.build()

        tokens = lexer.tokenize("  Cat . name ")
        assert [t.type for t in tokens] == ["IDENTIFIER", "DOT", "IDENTIFIER"]

    def test_tokenize_unicode_identifiers(self):
        """Test that non-ASCII attribute names are identifiers."""
        lexer = KeyPathLexer()
        lexer.build()

        tokens = lexer.tokenize(r"\Käse.größe")
        assert [(t.type, t.value) for t in tokens] == [
            ("BACKSLASH", "\\"),
            ("IDENTIFIER", "Käse"),
            ("DOT", "."),
            ("IDENTIFIER", "größe"),
        ]

    def test_identifier_cannot_start_with_digit(self):
        """Test that a leading digit is not part of an identifier."""
        lexer = KeyPathLexer()
        lexer.build()

        with pytest.raises(SyntaxError, match="Illegal character '2' at position 4"):
            lexer.tokenize("Cat.2name")

    def test_illegal_character(self):
        """Test that unexpected characters are reported with their position."""
        lexer = KeyPathLexer()
        lexer.build()

        with pytest.raises(SyntaxError, match="Illegal character '-' at position 4"):
            lexer.tokenize("Cat.-name")


class TestKeyPathParser:
    """Tests for parsing key path expressions."""

    def test_parse_expr(self):
        """Test parsing without resolving."""
        expr = KeyPathParser().parse_expr(r"\Cat.favorite_food.calories")

        assert expr == KeyPathExpr(type_name="Cat", components=["favorite_food", "calories"])
        assert str(expr) == r"\Cat.favorite_food.calories"

    def test_parse_expr_without_backslash(self):
        """Test that the leading backslash is optional."""
        expr = KeyPathParser().parse_expr("Cat.name")
        assert expr == KeyPathExpr(type_name="Cat", components=["name"])

    def test_parse_resolves(self, registry):
        """Test that parsing resolves to the same path as KeyPath.of."""
        path = KeyPathParser().parse(r"\Cat.favorite_food.calories", registry)

        assert path == KeyPath.of(Cat, "favorite_food", "calories")
        assert isinstance(path, WritableKeyPath)

    def test_parser_reuse(self, registry):
        """Test that one parser instance can parse several expressions."""
        parser = KeyPathParser()

        assert parser.parse(r"\Cat.name", registry) == KeyPath.of(Cat, "name")
        assert parser.parse(r"\Food.calories", registry) == KeyPath.of(Food, "calories")

    def test_key_path_parse(self, registry):
        """Test the KeyPath.parse shortcut."""
        whiskers = Cat("Whiskers", Food("Skittles", 999))
        assert KeyPath.parse(r"\Cat.favorite_food.name", registry).read(whiskers) == "Skittles"

    def test_key_path_parse_capability(self, registry):
        """Test that a subclass shortcut checks the capability."""
        assert isinstance(WritableKeyPath.parse(r"\Cat.name", registry), WritableKeyPath)

    def test_unknown_type(self, registry):
        """Test that the root type must be registered."""
        with pytest.raises(KeyError, match="Type 'Dog' not found"):
            KeyPathParser().parse(r"\Dog.name", registry)

    def test_unknown_field(self, registry):
        """Test that fields are checked when resolving."""
        with pytest.raises(KeyError, match="Field 'fat' not found in type 'Food'"):
            KeyPathParser().parse(r"\Cat.favorite_food.fat", registry)

    def test_type_without_field(self):
        """Test that a bare type name is not a key path."""
        with pytest.raises(SyntaxError, match="end of input"):
            KeyPathParser().parse_expr(r"\Cat")

    def test_trailing_dot(self):
        """Test that a trailing dot is rejected."""
        with pytest.raises(SyntaxError, match="end of input"):
            KeyPathParser().parse_expr("Cat.name.")

    def test_double_dot(self):
        """Test that empty components are rejected."""
        with pytest.raises(SyntaxError, match="Syntax error at '.'"):
            KeyPathParser().parse_expr("Cat..name")

    def test_empty(self):
        """Test that an empty expression is rejected."""
        with pytest.raises(SyntaxError):
            KeyPathParser().parse_expr("")

    def test_unicode_field_names(self):
        """Test that parsing accepts the same names as KeyPath.of."""
        registry = TypeRegistry()
        registry.register(Käse)

        path = KeyPath.parse(r"\Käse.größe", registry)
        assert path == KeyPath.of(Käse, "größe")
        assert path.read(Käse(größe=3)) == 3

    def test_default_parser_shared(self, registry):
        """Test that KeyPath.parse reuses one built parser."""
        parser = default_parser()

        assert parser is default_parser()
        assert parser.parser is not None
        KeyPath.parse(r"\Cat.name", registry)
        assert default_parser() is parser
