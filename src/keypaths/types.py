"""Field and record definitions for key path resolution."""

from __future__ import annotations

import dataclasses
import logging
import re
import typing
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any

logger = logging.getLogger(__name__)


class Mutability(Enum):
    """How a field can be written through a key path."""

    READ_ONLY = "read_only"
    VALUE = "value"  # owner is immutable, writing produces an updated copy
    REFERENCE = "reference"  # owner is mutable, writing assigns in place

    @property
    def is_writable(self) -> bool:
        """Return whether a key path ending in this field can be written."""
        return self is not Mutability.READ_ONLY


# Implicit numeric promotions accepted when checking declared value types
NUMERIC_PROMOTIONS: frozenset[tuple[type, type]] = frozenset(
    {(int, float), (int, complex), (float, complex)}
)

_QUALIFIED_NAME = re.compile(r"\b(?:\w+\.)+(\w+)")


@dataclass(frozen=True)
class FieldDefinition:
    """Definition of a single attribute reachable on a record type."""

    name: str
    owner: type
    value_type: Any
    mutability: Mutability = Mutability.READ_ONLY


@dataclass(frozen=True)
class RecordTypeDefinition:
    """Introspected view of a Python class as a record of typed fields.

    Value types are frozen dataclasses and named tuples: their fields are
    updated by building a modified copy of the owner. Every other class is
    treated as a reference type whose fields are assigned in place.
    """

    name: str
    cls: type
    fields: tuple[FieldDefinition, ...] = ()
    is_value_type: bool = False

    def get_field(self, name: str) -> FieldDefinition | None:
        """Get a field by name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def get_field_or_raise(self, name: str) -> FieldDefinition:
        """Get a field by name, raising if not found."""
        f = self.get_field(name)
        if f is None:
            raise KeyError(f"Field '{name}' not found in type '{self.name}'")
        return f

    def field_names(self) -> list[str]:
        """List the names of all fields."""
        return [f.name for f in self.fields]


def is_named_tuple(cls: type) -> bool:
    """Check if a class was built by ``typing.NamedTuple`` or ``collections.namedtuple``."""
    return issubclass(cls, tuple) and hasattr(cls, "_fields")


def is_value_type(cls: type) -> bool:
    """Check if instances of a class are updated by copy rather than in place."""
    if dataclasses.is_dataclass(cls):
        return cls.__dataclass_params__.frozen  # type: ignore[attr-defined]
    return is_named_tuple(cls)


def as_class(annotation: Any) -> type | None:
    """Return the annotation if it is a plain class, otherwise None.

    Parametrized generics (``list[Food]``), unions and ``Any`` are not plain
    classes: a key path cannot continue through them.
    """
    if annotation is Any or typing.get_origin(annotation) is not None:
        return None
    if isinstance(annotation, type):
        return annotation
    return None


def is_compatible(declared: Any, expected: Any) -> bool:
    """Check whether a field declared as ``declared`` can be used as ``expected``."""
    if declared is Any or expected is Any or declared == expected:
        return True
    declared_cls = as_class(declared)
    expected_cls = as_class(expected)
    if declared_cls is None or expected_cls is None:
        return False
    if issubclass(declared_cls, expected_cls):
        return True
    return (declared_cls, expected_cls) in NUMERIC_PROMOTIONS


def type_name(annotation: Any) -> str:
    """Return a readable name for a class or annotation."""
    if isinstance(annotation, type) and typing.get_origin(annotation) is None:
        return annotation.__name__
    # list[pkg.module.Food] -> list[Food]
    return _QUALIFIED_NAME.sub(r"\1", repr(annotation))


def _has_required_init_var(cls: type, hints: dict[str, Any]) -> bool:
    """Check if a dataclass has an InitVar pseudo-field without a default."""
    return any(
        isinstance(hint, dataclasses.InitVar) and not hasattr(cls, name)
        for name, hint in hints.items()
    )


def _dataclass_fields(
    cls: type, hints: dict[str, Any], frozen: bool
) -> list[FieldDefinition]:
    """Build field definitions for a dataclass."""
    result: list[FieldDefinition] = []
    replaceable = frozen and not _has_required_init_var(cls, hints)
    for dc_field in dataclasses.fields(cls):
        if dc_field.metadata.get("readonly"):
            mutability = Mutability.READ_ONLY
        elif frozen and not replaceable:
            # replace() needs every InitVar without a default
            mutability = Mutability.READ_ONLY
        elif frozen:
            # replace() cannot set fields excluded from __init__
            mutability = Mutability.VALUE if dc_field.init else Mutability.READ_ONLY
        else:
            mutability = Mutability.REFERENCE
        result.append(
            FieldDefinition(
                name=dc_field.name,
                owner=cls,
                value_type=hints.get(dc_field.name, Any),
                mutability=mutability,
            )
        )
    return result


def _annotated_fields(cls: type, hints: dict[str, Any]) -> list[FieldDefinition]:
    """Build field definitions for a named tuple or a plain annotated class."""
    if is_named_tuple(cls):
        return [
            FieldDefinition(
                name=name,
                owner=cls,
                value_type=hints.get(name, Any),
                mutability=Mutability.VALUE,
            )
            for name in cls._fields  # type: ignore[attr-defined]
        ]

    result: list[FieldDefinition] = []
    for name, hint in hints.items():
        if hint is typing.ClassVar or typing.get_origin(hint) is typing.ClassVar:
            continue
        result.append(
            FieldDefinition(
                name=name, owner=cls, value_type=hint, mutability=Mutability.REFERENCE
            )
        )
    return result


def _property_fields(cls: type, value_type: bool, seen: set[str]) -> list[FieldDefinition]:
    """Build field definitions for the public properties of a class."""
    result: list[FieldDefinition] = []
    properties: dict[str, property] = {}
    for klass in reversed(cls.__mro__):
        for name, attr in vars(klass).items():
            if isinstance(attr, property) and not name.startswith("_"):
                properties[name] = attr

    for name, prop in properties.items():
        if name in seen or prop.fget is None:
            continue
        hints = typing.get_type_hints(prop.fget)
        if prop.fset is not None and not value_type:
            mutability = Mutability.REFERENCE
        else:
            mutability = Mutability.READ_ONLY
        result.append(
            FieldDefinition(
                name=name,
                owner=cls,
                value_type=hints.get("return", Any),
                mutability=mutability,
            )
        )
    return result


@lru_cache(maxsize=None)
def record_type_of(cls: type) -> RecordTypeDefinition:
    """Introspect a class into a record type definition.

    Fields come from dataclass fields, named tuple fields or class
    annotations (``ClassVar`` excluded), followed by public properties.
    The result is cached per class.

    Raises:
        TypeError: If ``cls`` is not a class.
    """
    if not isinstance(cls, type):
        raise TypeError(f"Expected a class, got {type(cls).__name__}")

    hints = typing.get_type_hints(cls)
    value_type = is_value_type(cls)

    if dataclasses.is_dataclass(cls):
        fields = _dataclass_fields(cls, hints, frozen=value_type)
    else:
        fields = _annotated_fields(cls, hints)
    fields += _property_fields(cls, value_type, {f.name for f in fields})

    logger.debug(
        "Introspected %s: %d field(s), %s type",
        cls.__qualname__,
        len(fields),
        "value" if value_type else "reference",
    )
    return RecordTypeDefinition(
        name=cls.__name__, cls=cls, fields=tuple(fields), is_value_type=value_type
    )


class TypeRegistry:
    """Registry of record types addressable by name.

    Used to resolve the root type of textual key paths such as
    ``\\Cat.favorite_food.calories``.
    """

    def __init__(self) -> None:
        self._types: dict[str, RecordTypeDefinition] = {}

    def register(self, cls: type, name: str | None = None) -> type:
        """Register a class under its own name or ``name``.

        Returns the class unchanged so it can be used as a decorator.
        """
        record = record_type_of(cls)
        key = name or record.name
        existing = self._types.get(key)
        if existing is not None and existing.cls is not cls:
            raise ValueError(f"Type '{key}' is already defined")
        self._types[key] = record
        logger.debug("Registered type '%s'", key)
        return cls

    def get(self, name: str) -> RecordTypeDefinition | None:
        """Get a type by name."""
        return self._types.get(name)

    def get_or_raise(self, name: str) -> RecordTypeDefinition:
        """Get a type by name, raising if not found."""
        record = self._types.get(name)
        if record is None:
            raise KeyError(f"Type '{name}' not found")
        return record

    def list_types(self) -> list[str]:
        """List all registered type names."""
        return list(self._types.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)
