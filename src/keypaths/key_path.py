"""Key paths: typed, composable references to attributes of a class."""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Any, Callable, Generic, Sequence, TypeVar

from keypaths.types import (
    FieldDefinition,
    Mutability,
    as_class,
    is_compatible,
    is_named_tuple,
    record_type_of,
    type_name,
)

if TYPE_CHECKING:
    from keypaths.types import TypeRegistry

T = TypeVar("T")
V = TypeVar("V")


def resolve_fields(root_type: type, names: Sequence[str]) -> list[FieldDefinition]:
    """Resolve a chain of attribute names starting at ``root_type``.

    Dotted names are split, so ``("favorite_food.calories",)`` and
    ``("favorite_food", "calories")`` resolve to the same chain.

    Raises:
        ValueError: If no names are given.
        KeyError: If an attribute does not exist on its owner.
        TypeError: If an intermediate attribute is not declared as a class.
    """
    parts = [part for name in names for part in name.split(".")]
    if not parts:
        raise ValueError("A key path needs at least one field name")

    fields: list[FieldDefinition] = []
    owner = root_type
    for part in parts:
        if fields:
            owner = _traversable_class(fields[-1])
        fields.append(record_type_of(owner).get_field_or_raise(part))
    return fields


def _traversable_class(f: FieldDefinition) -> type:
    cls = as_class(f.value_type)
    if cls is None:
        raise TypeError(
            f"Cannot continue past field '{f.name}' of type '{type_name(f.owner)}': "
            f"'{type_name(f.value_type)}' is not a class"
        )
    return cls


def _reference_split(fields: Sequence[FieldDefinition]) -> int | None:
    """Index of the last in-place assignable hop, if only value hops follow it."""
    for index in range(len(fields) - 1, -1, -1):
        mutability = fields[index].mutability
        if mutability is Mutability.REFERENCE:
            return index
        if mutability is not Mutability.VALUE:
            return None
    return None


def _replaced(owner: Any, name: str, value: Any) -> Any:
    """Return a copy of a value-typed owner with one field replaced."""
    if is_named_tuple(type(owner)):
        return owner._replace(**{name: value})
    return dataclasses.replace(owner, **{name: value})


def _rebuild(owner: Any, fields: Sequence[FieldDefinition], value: Any) -> Any:
    """Replace the value at the end of a chain of value hops, copying each owner."""
    head = fields[0]
    if len(fields) > 1:
        value = _rebuild(getattr(owner, head.name), fields[1:], value)
    return _replaced(owner, head.name, value)


def make_key_path(fields: Sequence[FieldDefinition]) -> KeyPath[Any, Any]:
    """Build the most capable key path variant a chain of fields allows."""
    fields = tuple(fields)
    if _reference_split(fields) is not None:
        return ReferenceWritableKeyPath(fields)
    if all(f.mutability is Mutability.VALUE for f in fields):
        return WritableKeyPath(fields)
    return KeyPath(fields)


class KeyPath(Generic[T, V]):
    """Read-only key path from a root of type T to a value of type V.

    Key paths are immutable values: they compare and hash by the chain of
    fields they follow, and appending returns a new path.

    Example:
        >>> calories = KeyPath.of(Cat, "favorite_food", "calories")
        >>> calories.read(whiskers)
        999.0
    """

    def __init__(self, fields: Sequence[FieldDefinition]) -> None:
        if not fields:
            raise ValueError("A key path needs at least one field")
        self._fields: tuple[FieldDefinition, ...] = tuple(fields)

    @classmethod
    def of(
        cls, root_type: type[T], *names: str, value_type: Any = None
    ) -> KeyPath[T, Any]:
        """Build a key path following ``names`` from ``root_type``.

        Args:
            root_type: Class the path starts at.
            names: Attribute names, one per hop (dotted names are split).
            value_type: If given, the declared type of the last attribute
                must be compatible with it.

        Returns:
            The most capable variant for the chain. When called on a writable
            subclass, the chain must allow that capability.

        Raises:
            KeyError: If an attribute does not exist.
            TypeError: If the chain cannot be traversed, ``value_type`` does not
                match, or the requested capability is unavailable.
            ValueError: If no names are given.
        """
        fields = resolve_fields(root_type, names)
        last = fields[-1]
        if value_type is not None and not is_compatible(last.value_type, value_type):
            raise TypeError(
                f"Field '{last.name}' of type '{type_name(last.owner)}' is declared as "
                f"'{type_name(last.value_type)}', not '{type_name(value_type)}'"
            )
        path = make_key_path(fields)
        if not isinstance(path, cls):
            raise TypeError(f"{path} is not a {cls.__name__}")
        return path

    @classmethod
    def parse(cls, text: str, registry: TypeRegistry) -> KeyPath[Any, Any]:
        """Build a key path from its textual form, e.g. ``\\Cat.favorite_food.calories``.

        The root type name is looked up in ``registry``.
        """
        from keypaths.parsing import default_parser

        path = default_parser().parse(text, registry)
        if not isinstance(path, cls):
            raise TypeError(f"{path} is not a {cls.__name__}")
        return path

    @property
    def fields(self) -> tuple[FieldDefinition, ...]:
        return self._fields

    @property
    def components(self) -> tuple[str, ...]:
        """Attribute names followed by this path, in order."""
        return tuple(f.name for f in self._fields)

    @property
    def root_type(self) -> type:
        return self._fields[0].owner

    @property
    def value_type(self) -> Any:
        return self._fields[-1].value_type

    @property
    def is_writable(self) -> bool:
        return False

    def read(self, root: T) -> V:
        """Return the value currently stored at this path in ``root``."""
        value: Any = root
        for f in self._fields:
            value = getattr(value, f.name)
        return value

    def __call__(self, root: T) -> V:
        return self.read(root)

    def appending(self, other: KeyPath[Any, Any] | str) -> KeyPath[T, Any]:
        """Return a path following this one and then ``other``.

        Args:
            other: A key path rooted at this path's value type (or a base
                class of it), or an attribute name of the value type.

        Raises:
            TypeError: If the value type of this path is not a class compatible
                with the root of ``other``.
        """
        owner = _traversable_class(self._fields[-1])
        if isinstance(other, str):
            other = KeyPath.of(owner, other)
        if not issubclass(owner, other.root_type):
            raise TypeError(
                f"Cannot append {other} to {self}: "
                f"'{type_name(owner)}' is not a '{type_name(other.root_type)}'"
            )
        return make_key_path(self._fields + other.fields)

    def __truediv__(self, other: KeyPath[Any, Any] | str) -> KeyPath[T, Any]:
        return self.appending(other)

    def erased(self) -> PartialKeyPath[T]:
        """Forget the value type, keeping only the root type."""
        return PartialKeyPath(self)

    def fully_erased(self) -> AnyKeyPath:
        """Forget both the root and the value type."""
        return AnyKeyPath(self)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyPath):
            return NotImplemented
        return self._fields == other._fields

    def __hash__(self) -> int:
        return hash(self._fields)

    def __str__(self) -> str:
        return "\\" + ".".join((self.root_type.__name__, *self.components))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"


class WritableKeyPath(KeyPath[T, V]):
    """Key path through value types; writing returns an updated root.

    Every owner along the chain is copied with the new value, the original
    root is left untouched.
    """

    def __init__(self, fields: Sequence[FieldDefinition]) -> None:
        super().__init__(fields)
        for f in self._fields:
            if f.mutability is not Mutability.VALUE:
                raise TypeError(
                    f"Field '{f.name}' of type '{type_name(f.owner)}' "
                    "is not writable by value"
                )

    @property
    def is_writable(self) -> bool:
        return True

    def write(self, root: T, value: V) -> T:
        """Return a copy of ``root`` with ``value`` stored at this path."""
        return _rebuild(root, self._fields, value)

    def modify(self, root: T, fn: Callable[[V], V]) -> T:
        """Return a copy of ``root`` with the value at this path replaced by ``fn(value)``."""
        return self.write(root, fn(self.read(root)))


class ReferenceWritableKeyPath(KeyPath[T, V]):
    """Key path ending in (or passing through) a mutable object.

    Writing assigns to the last mutable owner along the chain, so the
    caller's root object observes the change and nothing is returned. Any
    value-typed fields after that owner are rebuilt first.
    """

    def __init__(self, fields: Sequence[FieldDefinition]) -> None:
        super().__init__(fields)
        split = _reference_split(self._fields)
        if split is None:
            raise TypeError(f"{KeyPath(fields)} is not writable by reference")
        self._split = split

    @property
    def is_writable(self) -> bool:
        return True

    def write(self, root: T, value: V) -> None:
        """Store ``value`` at this path, mutating the object graph of ``root``."""
        owner: Any = root
        for f in self._fields[: self._split]:
            owner = getattr(owner, f.name)
        head = self._fields[self._split]
        tail = self._fields[self._split + 1 :]
        if tail:
            value = _rebuild(getattr(owner, head.name), tail, value)
        setattr(owner, head.name, value)

    def modify(self, root: T, fn: Callable[[V], V]) -> None:
        """Replace the value at this path with ``fn(value)`` in place."""
        self.write(root, fn(self.read(root)))


class PartialKeyPath(Generic[T]):
    """Key path whose value type has been erased.

    It can still read from a root of type T; to write, or to get the value
    type back, narrow it with :meth:`as_key_path`.
    """

    def __init__(self, path: KeyPath[T, Any]) -> None:
        self._path = path

    @property
    def root_type(self) -> type:
        return self._path.root_type

    @property
    def value_type(self) -> Any:
        return self._path.value_type

    @property
    def components(self) -> tuple[str, ...]:
        return self._path.components

    def read(self, root: T) -> Any:
        return self._path.read(root)

    def __call__(self, root: T) -> Any:
        return self._path.read(root)

    def as_key_path(self, value_type: Any) -> KeyPath[T, Any] | None:
        """Recover the typed path if its value type is compatible with ``value_type``.

        Returns None otherwise. The recovered path keeps its original
        capability, so a narrowed writable path can be written again.
        """
        if is_compatible(self._path.value_type, value_type):
            return self._path
        return None

    def erased(self) -> AnyKeyPath:
        return AnyKeyPath(self._path)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PartialKeyPath):
            return NotImplemented
        return self._path == other._path

    def __hash__(self) -> int:
        return hash(("partial", self._path))

    def __str__(self) -> str:
        return str(self._path)

    def __repr__(self) -> str:
        return f"PartialKeyPath({self._path})"


class AnyKeyPath:
    """Fully type-erased key path, for storing unrelated paths together."""

    def __init__(self, path: KeyPath[Any, Any]) -> None:
        self._path = path

    @property
    def root_type(self) -> type:
        return self._path.root_type

    @property
    def value_type(self) -> Any:
        return self._path.value_type

    def as_partial(self, root_type: type[T]) -> PartialKeyPath[T] | None:
        """Recover a path readable from ``root_type`` instances, or None."""
        if isinstance(root_type, type) and issubclass(root_type, self._path.root_type):
            return PartialKeyPath(self._path)
        return None

    def as_key_path(self, root_type: type[T], value_type: Any) -> KeyPath[T, Any] | None:
        """Recover the typed path for ``root_type`` and ``value_type``, or None."""
        partial = self.as_partial(root_type)
        if partial is None:
            return None
        return partial.as_key_path(value_type)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AnyKeyPath):
            return NotImplemented
        return self._path == other._path

    def __hash__(self) -> int:
        return hash(("any", self._path))

    def __str__(self) -> str:
        return str(self._path)

    def __repr__(self) -> str:
        return f"AnyKeyPath({self._path})"
