"""Sorting collections by the values found at key paths."""

from __future__ import annotations

import itertools
import operator
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Callable, Iterable, Sequence, TypeVar, Union

from keypaths.key_path import KeyPath, PartialKeyPath

E = TypeVar("E")

Path = Union[KeyPath[Any, Any], PartialKeyPath[Any]]
Predicate = Callable[[Any, Any], bool]


def _comparator(by: Predicate) -> Callable[[Any, Any], int]:
    """Turn a strict "ordered before" predicate into a three-way comparison."""

    def compare(a: Any, b: Any) -> int:
        if by(a, b):
            return -1
        if by(b, a):
            return 1
        return 0

    return compare


def _sort_key(path: Path, by: Predicate) -> Callable[[Any], Any]:
    wrap = cmp_to_key(_comparator(by))

    def key_fn(element: Any) -> Any:
        return wrap(path.read(element))

    return key_fn


def sorted_on(
    elements: Iterable[E], path: Path, by: Predicate = operator.lt
) -> list[E]:
    """Return the elements ordered by the value each one holds at ``path``.

    Args:
        elements: Any finite iterable; it is not modified.
        path: Key path from the element type to the compared value.
        by: Strict ordering predicate returning True when its first argument
            should come before its second. Defaults to ``<``.

    Returns:
        A new list. The sort is stable: elements whose values are neither
        ordered before nor after each other keep their input order.
    """
    return sorted(elements, key=_sort_key(path, by))


def sort_on(items: list[E], path: Path, by: Predicate = operator.lt) -> None:
    """Sort a list in place by the value each item holds at ``path``."""
    items.sort(key=_sort_key(path, by))


@dataclass(frozen=True)
class SortDescriptor:
    """One key of a multi-key sort: a key path and a direction."""

    path: Path
    ascending: bool = True

    def key(self, element: Any) -> Any:
        return self.path.read(element)


def sorted_by(
    elements: Iterable[E], descriptors: Sequence[SortDescriptor | Path]
) -> list[E]:
    """Return the elements sorted by several keys, highest priority first.

    Bare key paths are sorted ascending. Applies keys from lowest to highest
    priority, relying on sort stability.
    """
    result = list(elements)
    for descriptor in reversed(descriptors):
        if not isinstance(descriptor, SortDescriptor):
            descriptor = SortDescriptor(descriptor)
        result.sort(key=descriptor.key, reverse=not descriptor.ascending)
    return result


def find_ordering_violations(by: Predicate, values: Sequence[Any]) -> list[str]:
    """Check that ``by`` behaves as a strict weak ordering over ``values``.

    Checks irreflexivity, asymmetry, transitivity, and transitivity of
    incomparability on every pair and triple of the sample, so keep samples
    small.

    Returns:
        Human readable descriptions of each violation found, empty if none.
    """
    violations: list[str] = []

    def incomparable(a: Any, b: Any) -> bool:
        return not by(a, b) and not by(b, a)

    for a in values:
        if by(a, a):
            violations.append(f"not irreflexive: {a!r} is ordered before itself")

    for a, b in itertools.combinations(values, 2):
        if by(a, b) and by(b, a):
            violations.append(f"not asymmetric: {a!r} and {b!r} are ordered both ways")

    for a, b, c in itertools.permutations(values, 3):
        if by(a, b) and by(b, c) and not by(a, c):
            violations.append(
                f"not transitive: {a!r} < {b!r} < {c!r} but not {a!r} < {c!r}"
            )
        if incomparable(a, b) and incomparable(b, c) and not incomparable(a, c):
            violations.append(
                f"incomparability not transitive: {a!r} ~ {b!r} ~ {c!r} but not {a!r} ~ {c!r}"
            )

    return violations
