"""Key Paths - Typed, composable references to attributes of Python classes."""

from keypaths.key_path import (
    AnyKeyPath,
    KeyPath,
    PartialKeyPath,
    ReferenceWritableKeyPath,
    WritableKeyPath,
)
from keypaths.parsing import KeyPathParser
from keypaths.sorting import (
    SortDescriptor,
    find_ordering_violations,
    sort_on,
    sorted_by,
    sorted_on,
)
from keypaths.types import (
    FieldDefinition,
    Mutability,
    RecordTypeDefinition,
    TypeRegistry,
    record_type_of,
)

__all__ = [
    # Key paths
    "KeyPath",
    "WritableKeyPath",
    "ReferenceWritableKeyPath",
    "PartialKeyPath",
    "AnyKeyPath",
    "KeyPathParser",
    # Sorting
    "sorted_on",
    "sort_on",
    "sorted_by",
    "SortDescriptor",
    "find_ordering_violations",
    # Field definitions
    "FieldDefinition",
    "Mutability",
    "RecordTypeDefinition",
    "TypeRegistry",
    "record_type_of",
]

__version__ = "0.1.0"
