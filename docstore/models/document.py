"""
Document type aliases and the value-kind tag used by the matcher and projector.
"""

from enum import IntEnum
from typing import Any

Document = dict[str, Any]

# Reserved primary key carried by every persisted document
ID_FIELD = "_id"


class ValueKind(IntEnum):
    """Kind of a JSON value inside a document tree."""

    SCALAR = 0  # str, int, float, bool, None
    ARRAY = 1
    OBJECT = 2


def kind_of(value: Any) -> ValueKind:
    """Classify a JSON value."""
    if isinstance(value, dict):
        return ValueKind.OBJECT
    if isinstance(value, (list, tuple)):
        return ValueKind.ARRAY
    return ValueKind.SCALAR


def is_plain_object(value: Any) -> bool:
    """True for a mapping usable as a document, query or specification."""
    return kind_of(value) == ValueKind.OBJECT
