"""
Structural matching of documents against query patterns and index specifications.
"""

from typing import Any

from docstore.models.document import Document, ValueKind, kind_of

# Stand-in for a key the document does not have; equal to nothing else
_MISSING = object()


def _strict_equal(left: Any, right: Any) -> bool:
    """
    Equality without coercion between JSON types.

    Scalars must share a JSON type (a bool never equals a number).
    Arrays and other containers only equal themselves.
    """
    if left is right:
        return True
    if left is _MISSING or right is _MISSING:
        return False
    if kind_of(left) != ValueKind.SCALAR or kind_of(right) != ValueKind.SCALAR:
        return False
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    return type(left) is type(right) and left == right


def satisfies(pattern: Document, document: Document) -> bool:
    """
    Check whether document contains everything pattern asks for.

    Nested objects on both sides are compared recursively; every other
    pair of values must be strictly equal. Keys only present in the
    document are ignored, so an empty pattern matches anything.

    Args:
        pattern: Partial document to look for.
        document: Candidate document.

    Returns:
        True if no key of pattern produced a mismatch.
    """
    for key, expected in pattern.items():
        actual = document.get(key, _MISSING)
        if kind_of(expected) == ValueKind.OBJECT and kind_of(actual) == ValueKind.OBJECT:
            if not satisfies(expected, actual):
                return False
        elif not _strict_equal(expected, actual):
            return False
    return True


def satisfies_index_spec(spec: Document, document: Document) -> bool:
    """
    Check whether document has every field an index specification names.

    A nested specification requires a nested object at that key; a leaf
    marker requires a value that is not itself an object.
    """
    for key, marker in spec.items():
        if key not in document:
            return False

        spec_is_object = kind_of(marker) == ValueKind.OBJECT
        value_is_object = kind_of(document[key]) == ValueKind.OBJECT

        if spec_is_object and value_is_object:
            if not satisfies_index_spec(marker, document[key]):
                return False
        elif spec_is_object != value_is_object:
            return False
    return True


def deep_equal(left: Any, right: Any) -> bool:
    """Structural equality: same keys, recursively equal values."""
    left_kind = kind_of(left)
    if left_kind != kind_of(right):
        return False

    if left_kind == ValueKind.OBJECT:
        if left.keys() != right.keys():
            return False
        return all(deep_equal(left[key], right[key]) for key in left)

    if left_kind == ValueKind.ARRAY:
        if len(left) != len(right):
            return False
        return all(deep_equal(a, b) for a, b in zip(left, right))

    return _strict_equal(left, right)
