"""
Field projection over documents.
"""

from typing import Any

from docstore.models.document import Document, ValueKind, kind_of

INCLUDE = 1
EXCLUDE = 0


def _is_include_marker(marker: Any) -> bool:
    return not isinstance(marker, bool) and marker == INCLUDE


def project(document: Document, spec: Document | None) -> Document:
    """
    Reduce document to the fields named in spec.

    Projection is inclusion-only: a field is kept when its marker is 1
    or a nested specification, and everything else is dropped (including
    fields marked 0).

    Args:
        document: Source document (not modified).
        spec: Projection specification, or None for the whole document.

    Returns:
        The projected document.
    """
    if spec is None:
        return document

    projected: Document = {}
    for key, marker in spec.items():
        if key not in document:
            continue

        value = document[key]
        if kind_of(marker) == ValueKind.OBJECT:
            if kind_of(value) == ValueKind.OBJECT:
                projected[key] = project(value, marker)
            else:
                # Nested projection over a non-object value
                projected[key] = value
        elif _is_include_marker(marker):
            projected[key] = value

    return projected


def index_projection(spec: Document) -> Document:
    """Turn an index specification into a projection including every leaf."""
    projection: Document = {}
    for key, marker in spec.items():
        if kind_of(marker) == ValueKind.OBJECT:
            projection[key] = index_projection(marker)
        else:
            projection[key] = INCLUDE
    return projection
