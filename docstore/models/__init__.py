"""
Data models for the document store.
"""

from docstore.models.document import ID_FIELD, Document, ValueKind, kind_of
from docstore.models.exceptions import (
    DocStoreError,
    InvalidArgumentError,
    InvalidDocumentError,
    InvalidIdentifierError,
    InvalidIndexSpecificationError,
    InvalidNameError,
    InvalidQueryError,
)
from docstore.models.object_id import ObjectId, ObjectIdGenerator

__all__ = [
    "ID_FIELD",
    "Document",
    "ValueKind",
    "kind_of",
    "DocStoreError",
    "InvalidArgumentError",
    "InvalidDocumentError",
    "InvalidIdentifierError",
    "InvalidIndexSpecificationError",
    "InvalidNameError",
    "InvalidQueryError",
    "ObjectId",
    "ObjectIdGenerator",
]
