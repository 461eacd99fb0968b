"""
File-system backed JSON document store.

This package provides an embedded document database with:
- insert_one / insert_many - one <_id>.json file per document
- find_one / find - id point lookups or structural pattern scans
- update_one - shallow merge, _id preserved
- delete_one - file removal
- create_index - projected side-files kept in sync with every write
"""

from docstore.engine.client import Database, DocClient, open_client
from docstore.engine.collection import Collection
from docstore.models.object_id import ObjectId, ObjectIdGenerator

__all__ = [
    "Collection",
    "Database",
    "DocClient",
    "ObjectId",
    "ObjectIdGenerator",
    "open_client",
]
