"""
Collection engine: matching, projection, index maintenance and file storage.
"""

from docstore.engine.client import Database, DocClient, open_client
from docstore.engine.collection import Collection
from docstore.engine.index_maintainer import IndexMaintainer
from docstore.engine.matcher import deep_equal, satisfies, satisfies_index_spec
from docstore.engine.projector import index_projection, project
from docstore.engine.storage import JSONFileStore

__all__ = [
    "Collection",
    "Database",
    "DocClient",
    "IndexMaintainer",
    "JSONFileStore",
    "deep_equal",
    "index_projection",
    "open_client",
    "project",
    "satisfies",
    "satisfies_index_spec",
]
