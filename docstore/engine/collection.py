"""
Collection - document CRUD and index orchestration over a directory of JSON files.
"""

import asyncio
import json
import logging
import os
import threading
from collections.abc import Callable
from typing import Any, TypeVar

from docstore.engine.index_maintainer import IndexMaintainer, validate_index_spec
from docstore.engine.matcher import satisfies
from docstore.engine.projector import project
from docstore.engine.storage import JSONFileStore
from docstore.models.document import ID_FIELD, Document, is_plain_object
from docstore.models.exceptions import (
    InvalidDocumentError,
    InvalidIdentifierError,
    InvalidQueryError,
)
from docstore.models.object_id import ObjectId, ObjectIdGenerator, default_generator

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Collection:
    """
    A named set of documents stored one JSON file per document.

    Provides:
    - insert_one(document) / insert_many(documents)
    - find_one(query) / find(query): id point lookup or full scan
    - update_one(query, patch): shallow merge, id preserved
    - delete_one(query)
    - create_index(spec) / list_indexes()

    Architecture:
    - documents/<_id>.json holds each document
    - indexes/ holds the manifest and one side-file per index, updated
      on every insert, update and delete
    - Writes are serialized by a per-collection asyncio.Lock; reads take
      no lock and always re-read from disk
    - File I/O runs in the default thread pool
    """

    DOCUMENTS_DIR = "documents"
    INDEXES_DIR = "indexes"

    DEFAULT_INDENT = 2
    DEFAULT_FSYNC = False

    def __init__(
        self,
        name: str,
        collection_path: str,
        id_generator: ObjectIdGenerator = default_generator,
        indent: int = DEFAULT_INDENT,
        fsync: bool = DEFAULT_FSYNC,
    ) -> None:
        """
        Open (creating if needed) a collection directory.

        Args:
            name: Collection name, already validated by the caller.
            collection_path: Directory of the collection.
            id_generator: Source of document ids.
            indent: JSON indentation for every file written (0-8).
            fsync: If True, fdatasync each file before it replaces the old one.
        """
        if isinstance(indent, bool) or not isinstance(indent, int):
            raise TypeError(f"indent must be an int, got {type(indent).__name__}")
        if indent < 0 or indent > 8:
            raise ValueError(f"indent must be between 0 and 8, got {indent}")
        if not isinstance(fsync, bool):
            raise TypeError(f"fsync must be a bool, got {type(fsync).__name__}")

        self.name = name
        self.collection_path = os.path.abspath(collection_path)
        self.documents_path = os.path.join(self.collection_path, self.DOCUMENTS_DIR)
        self.indexes_path = os.path.join(self.collection_path, self.INDEXES_DIR)

        self._id_generator = id_generator
        self._documents = JSONFileStore(self.documents_path, indent=indent, fsync=fsync)
        self._index_files = JSONFileStore(self.indexes_path, indent=indent, fsync=fsync)
        self._indexes = IndexMaintainer(self._index_files)

        # Serializes writers within this process only (lazy initialized in async context)
        self._write_lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None
        self._init_lock = threading.Lock()

        self._initialize()

    def _get_write_lock(self) -> asyncio.Lock:
        """
        Return the write lock for the running event loop.

        A cached handle may outlive the loop it was first used on; a new
        loop gets a fresh lock. Uses double-checked locking with
        threading.Lock to prevent races during initialization.
        """
        loop = asyncio.get_running_loop()
        if self._write_lock is not None and self._lock_loop is loop:
            return self._write_lock

        with self._init_lock:
            if self._write_lock is None or self._lock_loop is not loop:
                self._write_lock = asyncio.Lock()
                self._lock_loop = loop
            return self._write_lock

    def _initialize(self) -> None:
        """Create both areas, drop orphaned temp files and seed the manifest."""
        self._documents.ensure()
        self._index_files.ensure()
        self._indexes.ensure_manifest()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, path={self.collection_path!r})"

    async def _run(self, func: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    # ----------------------------------------------------------------- inserts

    @staticmethod
    def _snapshot(document: Any, argument: str = "document") -> Document:
        """
        Validate document and return a detached JSON copy of it.

        Rejects anything that would not land on disk as strict UTF-8 JSON:
        unserializable values, NaN and infinities, lone surrogates.

        Raises:
            InvalidDocumentError: If document is not a JSON-serializable object.
        """
        if not is_plain_object(document):
            raise InvalidDocumentError(argument, "an object", document)
        try:
            text = json.dumps(document, allow_nan=False, ensure_ascii=False)
            text.encode("utf-8")
            return json.loads(text)
        except (TypeError, ValueError) as e:
            raise InvalidDocumentError(argument, "JSON-serializable", document) from e

    def _prepare_insert(self, document: Any) -> Document:
        snapshot = self._snapshot(document)
        snapshot.pop(ID_FIELD, None)
        return {ID_FIELD: self._id_generator.generate_str(), **snapshot}

    def _insert_sync(self, document: Document) -> None:
        self._documents.write(self._file_name(document[ID_FIELD]), document)
        self._indexes.index_one(document)
        logger.debug(f"Inserted {document[ID_FIELD]} into {self.name}")

    async def insert_one(self, document: Document) -> Document:
        """
        Insert a document under a freshly generated _id.

        Any _id supplied by the caller is discarded. The caller's mapping
        is not modified.

        Args:
            document: Plain object to insert (may be empty).

        Returns:
            The stored document, including its _id.
        """
        prepared = self._prepare_insert(document)
        async with self._get_write_lock():
            await self._run(self._insert_sync, prepared)
        return prepared

    async def insert_many(self, documents: list[Document]) -> list[Document]:
        """
        Insert each document independently.

        A failure part-way through leaves the earlier documents inserted.

        Returns:
            The stored documents, in input order.
        """
        if not isinstance(documents, (list, tuple)):
            raise InvalidDocumentError("documents", "an array", documents)

        inserted = []
        for document in documents:
            inserted.append(await self.insert_one(document))
        return inserted

    # ------------------------------------------------------------------- reads

    @staticmethod
    def _file_name(document_id: str) -> str:
        return f"{document_id}{JSONFileStore.SUFFIX}"

    @staticmethod
    def _check_query(query: Any, projection: Any = None) -> None:
        if not is_plain_object(query):
            raise InvalidQueryError("query", "an object", query)
        if projection is not None and not is_plain_object(projection):
            raise InvalidQueryError("projection", "an object", projection)

    def _find_sync(self, query: Document, limit: int | None) -> list[Document]:
        if ID_FIELD in query:
            try:
                document_id = ObjectId.validate(query[ID_FIELD])
            except InvalidIdentifierError:
                return []
            document = self._documents.read_if_exists(self._file_name(document_id))
            if document is None or not satisfies(query, document):
                return []
            return [document]

        matches: list[Document] = []
        for file_name in self._documents.list_names():
            document = self._documents.read_if_exists(file_name)
            # Deleted between listing and reading
            if document is None:
                continue
            if satisfies(query, document):
                matches.append(document)
                if limit is not None and len(matches) >= limit:
                    break
        return matches

    async def find_one(
        self, query: Document, projection: Document | None = None
    ) -> Document | None:
        """
        Fetch the first document matching query.

        With an _id in the query this is a direct file lookup; a malformed
        or unknown id means "not found", never an error. Otherwise files
        are scanned in file name order.

        Args:
            query: Partial document to match.
            projection: Optional inclusion projection for the result.

        Returns:
            The document, or None if nothing matched.
        """
        self._check_query(query, projection)
        matches = await self._run(self._find_sync, query, 1)
        if not matches:
            return None
        return project(matches[0], projection)

    async def find(
        self, query: Document, projection: Document | None = None
    ) -> list[Document]:
        """Fetch every document matching query, in file name order."""
        self._check_query(query, projection)
        matches = await self._run(self._find_sync, query, None)
        return [project(document, projection) for document in matches]

    async def count(self, query: Document) -> int:
        """Number of documents matching query."""
        return len(await self.find(query))

    # ------------------------------------------------------------------ writes

    def _update_sync(self, query: Document, patch: Document) -> Document | None:
        matches = self._find_sync(query, 1)
        if not matches:
            return None

        current = matches[0]
        updated = {**current, **patch, ID_FIELD: current[ID_FIELD]}
        self._documents.write(self._file_name(updated[ID_FIELD]), updated)
        self._indexes.reindex_one(updated)
        logger.debug(f"Updated {updated[ID_FIELD]} in {self.name}")
        return updated

    async def update_one(self, query: Document, patch: Document) -> Document | None:
        """
        Shallow-merge patch over the first document matching query.

        The document keeps its _id; an _id inside patch is ignored.

        Returns:
            The updated document, or None if nothing matched.
        """
        patch = self._snapshot(patch, "patch")
        patch.pop(ID_FIELD, None)
        self._check_query(query)

        async with self._get_write_lock():
            return await self._run(self._update_sync, query, patch)

    def _delete_sync(self, query: Document) -> Document | None:
        matches = self._find_sync(query, 1)
        if not matches:
            return None

        document = matches[0]
        self._documents.remove(self._file_name(document[ID_FIELD]))
        self._indexes.unindex_one(document[ID_FIELD])
        logger.debug(f"Deleted {document[ID_FIELD]} from {self.name}")
        return document

    async def delete_one(self, query: Document) -> Document | None:
        """
        Remove the first document matching query.

        Returns:
            The removed document, or None if nothing matched.
        """
        self._check_query(query)
        async with self._get_write_lock():
            return await self._run(self._delete_sync, query)

    # ----------------------------------------------------------------- indexes

    def _create_index_sync(self, spec: Document) -> bool:
        return self._indexes.create_index(spec, self._find_sync({}, None))

    async def create_index(self, spec: Document) -> bool:
        """
        Register an index and seed it from the existing documents.

        Args:
            spec: Index specification; leaves are markers (0), inner nodes
                  nested specifications.

        Returns:
            False if an equal specification already exists (no-op).
        """
        spec = validate_index_spec(spec)
        async with self._get_write_lock():
            return await self._run(self._create_index_sync, spec)

    async def list_indexes(self) -> list[Document]:
        """Registered index specifications in creation order."""
        return await self._run(self._indexes.list_indexes)

    async def get_index(self, spec: Document) -> dict[str, Any] | None:
        """Contents of the side-file registered for spec, or None."""
        spec = validate_index_spec(spec)
        return await self._run(self._indexes.read_index, spec)
