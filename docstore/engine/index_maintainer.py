"""
IndexMaintainer - keep index side-files in sync with the documents of a collection.
"""

import logging
from collections.abc import Iterable
from typing import Any

from docstore.engine.matcher import deep_equal, satisfies_index_spec
from docstore.engine.projector import index_projection, project
from docstore.engine.storage import JSONFileStore
from docstore.models.document import ID_FIELD, Document, ValueKind, kind_of
from docstore.models.exceptions import InvalidIndexSpecificationError

logger = logging.getLogger(__name__)


def validate_index_spec(spec: Any, argument: str = "indexSpec") -> Document:
    """
    Check the shape of an index specification.

    Leaves must be integer markers (conventionally 0); inner nodes must be
    nested specifications.

    Raises:
        InvalidIndexSpecificationError: On the first malformed node.
    """
    if kind_of(spec) != ValueKind.OBJECT:
        raise InvalidIndexSpecificationError(argument, "an object", spec)

    for key, marker in spec.items():
        if kind_of(marker) == ValueKind.OBJECT:
            validate_index_spec(marker, f"{argument}.{key}")
        elif isinstance(marker, bool) or not isinstance(marker, int):
            raise InvalidIndexSpecificationError(
                f"{argument}.{key}", "an integer marker or a nested object", marker
            )
    return spec


class IndexMaintainer:
    """
    Owns the indexes area of a collection.

    Layout:
    - indexes.json: manifest listing every index specification and the
      side-file that holds it, in creation order
    - index-<n>.json: specification, derived projection and the
      (projected document, id) entries admitted so far

    Every method is synchronous and rewrites whole files; the collection
    serializes calls under its write lock.
    """

    MANIFEST_NAME = "indexes.json"

    def __init__(self, store: JSONFileStore) -> None:
        """
        Initialize the maintainer.

        Args:
            store: File store rooted at the collection's indexes directory.
        """
        self._store = store

    def ensure_manifest(self) -> None:
        if not self._store.exists(self.MANIFEST_NAME):
            self._store.write(self.MANIFEST_NAME, {"indexes": []})

    def _load_manifest(self) -> dict[str, list[dict[str, Any]]]:
        manifest = self._store.read_if_exists(self.MANIFEST_NAME)
        return manifest if manifest is not None else {"indexes": []}

    def list_indexes(self) -> list[Document]:
        """Registered index specifications in creation order."""
        return [index["indexSpecification"] for index in self._load_manifest()["indexes"]]

    def _find_descriptor(self, spec: Document) -> dict[str, Any] | None:
        for index in self._load_manifest()["indexes"]:
            if deep_equal(index["indexSpecification"], spec):
                return index
        return None

    def read_index(self, spec: Document) -> dict[str, Any] | None:
        """Side-file contents of the index registered for spec, if any."""
        descriptor = self._find_descriptor(spec)
        if descriptor is None:
            return None
        return self._store.read(descriptor["jsonFileName"])

    def create_index(self, spec: Document, documents: Iterable[Document]) -> bool:
        """
        Register spec and seed its side-file from existing documents.

        Args:
            spec: Validated index specification.
            documents: Every document currently in the collection.

        Returns:
            False if a deeply-equal specification was already registered.
        """
        manifest = self._load_manifest()
        for index in manifest["indexes"]:
            if deep_equal(index["indexSpecification"], spec):
                return False

        json_file_name = f"index-{len(manifest['indexes'])}.json"
        side_file = {
            "indexSpecification": spec,
            "indexProjection": index_projection(spec),
            "indexedDocuments": [],
        }
        for document in documents:
            self._admit(side_file, document)

        # Side-file first, so the manifest never points at a missing file
        self._store.write(json_file_name, side_file)

        manifest["indexes"].append(
            {"indexSpecification": spec, "jsonFileName": json_file_name}
        )
        self._store.write(self.MANIFEST_NAME, manifest)

        logger.debug(
            f"Created {json_file_name} with {len(side_file['indexedDocuments'])} documents"
        )
        return True

    @staticmethod
    def _admit(side_file: dict[str, Any], document: Document) -> bool:
        if not satisfies_index_spec(side_file["indexSpecification"], document):
            return False
        side_file["indexedDocuments"].append(
            {
                "indexedDocument": project(document, side_file["indexProjection"]),
                ID_FIELD: document[ID_FIELD],
            }
        )
        return True

    @staticmethod
    def _evict(side_file: dict[str, Any], document_id: str) -> bool:
        entries = side_file["indexedDocuments"]
        kept = [entry for entry in entries if entry[ID_FIELD] != document_id]
        side_file["indexedDocuments"] = kept
        return len(kept) != len(entries)

    def _side_file_names(self) -> list[str]:
        return [index["jsonFileName"] for index in self._load_manifest()["indexes"]]

    def index_one(self, document: Document) -> None:
        self.index_many([document])

    def index_many(self, documents: list[Document]) -> None:
        """Append every admitted document to every registered index."""
        for json_file_name in self._side_file_names():
            side_file = self._store.read(json_file_name)
            admitted = [doc for doc in documents if self._admit(side_file, doc)]
            if admitted:
                self._store.write(json_file_name, side_file)
                logger.debug(f"Indexed {len(admitted)} documents into {json_file_name}")

    def reindex_one(self, document: Document) -> None:
        """Replace a document's entries with its new version in every index."""
        for json_file_name in self._side_file_names():
            side_file = self._store.read(json_file_name)
            evicted = self._evict(side_file, document[ID_FIELD])
            admitted = self._admit(side_file, document)
            if evicted or admitted:
                self._store.write(json_file_name, side_file)

    def unindex_one(self, document_id: str) -> None:
        """Remove a document's entries from every index."""
        for json_file_name in self._side_file_names():
            side_file = self._store.read(json_file_name)
            if self._evict(side_file, document_id):
                self._store.write(json_file_name, side_file)
                logger.debug(f"Removed {document_id} from {json_file_name}")
