"""
DocClient and Database - directory provisioning and name validation.
"""

import logging
import os
import re
from pathlib import Path

from docstore.engine.collection import Collection
from docstore.models.exceptions import InvalidNameError
from docstore.models.object_id import ObjectIdGenerator, default_generator

logger = logging.getLogger(__name__)

INVALID_NAME_CHARS = '/\\. "$*<>:|?'
_NAME_PATTERN = re.compile(r'^[^/\\. "$*<>:|?]+$')


def validate_name(kind: str, name: object, max_length: int) -> str:
    """
    Check a database or collection name.

    Raises:
        InvalidNameError: If name is not a 1..max_length character string
            free of INVALID_NAME_CHARS.
    """
    if not isinstance(name, str):
        raise InvalidNameError(kind, name, "must be a string")
    if len(name) == 0:
        raise InvalidNameError(kind, name, "cannot be an empty string")
    if len(name) > max_length:
        raise InvalidNameError(kind, name, f"must be at most {max_length} characters")
    if not _NAME_PATTERN.match(name):
        raise InvalidNameError(
            kind, name, f"cannot contain these characters: {INVALID_NAME_CHARS}"
        )
    return name


class Database:
    """
    A directory of collections.

    collection() hands out one Collection per name, so every caller in
    the process shares that collection's write lock.
    """

    MAX_COLLECTION_NAME_LENGTH = 255

    def __init__(self, client: "DocClient", name: str) -> None:
        self.name = validate_name("database", name, DocClient.MAX_DATABASE_NAME_LENGTH)
        self.client = client
        self.db_path = os.path.join(client.base_path, name)
        self._collections: dict[str, Collection] = {}

        Path(self.db_path).mkdir(parents=True, exist_ok=True)

    def collection(self, name: str) -> Collection:
        """Open a collection, creating its directories on first use."""
        validate_name("collection", name, self.MAX_COLLECTION_NAME_LENGTH)

        collection = self._collections.get(name)
        if collection is None:
            collection = Collection(
                name,
                os.path.join(self.db_path, name),
                id_generator=self.client.id_generator,
                indent=self.client.indent,
                fsync=self.client.fsync,
            )
            self._collections[name] = collection
            logger.debug(f"Opened collection {self.name}.{name}")
        return collection

    def list_collection_names(self) -> list[str]:
        return sorted(
            entry.name for entry in os.scandir(self.db_path) if entry.is_dir()
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, path={self.db_path!r})"


class DocClient:
    """
    Entry point: a base directory holding one sub-directory per database.

    Configuration given here (indent, fsync, id generator) applies to every
    collection opened through this client.
    """

    MAX_DATABASE_NAME_LENGTH = 63

    def __init__(
        self,
        base_path: str | os.PathLike,
        *,
        indent: int = Collection.DEFAULT_INDENT,
        fsync: bool = Collection.DEFAULT_FSYNC,
        id_generator: ObjectIdGenerator | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_path: Directory for all databases (created if missing).
            indent: JSON indentation for every file written.
            fsync: fdatasync every file write.
            id_generator: Shared id source (process default if omitted).
        """
        base_path = os.fspath(base_path) if base_path is not None else ""
        if not base_path or not base_path.strip():
            raise ValueError("base_path cannot be empty")

        self.base_path = os.path.abspath(base_path)
        self.indent = indent
        self.fsync = fsync
        self.id_generator = id_generator or default_generator
        self._databases: dict[str, Database] = {}

        Path(self.base_path).mkdir(parents=True, exist_ok=True)

    def database(self, name: str) -> Database:
        """Open a database, creating its directory on first use."""
        validate_name("database", name, self.MAX_DATABASE_NAME_LENGTH)

        database = self._databases.get(name)
        if database is None:
            database = Database(self, name)
            self._databases[name] = database
        return database

    def list_database_names(self) -> list[str]:
        return sorted(
            entry.name for entry in os.scandir(self.base_path) if entry.is_dir()
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(base_path={self.base_path!r})"


def open_client(base_path: str | os.PathLike, **options) -> DocClient:
    return DocClient(base_path, **options)
