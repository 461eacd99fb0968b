"""
JSONFileStore - synchronous JSON file I/O for one directory.

All methods block; the collection runs them in the default executor.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class JSONFileStore:
    """
    Reads and writes whole JSON files inside a single directory.

    Writes go to "<name>.tmp" first and are renamed into place, so a
    reader never sees a half-written file.
    """

    SUFFIX = ".json"
    TEMP_SUFFIX = ".tmp"

    def __init__(self, directory: str, indent: int = 2, fsync: bool = False) -> None:
        """
        Initialize the store.

        Args:
            directory: Directory holding the JSON files.
            indent: Indentation used when serializing.
            fsync: If True, fdatasync every file before renaming it into place.
        """
        self.directory = directory
        self._indent = indent
        self._fsync = fsync

    def path(self, name: str) -> str:
        return os.path.join(self.directory, name)

    def ensure(self) -> None:
        """Create the directory and drop temp files left by interrupted writes."""
        Path(self.directory).mkdir(parents=True, exist_ok=True)
        self.cleanup_temp_files()

    def cleanup_temp_files(self) -> None:
        for filename in os.listdir(self.directory):
            if filename.endswith(self.TEMP_SUFFIX):
                tmp_path = self.path(filename)
                try:
                    os.remove(tmp_path)
                    logger.debug(f"Removed orphaned temp file {tmp_path}")
                except OSError as e:
                    logger.warning(f"Failed to remove orphaned temp file {tmp_path}: {e}")

    def exists(self, name: str) -> bool:
        return os.path.isfile(self.path(name))

    def read(self, name: str) -> Any:
        with open(self.path(name), "r", encoding="utf-8") as f:
            return json.load(f)

    def read_if_exists(self, name: str) -> Any | None:
        try:
            return self.read(name)
        except FileNotFoundError:
            return None

    def write(self, name: str, payload: Any) -> None:
        """Atomically replace name with the serialized payload."""
        final_path = self.path(name)
        temp_path = final_path + self.TEMP_SUFFIX

        # Serialize and encode before touching the file system
        data = (
            json.dumps(payload, indent=self._indent, ensure_ascii=False, allow_nan=False)
            + "\n"
        ).encode("utf-8")

        try:
            with open(temp_path, "wb") as f:
                f.write(data)
                if self._fsync:
                    f.flush()
                    # Use fdatasync if available (Linux), fallback to fsync (macOS/Windows)
                    _sync_data = getattr(os, "fdatasync", os.fsync)
                    _sync_data(f.fileno())

            os.replace(temp_path, final_path)
        except BaseException:
            try:
                os.remove(temp_path)
            except FileNotFoundError:
                pass
            raise

    def remove(self, name: str) -> bool:
        """Delete name; returns False if it was already gone."""
        try:
            os.remove(self.path(name))
        except FileNotFoundError:
            return False
        return True

    def list_names(self) -> list[str]:
        """JSON file names in the directory, sorted lexicographically."""
        return sorted(
            filename
            for filename in os.listdir(self.directory)
            if filename.endswith(self.SUFFIX)
        )
