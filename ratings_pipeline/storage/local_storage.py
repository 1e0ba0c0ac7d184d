"""
Filesystem-backed object storage for ``file://`` locators.

``file://bucket/objectPath`` maps to ``<root>/bucket/objectPath``.
"""

from pathlib import Path
from typing import Iterator

from ratings_pipeline.core.exceptions import StorageError, StorageTransportError

from .base import ObjectInfo, ObjectStorage
from .locator import ObjectLocator


class LocalObjectStorage(ObjectStorage):
    """
    Object storage on the local filesystem.

    Used for local runs and tests; mirrors the bucket/object layout under a
    root directory.
    """

    scheme = "file"

    def __init__(self, root: str | Path = "/"):
        """
        Initialize local storage.

        Args:
            root: Directory that holds the buckets
        """
        self.root = Path(root)

    def path_for(self, locator: ObjectLocator) -> Path:
        return self.root / locator.bucket / locator.path

    def stat(self, locator: ObjectLocator) -> ObjectInfo:
        path = self.path_for(locator)
        if not locator.path or not path.is_file():
            return ObjectInfo(exists=False)
        return ObjectInfo(exists=True, size=path.stat().st_size)

    def open_lines(self, locator: ObjectLocator, encoding: str = "utf-8") -> Iterator[str]:
        path = self.path_for(locator)
        try:
            # newline="" keeps terminators as-is; the reader strips them
            with open(path, encoding=encoding, newline="") as f:
                yield from f
        except FileNotFoundError as e:
            raise StorageError(f"Object not found: {locator}") from e
        except OSError as e:
            raise StorageTransportError(f"Failed to read {locator}: {e}") from e

    def write(
        self,
        locator: ObjectLocator,
        data: bytes,
        content_type: str = "text/plain",
    ) -> ObjectLocator:
        path = self.path_for(locator)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise StorageTransportError(f"Failed to write {locator}: {e}") from e
        return locator
