"""
Scheme -> backend lookup for object storage.
"""

from pathlib import Path

from ratings_pipeline.core.exceptions import StorageError

from .base import ObjectStorage
from .locator import ObjectLocator


class StorageRegistry:
    """
    Resolves the backend that serves a locator's scheme.
    """

    def __init__(self, backends: list[ObjectStorage] | None = None):
        self._backends: dict[str, ObjectStorage] = {}
        for backend in backends or []:
            self.register(backend)

    def register(self, backend: ObjectStorage, scheme: str | None = None) -> None:
        self._backends[scheme or backend.scheme] = backend

    def for_locator(self, locator: ObjectLocator) -> ObjectStorage:
        """
        Get the backend for a locator.

        Raises:
            StorageError: If no backend is registered for the scheme
        """
        try:
            return self._backends[locator.scheme]
        except KeyError:
            raise StorageError(
                f"No storage backend registered for scheme '{locator.scheme}'"
            ) from None

    @property
    def schemes(self) -> list[str]:
        return sorted(self._backends)


def build_default_registry(local_root: str | Path = "/", gcs_project: str | None = None) -> StorageRegistry:
    """
    Registry with the production backends: gs:// and file://.

    Args:
        local_root: Root directory for file:// locators
        gcs_project: GCP project for the storage client
    """
    # Imported here so file:// only runs do not load the GCS client library
    from .gcs_storage import GCSObjectStorage
    from .local_storage import LocalObjectStorage

    return StorageRegistry([
        GCSObjectStorage(project=gcs_project),
        LocalObjectStorage(local_root),
    ])
