"""
Google Cloud Storage backend for ``gs://`` locators.
"""

from typing import Iterator

from google.api_core.exceptions import (
    GoogleAPIError,
    NotFound,
    RequestTimeout,
    ServerError,
    TooManyRequests,
)
from google.auth.exceptions import TransportError
from google.cloud import storage

from ratings_pipeline.core.exceptions import StorageError, StorageTransportError
from ratings_pipeline.observability.logger import get_logger

from .base import ObjectInfo, ObjectStorage
from .locator import ObjectLocator

logger = get_logger(__name__)

# Failures that may succeed on a later attempt
TRANSPORT_ERRORS = (ServerError, TooManyRequests, RequestTimeout, TransportError, ConnectionError)


class GCSObjectStorage(ObjectStorage):
    """
    Object storage on Google Cloud Storage.

    The client is created on first use so constructing the backend does not
    require credentials. Uploads run with SDK retries disabled; the caller's
    retry policy decides how often an upload is attempted.
    """

    scheme = "gs"

    def __init__(self, client: storage.Client | None = None, project: str | None = None):
        """
        Initialize GCS storage.

        Args:
            client: Pre-built storage client (created lazily if None)
            project: GCP project for a lazily created client
        """
        self._client = client
        self.project = project

    @property
    def client(self) -> storage.Client:
        if self._client is None:
            self._client = storage.Client(project=self.project)
        return self._client

    def stat(self, locator: ObjectLocator) -> ObjectInfo:
        if not locator.path:
            return ObjectInfo(exists=False)
        try:
            blob = self.client.bucket(locator.bucket).get_blob(locator.path)
        except NotFound:
            logger.warning(f"Bucket not found: {locator.bucket}")
            return ObjectInfo(exists=False)
        except TRANSPORT_ERRORS as e:
            raise StorageTransportError(f"Failed to stat {locator}: {e}") from e
        except GoogleAPIError as e:
            raise StorageError(f"Failed to stat {locator}: {e}") from e

        if blob is None:
            return ObjectInfo(exists=False)
        return ObjectInfo(exists=True, size=blob.size or 0)

    def open_lines(self, locator: ObjectLocator, encoding: str = "utf-8") -> Iterator[str]:
        blob = self.client.bucket(locator.bucket).blob(locator.path)
        try:
            with blob.open("rt", encoding=encoding, newline="") as f:
                yield from f
        except NotFound as e:
            raise StorageError(f"Object not found: {locator}") from e
        except TRANSPORT_ERRORS as e:
            raise StorageTransportError(f"Failed to read {locator}: {e}") from e
        except GoogleAPIError as e:
            raise StorageError(f"Failed to read {locator}: {e}") from e

    def write(
        self,
        locator: ObjectLocator,
        data: bytes,
        content_type: str = "text/plain",
    ) -> ObjectLocator:
        blob = self.client.bucket(locator.bucket).blob(locator.path)
        try:
            blob.upload_from_string(data, content_type=content_type, retry=None)
        except NotFound as e:
            raise StorageError(f"Bucket not found: {locator.bucket}") from e
        except TRANSPORT_ERRORS as e:
            raise StorageTransportError(f"Failed to upload {locator}: {e}") from e
        except GoogleAPIError as e:
            raise StorageError(f"Failed to upload {locator}: {e}") from e
        return locator
