"""
Streaming line reader over object storage.
"""

from typing import Iterator

from ratings_pipeline.core.exceptions import ReadError, StorageError
from ratings_pipeline.storage import ObjectLocator, StorageRegistry

LINE_TERMINATORS = "\r\n"


class ObjectLineReader:
    """
    Reads a source object one line at a time without loading it whole.
    """

    def __init__(self, storage: StorageRegistry, encoding: str = "utf-8"):
        """
        Initialize line reader.

        Args:
            storage: Registry resolving the backend for the source locator
            encoding: Text encoding of the source
        """
        self.storage = storage
        self.encoding = encoding

    def read_lines(self, locator: str | ObjectLocator) -> Iterator[str]:
        """
        Yield the lines of an object with their terminators removed.

        Args:
            locator: Source object

        Yields:
            Line content in source order

        Raises:
            ReadError: If the backend fails or the content cannot be decoded
        """
        if isinstance(locator, str):
            locator = ObjectLocator.parse(locator)
        backend = self.storage.for_locator(locator)

        try:
            for raw in backend.open_lines(locator, encoding=self.encoding):
                yield raw.rstrip(LINE_TERMINATORS)
        except (StorageError, UnicodeDecodeError) as e:
            raise ReadError(f"Error reading {locator}: {e}") from e
