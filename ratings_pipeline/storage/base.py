"""
Object storage interface.

The pipeline only needs three operations from durable storage: an
existence/size check, a streaming read, and a whole-object write.
"""

from abc import ABC, abstractmethod
from typing import Iterator

from pydantic import BaseModel, Field

from .locator import ObjectLocator


class ObjectInfo(BaseModel):
    """
    Result of an existence/size check.

    Attributes:
        exists: Whether the object exists
        size: Size in bytes (0 when missing)
    """

    exists: bool
    size: int = Field(0, ge=0)


class ObjectStorage(ABC):
    """
    Abstract base class for storage backends.

    Backends raise StorageTransportError for failures worth retrying and
    StorageError for everything else.
    """

    scheme: str = ""

    @abstractmethod
    def stat(self, locator: ObjectLocator) -> ObjectInfo:
        """
        Check whether an object exists and how large it is.

        Args:
            locator: Object to check

        Returns:
            ObjectInfo
        """
        pass

    @abstractmethod
    def open_lines(self, locator: ObjectLocator, encoding: str = "utf-8") -> Iterator[str]:
        """
        Stream the object as text lines, line terminators included.

        Args:
            locator: Object to read
            encoding: Text encoding

        Yields:
            Raw lines in source order
        """
        pass

    @abstractmethod
    def write(
        self,
        locator: ObjectLocator,
        data: bytes,
        content_type: str = "text/plain",
    ) -> ObjectLocator:
        """
        Write an object in a single operation.

        Args:
            locator: Destination object
            data: Full object contents
            content_type: MIME type recorded with the object

        Returns:
            Locator of the written object
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(scheme={self.scheme})"
