"""
Chunk model: a bounded, ordered batch of records committed as one unit.
"""

from pydantic import BaseModel, Field

from .flat_record import FlatRecord

DEFAULT_CHUNK_SIZE = 500


class ChunkFullError(ValueError):
    """Raised when adding a record to a chunk that reached its capacity."""


class Chunk(BaseModel):
    """
    Ordered records buffered between two commits.

    Chunks are created, filled, committed and discarded; they are never reused.

    Attributes:
        sequence: Zero-based position of the chunk in the source
        capacity: Maximum number of records
        records: Buffered records in source order
    """

    sequence: int = Field(..., ge=0)
    capacity: int = Field(DEFAULT_CHUNK_SIZE, gt=0)
    records: list[FlatRecord] = Field(default_factory=list)

    def add(self, record: FlatRecord) -> None:
        if self.is_full:
            raise ChunkFullError(
                f"Chunk {self.sequence} already holds {self.capacity} records"
            )
        self.records.append(record)

    @property
    def size(self) -> int:
        return len(self.records)

    @property
    def is_full(self) -> bool:
        return len(self.records) >= self.capacity

    @property
    def is_empty(self) -> bool:
        return not self.records
