"""
OutputFile model describing the artifact produced by the pipeline stage.
"""

from pathlib import Path

from pydantic import BaseModel, Field


class OutputFile(BaseModel):
    """
    The single flat file written by the pipeline stage.

    Append-only while the pipeline runs; read-only input to the transfer
    stage afterwards.

    Attributes:
        path: Location on the local filesystem
        byte_length: Size of the file after the last commit
        records_written: Number of records committed to the file
    """

    path: Path
    byte_length: int = Field(..., ge=0)
    records_written: int = Field(0, ge=0)

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_empty(self) -> bool:
        return self.byte_length == 0
