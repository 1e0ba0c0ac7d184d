"""
PipelineResult model summarizing a completed pipeline stage.
"""

from pydantic import BaseModel, Field

from .output_file import OutputFile


class PipelineResult(BaseModel):
    """
    Counters reported by the chunked pipeline once every chunk committed.

    Attributes:
        lines_read: Source lines consumed (headers included)
        records_written: Records committed to the output file
        chunks_committed: Non-empty chunks written
        output_file: The finished output artifact
    """

    lines_read: int = Field(0, ge=0)
    records_written: int = Field(0, ge=0)
    chunks_committed: int = Field(0, ge=0)
    output_file: OutputFile
