"""
Core data models for the ratings pipeline.

All models use Pydantic for runtime validation and type safety.
"""

from .chunk import DEFAULT_CHUNK_SIZE, Chunk, ChunkFullError
from .flat_record import FlatRecord
from .job_execution import (
    InvalidTransitionError,
    JobExecution,
    JobFailure,
    JobState,
)
from .output_file import OutputFile
from .parser_state import ParserState
from .pipeline_result import PipelineResult
from .retry_policy import RetryPolicy
from .transfer_outcome import TransferOutcome

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "Chunk",
    "ChunkFullError",
    "FlatRecord",
    "InvalidTransitionError",
    "JobExecution",
    "JobFailure",
    "JobState",
    "OutputFile",
    "ParserState",
    "PipelineResult",
    "RetryPolicy",
    "TransferOutcome",
]
