"""
Batch processing: validation, chunked transform, output and transfer.
"""

from .input_validator import InputValidator
from .job import JobOrchestrator
from .pipeline import ChunkedPipeline
from .readers import ObjectLineReader
from .transfer import TransferAgent
from .writers import FlatFileWriter

__all__ = [
    "ChunkedPipeline",
    "FlatFileWriter",
    "InputValidator",
    "JobOrchestrator",
    "ObjectLineReader",
    "TransferAgent",
]
