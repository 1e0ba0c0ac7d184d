"""
Batch output writers.
"""

from .flat_file_writer import FlatFileWriter

__all__ = [
    "FlatFileWriter",
]
