"""
Batch data source readers.
"""

from .line_reader import ObjectLineReader

__all__ = [
    "ObjectLineReader",
]
