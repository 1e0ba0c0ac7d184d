"""
Line parsing for the ratings export format.
"""

from .line_parser import LineParser, is_header, parse_line

__all__ = [
    "LineParser",
    "is_header",
    "parse_line",
]
