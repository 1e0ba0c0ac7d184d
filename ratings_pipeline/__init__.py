"""
ratings-pipeline: flattens a movie ratings export into a delimited file and
ships it to durable object storage.
"""

__version__ = "0.1.0"
