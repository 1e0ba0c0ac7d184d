"""
Error taxonomy for the ratings pipeline.

Every failure a job can end in derives from PipelineError. Only
StorageTransportError is treated as retryable, and only by the transfer stage.
"""


class PipelineError(Exception):
    """Base class for all pipeline failures."""


class ConfigError(PipelineError):
    """Raised when job configuration is invalid or incomplete."""


class MissingInputError(PipelineError):
    """Raised when a required input path or parameter is absent."""


class MissingOutputError(PipelineError):
    """Raised when the output bucket path is absent."""


class FileNotFoundOrEmptyError(PipelineError):
    """Raised when the source object does not exist or has zero size."""

    def __init__(self, locator: str):
        self.locator = locator
        super().__init__(f"File does not exists in the bucket path: {locator}")


class MalformedLineError(PipelineError):
    """Raised when a data line does not split into exactly three fields."""

    def __init__(self, line: str, message: str, line_number: int | None = None):
        self.line = line
        self.line_number = line_number
        self.message = message
        location = f"line {line_number}" if line_number is not None else "line"
        super().__init__(f"[{location}] {message}: {line!r}")


class MissingMovieContextError(MalformedLineError):
    """Raised in strict mode when a data line appears before any header line."""


class ReadError(PipelineError):
    """Raised when the source object cannot be streamed."""


class WriteError(PipelineError):
    """Raised when the output sink fails to persist a chunk."""


class EmptyOutputError(WriteError):
    """Raised when the finished output file is empty and that is configured as fatal."""


class TransferFailedError(PipelineError):
    """Raised when the upload failed after exhausting the retry policy."""

    def __init__(self, message: str, outcome=None):
        self.outcome = outcome
        super().__init__(message)


class StorageError(PipelineError):
    """Raised by object storage backends."""


class StorageTransportError(StorageError):
    """Transport-level storage failure; safe to retry."""


class InvalidLocatorError(StorageError, ValueError):
    """Raised when an object locator does not follow scheme://bucket/objectPath."""
