"""
TransferOutcome model representing the result of uploading the output file.
"""

from pydantic import BaseModel, Field


class TransferOutcome(BaseModel):
    """
    Terminal result of an upload under the retry policy.

    Attributes:
        success: Whether an attempt succeeded
        attempts: Number of upload attempts made
        last_error: Message of the most recent failure, if any
        object_locator: scheme://bucket/objectPath of the uploaded object
        total_delay_seconds: Sum of the backoff delays slept between attempts
    """

    success: bool
    attempts: int = Field(..., ge=0)
    last_error: str | None = None
    object_locator: str | None = None
    total_delay_seconds: float = Field(0.0, ge=0.0)

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "attempts": 3,
                "last_error": "503 Service Unavailable",
                "object_locator": "gs://ratings-bucket/output/Dataset_20240101T000000.txt",
                "total_delay_seconds": 2.5,
            }
        }
