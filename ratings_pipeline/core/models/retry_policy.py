"""
RetryPolicy model describing exponential backoff for uploads.
"""

from pydantic import BaseModel, Field, field_validator


class RetryPolicy(BaseModel):
    """
    Bounded exponential backoff with a ceiling.

    Attributes:
        max_attempts: Total attempts, the first one included
        initial_delay: Seconds slept before the first retry
        multiplier: Factor applied to the delay after each retry
        max_delay: Upper bound for any single delay
    """

    max_attempts: int = Field(5, ge=1)
    initial_delay: float = Field(1.0, ge=0.0)
    multiplier: float = Field(1.5, ge=1.0)
    max_delay: float = Field(10.0, ge=0.0)

    @field_validator("max_delay")
    @classmethod
    def check_ceiling(cls, v, info):
        """Validate that the ceiling is not below the initial delay."""
        initial = info.data.get("initial_delay", 0.0)
        if v < initial:
            raise ValueError(f"max_delay ({v}) must be >= initial_delay ({initial})")
        return v

    def delay_for(self, retry_number: int) -> float:
        """
        Delay to sleep before the given retry.

        Args:
            retry_number: One-based retry index (1 is the second attempt)

        Returns:
            Delay in seconds
        """
        if retry_number < 1:
            raise ValueError("retry_number starts at 1")
        return min(self.initial_delay * self.multiplier ** (retry_number - 1), self.max_delay)
