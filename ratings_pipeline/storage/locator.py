"""
Object locators of the form ``scheme://bucket/objectPath``.
"""

from pydantic import BaseModel, Field

from ratings_pipeline.core.exceptions import InvalidLocatorError

SCHEME_SEPARATOR = "://"


class ObjectLocator(BaseModel):
    """
    Address of an object (or object prefix) in durable storage.

    The bucket is the first path segment after the scheme; the object path
    is everything after it.

    Attributes:
        scheme: Storage scheme, e.g. "gs" or "file"
        bucket: Bucket name
        path: Object path inside the bucket (may be empty for a bucket locator)
    """

    scheme: str = Field(..., min_length=1)
    bucket: str = Field(..., min_length=1)
    path: str = ""

    class Config:
        frozen = True

    @classmethod
    def parse(cls, text: str, default_scheme: str | None = None) -> "ObjectLocator":
        """
        Parse a locator string.

        Args:
            text: ``scheme://bucket/objectPath``, or ``bucket/objectPath``
                when a default scheme is given
            default_scheme: Scheme assumed when text has none

        Returns:
            ObjectLocator

        Raises:
            InvalidLocatorError: If the text has no scheme (and no default),
                or no bucket
        """
        if text is None or not text.strip():
            raise InvalidLocatorError("Locator must be a non-empty string")

        text = text.strip()
        if SCHEME_SEPARATOR in text:
            scheme, _, remainder = text.partition(SCHEME_SEPARATOR)
        elif default_scheme:
            scheme, remainder = default_scheme, text
        else:
            raise InvalidLocatorError(f"Locator has no scheme: {text}")

        bucket, _, path = remainder.partition("/")
        if not scheme or not bucket:
            raise InvalidLocatorError(f"Locator has no bucket: {text}")
        return cls(scheme=scheme, bucket=bucket, path=path)

    def child(self, *parts: str) -> "ObjectLocator":
        """Locator for an object below this one."""
        segments = [self.path.strip("/")] + [p.strip("/") for p in parts]
        return ObjectLocator(
            scheme=self.scheme,
            bucket=self.bucket,
            path="/".join(s for s in segments if s),
        )

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    def __str__(self) -> str:
        return f"{self.scheme}{SCHEME_SEPARATOR}{self.bucket}/{self.path}"
