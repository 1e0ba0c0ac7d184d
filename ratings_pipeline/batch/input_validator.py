"""
Fail-fast precondition check on the source object.
"""

from ratings_pipeline.core.exceptions import FileNotFoundOrEmptyError, MissingInputError
from ratings_pipeline.observability.logger import get_logger
from ratings_pipeline.storage import ObjectLocator, StorageRegistry

MISSING_INPUT_FILE_PATH = "Missing input file path"

logger = get_logger(__name__)


class InputValidator:
    """
    Confirms the source object exists and is non-empty before any line is read.
    """

    def __init__(self, storage: StorageRegistry):
        """
        Initialize validator.

        Args:
            storage: Registry resolving the backend for the source locator
        """
        self.storage = storage

    def validate(self, locator: str | None) -> None:
        """
        Check the source object.

        Args:
            locator: Source object locator (scheme://bucket/objectPath)

        Raises:
            MissingInputError: If the locator is absent or blank
            FileNotFoundOrEmptyError: If the object is missing or has zero size
        """
        if locator is None or not locator.strip():
            logger.error("Input bucket path cannot be null")
            raise MissingInputError(MISSING_INPUT_FILE_PATH)

        logger.info(f"Starting to read file: {locator}")
        parsed = ObjectLocator.parse(locator)
        info = self.storage.for_locator(parsed).stat(parsed)

        if not info.exists or info.size == 0:
            logger.error(f"Input file is missing or empty: {locator}")
            raise FileNotFoundOrEmptyError(locator)

        logger.info(
            f"File validated and ready for processing: {locator}",
            extra={"size_bytes": info.size},
        )
