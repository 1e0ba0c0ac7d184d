"""
Upload of the finished output file to durable storage.

Uploads are retried with bounded exponential backoff; only transport
failures are retried, and sleeps between attempts are synchronous.
"""

import time
from pathlib import Path
from typing import Callable

from ratings_pipeline.core.exceptions import StorageError, StorageTransportError, TransferFailedError
from ratings_pipeline.core.models import OutputFile, RetryPolicy, TransferOutcome
from ratings_pipeline.observability.logger import get_logger
from ratings_pipeline.observability.metrics import PipelineMonitor
from ratings_pipeline.storage import ObjectLocator, StorageRegistry

DEFAULT_TARGET_DIRECTORY = "output/"

logger = get_logger(__name__)


class TransferAgent:
    """
    Uploads one local file as a single object write under a retry policy.
    """

    def __init__(
        self,
        storage: StorageRegistry,
        retry_policy: RetryPolicy | None = None,
        target_directory: str = DEFAULT_TARGET_DIRECTORY,
        default_scheme: str = "gs",
        sleep: Callable[[float], None] = time.sleep,
        monitor: PipelineMonitor | None = None,
    ):
        """
        Initialize transfer agent.

        Args:
            storage: Registry resolving the destination backend
            retry_policy: Backoff policy (5 attempts, 1s x1.5, capped at 10s by default)
            target_directory: Virtual directory prepended to the object name
            default_scheme: Scheme assumed for a bare bucket destination
            sleep: Called with the delay between attempts
            monitor: Progress collaborator
        """
        self.storage = storage
        self.retry_policy = retry_policy or RetryPolicy()
        self.target_directory = target_directory
        self.default_scheme = default_scheme
        self.sleep = sleep
        self.monitor = monitor or PipelineMonitor()

    def destination_for(self, file_path: Path, destination: str) -> ObjectLocator:
        """
        Object locator the file is uploaded to.

        ``gs://bucket/prefix`` + ``Dataset_x.txt`` -> ``gs://bucket/prefix/output/Dataset_x.txt``
        """
        base = ObjectLocator.parse(destination, default_scheme=self.default_scheme)
        return base.child(self.target_directory, file_path.name)

    def transfer(self, output_file: OutputFile | str | Path, destination: str) -> TransferOutcome:
        """
        Upload the file's full contents.

        Args:
            output_file: Finished output file
            destination: Destination bucket locator

        Returns:
            Successful TransferOutcome

        Raises:
            TransferFailedError: If every attempt failed, the destination is
                invalid or unavailable, or the file cannot be read
        """
        path = output_file.path if isinstance(output_file, OutputFile) else Path(output_file)
        try:
            target = self.destination_for(path, destination)
            backend = self.storage.for_locator(target)
        except StorageError as e:
            logger.error(f"Invalid upload destination {destination}: {e}")
            outcome = TransferOutcome(success=False, attempts=0, last_error=str(e))
            raise TransferFailedError(str(e), outcome=outcome) from e

        try:
            data = path.read_bytes()
        except OSError as e:
            logger.error(f"Cannot read output file for upload: {e}")
            outcome = TransferOutcome(success=False, attempts=0, last_error=str(e))
            raise TransferFailedError(str(e), outcome=outcome) from e

        logger.info(
            f"Uploading {path} to {target}",
            extra={"size_bytes": len(data), "max_attempts": self.retry_policy.max_attempts},
        )

        last_error: StorageTransportError | None = None
        total_delay = 0.0
        for attempt in range(1, self.retry_policy.max_attempts + 1):
            try:
                uploaded = backend.write(target, data)
            except StorageTransportError as e:
                last_error = e
                if attempt < self.retry_policy.max_attempts:
                    delay = self.retry_policy.delay_for(attempt)
                    self.monitor.record_transfer_attempt("retry")
                    logger.warning(
                        f"Upload attempt {attempt} failed, retrying in {delay:.2f}s: {e}",
                        extra={"attempt": attempt, "delay_seconds": delay},
                    )
                    self.sleep(delay)
                    total_delay += delay
                    continue

                self.monitor.record_transfer_attempt("exhausted")
                logger.error(f"Failed to upload file to storage: {e}", extra={"attempts": attempt})
                outcome = TransferOutcome(
                    success=False,
                    attempts=attempt,
                    last_error=str(e),
                    total_delay_seconds=total_delay,
                )
                raise TransferFailedError(str(e), outcome=outcome) from e
            except StorageError as e:
                self.monitor.record_transfer_attempt("failed")
                logger.error(f"Upload failed, not retrying: {e}", extra={"attempts": attempt})
                outcome = TransferOutcome(
                    success=False,
                    attempts=attempt,
                    last_error=str(e),
                    total_delay_seconds=total_delay,
                )
                raise TransferFailedError(str(e), outcome=outcome) from e

            self.monitor.record_transfer_attempt("success")
            logger.info(f"Uploaded {uploaded}", extra={"attempts": attempt})
            return TransferOutcome(
                success=True,
                attempts=attempt,
                last_error=str(last_error) if last_error else None,
                object_locator=str(uploaded),
                total_delay_seconds=total_delay,
            )
