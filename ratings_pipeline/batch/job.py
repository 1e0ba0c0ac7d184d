"""
Two-stage job: preprocess the export into a flat file, then transfer it.

State machine: Validating -> Processing -> Transferring -> Completed, with
Failed reachable from any non-terminal state. Each stage has an explicit
entry precondition and exit postcondition, invoked directly by the
orchestrator.
"""

import time
from datetime import datetime
from pathlib import Path
from typing import Callable, TypeVar

from ratings_pipeline.batch.input_validator import MISSING_INPUT_FILE_PATH, InputValidator
from ratings_pipeline.batch.pipeline import ChunkedPipeline
from ratings_pipeline.batch.readers import ObjectLineReader
from ratings_pipeline.batch.transfer import TransferAgent
from ratings_pipeline.batch.writers import FlatFileWriter
from ratings_pipeline.core.config import JobConfig
from ratings_pipeline.core.exceptions import (
    MissingInputError,
    MissingOutputError,
    PipelineError,
    TransferFailedError,
)
from ratings_pipeline.core.models import JobExecution, OutputFile, PipelineResult, TransferOutcome
from ratings_pipeline.core.parsing import LineParser
from ratings_pipeline.observability.logger import get_logger, log_operation
from ratings_pipeline.observability.metrics import PipelineMonitor
from ratings_pipeline.storage import StorageRegistry

JOB_NAME_PREFIX = "PRE PROCESSOR BATCH"
PREPROCESS_STAGE = "preprocess"
TRANSFER_STAGE = "transfer"

MISSING_OUTPUT_FILE_PATH = "Missing output file path"
MISSING_TEMP_FILE_PATH = "Missing temp file path"

logger = get_logger(__name__)

T = TypeVar("T")


class JobOrchestrator:
    """
    Runs the preprocess stage and, only if it completed, the transfer stage.

    run() never raises for pipeline failures: the outcome, including the
    cause of a failure, is reported on the returned JobExecution.
    """

    def __init__(
        self,
        config: JobConfig,
        storage: StorageRegistry,
        monitor: PipelineMonitor | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize orchestrator.

        Args:
            config: Job configuration
            storage: Registry resolving source and destination backends
            monitor: Progress collaborator (one is created per run if None)
            sleep: Used by the transfer stage between upload attempts
        """
        self.config = config
        self.storage = storage
        self.monitor = monitor
        self.sleep = sleep
        self.validator = InputValidator(storage)

    def run(self, input_locator: str | None, output_locator: str | None) -> JobExecution:
        """
        Execute the job.

        Args:
            input_locator: Source object (scheme://bucket/objectPath)
            output_locator: Destination bucket (scheme://bucket[/prefix] or bucket name)

        Returns:
            JobExecution in state Completed or Failed
        """
        run_at = datetime.now()
        execution = JobExecution(
            job_name=f"{JOB_NAME_PREFIX} - {run_at.isoformat()}",
            input_locator=input_locator,
            output_locator=output_locator,
        )
        monitor = self.monitor or PipelineMonitor(job_name=JOB_NAME_PREFIX)
        logger.info(f"Launching job: {execution.job_name}")

        try:
            result = self._run_stage(
                PREPROCESS_STAGE,
                execution,
                monitor,
                lambda: self._preprocess(execution, monitor, self.config.output_path(run_at)),
            )
            execution.pipeline_result = result

            outcome = self._run_stage(
                TRANSFER_STAGE,
                execution,
                monitor,
                lambda: self._transfer(execution, monitor),
            )
            execution.transfer_outcome = outcome
            execution.advance()
        except TransferFailedError as e:
            execution.transfer_outcome = e.outcome
            execution.fail(e)
        except PipelineError as e:
            execution.fail(e)
        except Exception as e:
            logger.exception(f"Unexpected error in job {execution.job_name}: {e}")
            execution.fail(e)

        monitor.record_job_finished(execution.state.value)
        if execution.is_successful:
            logger.info(f"Job completed: {execution.job_name}")
        else:
            logger.error(
                f"Job failed: {execution.job_name}",
                extra={
                    "failed_state": execution.failure.state.value,
                    "error_type": execution.failure.error_type,
                    "error_message": execution.failure.message,
                },
            )
        return execution

    # ---- stage 1 -------------------------------------------------------

    def before_preprocess(self, execution: JobExecution) -> None:
        """
        Entry precondition of the preprocess stage.

        Raises:
            MissingInputError: If the input locator is absent
            MissingOutputError: If the output locator is absent
            FileNotFoundOrEmptyError: If the source object is missing or empty
        """
        if not execution.input_locator or not execution.input_locator.strip():
            logger.error("Input bucket path cannot be null")
            raise MissingInputError(MISSING_INPUT_FILE_PATH)
        if not execution.output_locator or not execution.output_locator.strip():
            logger.error("Output bucket path cannot be null")
            raise MissingOutputError(MISSING_OUTPUT_FILE_PATH)
        self.validator.validate(execution.input_locator)

    def _preprocess(self, execution: JobExecution, monitor: PipelineMonitor, output_path: Path) -> PipelineResult:
        self.before_preprocess(execution)
        execution.advance()

        writer = FlatFileWriter(
            output_path,
            encoding=self.config.encoding,
            fail_on_empty_output=self.config.fail_on_empty_output,
        )
        pipeline = ChunkedPipeline(
            reader=ObjectLineReader(self.storage, encoding=self.config.encoding),
            parser=LineParser(strict_movie_context=self.config.strict_movie_context),
            writer=writer,
            chunk_size=self.config.chunk_size,
            monitor=monitor,
        )
        # exit postcondition: the pipeline verifies the finished file before returning
        result = pipeline.run(execution.input_locator)
        logger.info(f"Finished reading file: {execution.input_locator}")
        return result

    # ---- stage 2 -------------------------------------------------------

    def before_transfer(self, execution: JobExecution) -> OutputFile:
        """
        Entry precondition of the transfer stage.

        Raises:
            MissingInputError: If the preprocess stage left no output file
        """
        result = execution.pipeline_result
        if result is None or not result.output_file.path.is_file():
            logger.error("Temp output path cannot be null or empty")
            raise MissingInputError(MISSING_TEMP_FILE_PATH)
        return result.output_file

    def _transfer(self, execution: JobExecution, monitor: PipelineMonitor) -> TransferOutcome:
        output_file = self.before_transfer(execution)
        execution.advance()

        agent = TransferAgent(
            self.storage,
            retry_policy=self.config.retry,
            target_directory=self.config.target_directory,
            default_scheme=self.config.default_scheme,
            sleep=self.sleep,
            monitor=monitor,
        )
        return agent.transfer(output_file, execution.output_locator)

    # ---- helpers -------------------------------------------------------

    def _run_stage(
        self,
        stage: str,
        execution: JobExecution,
        monitor: PipelineMonitor,
        body: Callable[[], T],
    ) -> T:
        operation = log_operation(stage, logger=logger, job_name=execution.job_name)
        succeeded = False
        try:
            with operation:
                value = body()
            succeeded = True
            return value
        finally:
            monitor.record_stage(stage, operation.duration, succeeded)
