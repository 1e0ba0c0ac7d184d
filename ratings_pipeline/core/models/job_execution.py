"""
JobExecution model tracking one run of the job through its state machine.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from .pipeline_result import PipelineResult
from .transfer_outcome import TransferOutcome


class JobState(str, Enum):
    VALIDATING = "validating"
    PROCESSING = "processing"
    TRANSFERRING = "transferring"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATES = frozenset({JobState.COMPLETED, JobState.FAILED})

_NEXT_STATE = {
    JobState.VALIDATING: JobState.PROCESSING,
    JobState.PROCESSING: JobState.TRANSFERRING,
    JobState.TRANSFERRING: JobState.COMPLETED,
}


class InvalidTransitionError(RuntimeError):
    """Raised when a job is moved to a state it cannot reach."""


class JobFailure(BaseModel):
    """
    Cause of a failed job.

    Attributes:
        state: State the job was in when it failed
        error_type: Exception class name
        message: Exception message
    """

    state: JobState
    error_type: str
    message: str


class JobExecution(BaseModel):
    """
    One run of the job.

    States advance Validating -> Processing -> Transferring -> Completed.
    Failed can be entered from any non-terminal state. No state is re-entered.

    Attributes:
        job_name: Human readable job name (includes the run timestamp)
        input_locator: Source object locator
        output_locator: Destination bucket locator
        state: Current state
        history: Every state visited, in order
        failure: Set once the job reached Failed
        pipeline_result: Set once the pipeline stage completed
        transfer_outcome: Set once the transfer stage finished
        started_at: When the run started
        ended_at: When the run reached a terminal state
    """

    job_name: str
    input_locator: str | None = None
    output_locator: str | None = None
    state: JobState = JobState.VALIDATING
    history: list[JobState] = Field(default_factory=lambda: [JobState.VALIDATING])
    failure: JobFailure | None = None
    pipeline_result: PipelineResult | None = None
    transfer_outcome: TransferOutcome | None = None
    started_at: datetime = Field(default_factory=datetime.now)
    ended_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def is_successful(self) -> bool:
        return self.state == JobState.COMPLETED

    def advance(self) -> JobState:
        """Move to the next state of the happy path."""
        if self.is_terminal:
            raise InvalidTransitionError(f"Job already finished in state {self.state.value}")
        self._enter(_NEXT_STATE[self.state])
        return self.state

    def fail(self, error: BaseException) -> None:
        """Move to Failed, recording the error and the state it happened in."""
        if self.is_terminal:
            raise InvalidTransitionError(f"Job already finished in state {self.state.value}")
        self.failure = JobFailure(
            state=self.state,
            error_type=type(error).__name__,
            message=str(error),
        )
        self._enter(JobState.FAILED)

    def _enter(self, state: JobState) -> None:
        if state in self.history:
            raise InvalidTransitionError(f"State {state.value} cannot be re-entered")
        self.state = state
        self.history.append(state)
        if state in TERMINAL_STATES:
            self.ended_at = datetime.now()
