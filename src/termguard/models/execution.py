"""Execution models — live command records and what they produce."""

from __future__ import annotations

import enum
import time

from pydantic import BaseModel, Field

from termguard.events import Subscription
from termguard.exceptions import (
    ChannelError,
    CommandBlockedError,
    CommandFailedError,
    CommandTimeoutError,
    NoChannelError,
    UserCancelledError,
)
from termguard.executor.channel import TextChannel
from termguard.models.policy import SafetyAssessment

DEFAULT_TIMEOUT_MS = 120_000


class ExecutionStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMING = "confirming"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"


class ExecutionOutcome(str, enum.Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"
    BLOCKED = "blocked"
    NO_CHANNEL = "no_channel"
    CHANNEL_ERROR = "channel_error"


class ExecuteOptions(BaseModel):
    model_config = {"arbitrary_types_allowed": True}

    require_confirmation: bool = False
    # None means the orchestrator default; 0 disables the timeout.
    timeout_ms: int | None = Field(default=None, ge=0)
    channel: TextChannel | None = None
    capture_output: bool = True


class ExecutionResult(BaseModel):
    id: str
    command: str
    outcome: ExecutionOutcome
    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0
    success: bool
    error: str | None = None
    cancelled: bool = False
    timed_out: bool = False

    def raise_for_outcome(self) -> None:
        """Raise the matching ExecutionError unless the command succeeded."""
        if self.success:
            return
        message = self.error or f"Command failed: {self.command}"
        if self.outcome == ExecutionOutcome.BLOCKED:
            raise CommandBlockedError(message, execution_id=self.id)
        if self.outcome == ExecutionOutcome.NO_CHANNEL:
            raise NoChannelError(message, execution_id=self.id)
        if self.outcome == ExecutionOutcome.CHANNEL_ERROR:
            raise ChannelError(message, execution_id=self.id)
        if self.outcome == ExecutionOutcome.CANCELLED:
            raise UserCancelledError(message, execution_id=self.id)
        if self.outcome == ExecutionOutcome.TIMED_OUT:
            raise CommandTimeoutError(message, execution_id=self.id)
        raise CommandFailedError(message, execution_id=self.id, exit_code=self.exit_code)


class ExecutionProgress(BaseModel):
    id: str
    command: str
    status: ExecutionStatus
    output: str | None = None
    elapsed_ms: int | None = None


class ConfirmationRequest(BaseModel):
    id: str
    command: str
    assessment: SafetyAssessment


class ExecutionRecord(BaseModel):
    """Live state of one dispatched command, owned by the orchestrator."""

    model_config = {"arbitrary_types_allowed": True}

    id: str
    command: str
    start_time: float = Field(default_factory=time.monotonic)
    output_buffer: list[str] = Field(default_factory=list)
    cancelled: bool = False
    subscription: Subscription | None = None

    @property
    def output(self) -> str:
        return "".join(self.output_buffer)

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.start_time) * 1000)

    def append(self, chunk: str) -> None:
        self.output_buffer.append(chunk)

    def release(self) -> None:
        if self.subscription is not None:
            self.subscription.dispose()
            self.subscription = None
