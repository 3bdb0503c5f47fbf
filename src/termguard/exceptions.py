"""Custom exception hierarchy for termguard."""

from __future__ import annotations


class TermguardError(Exception):
    """Base exception for all termguard errors."""


class ExecutionError(TermguardError):
    """Raised when a command could not be run to a successful end."""

    def __init__(self, message: str, execution_id: str = "") -> None:
        super().__init__(message)
        self.execution_id = execution_id


class ChannelError(ExecutionError):
    """Raised when the text channel fails unexpectedly."""


class NoChannelError(ChannelError):
    """Raised when no text channel is available to dispatch to."""


class CommandBlockedError(ExecutionError):
    """Raised when the safety gate blocks a command."""


class CommandTimeoutError(ExecutionError):
    """Raised when the completion marker was not seen in time."""


class CommandFailedError(ExecutionError):
    """Raised when a command completed with a non-zero exit status."""

    def __init__(
        self, message: str, execution_id: str = "", exit_code: int | None = None
    ) -> None:
        super().__init__(message, execution_id=execution_id)
        self.exit_code = exit_code


class UserCancelledError(ExecutionError):
    """Raised when the user denies or cancels a command."""
