"""Execution orchestrator — runs gated commands over a text channel."""

from __future__ import annotations

import logging
import time
import uuid
from functools import partial

from termguard.events import Emitter
from termguard.exceptions import ChannelError
from termguard.executor.channel import ChannelProvider, TextChannel
from termguard.executor.completion import (
    DEFAULT_POLL_INTERVAL_MS,
    clean_output,
    make_marker,
    parse_exit_code,
    wait_for_completion,
    wrap_command,
)
from termguard.executor.confirmation import ConfirmationBroker
from termguard.models.execution import (
    DEFAULT_TIMEOUT_MS,
    ConfirmationRequest,
    ExecuteOptions,
    ExecutionOutcome,
    ExecutionProgress,
    ExecutionRecord,
    ExecutionResult,
    ExecutionStatus,
)
from termguard.models.policy import SafetyAssessment
from termguard.policy.safety_gate import SafetyGate

logger = logging.getLogger(__name__)


def _no_channel() -> TextChannel | None:
    return None


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


class ExecutionOrchestrator:
    def __init__(
        self,
        gate: SafetyGate,
        channel_provider: ChannelProvider | None = None,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
    ) -> None:
        self._gate = gate
        self._channel_provider = channel_provider or _no_channel
        self._default_timeout_ms = default_timeout_ms
        self._poll_interval_ms = poll_interval_ms
        self._executions: dict[str, ExecutionRecord] = {}
        self._confirmations = ConfirmationBroker()
        self.on_progress: Emitter[ExecutionProgress] = Emitter("progress")

    @property
    def on_confirmation_required(self) -> Emitter[ConfirmationRequest]:
        return self._confirmations.on_confirmation_required

    @property
    def running_ids(self) -> list[str]:
        return list(self._executions)

    async def execute(
        self, command: str, options: ExecuteOptions | None = None
    ) -> ExecutionResult:
        options = options or ExecuteOptions()
        execution_id = uuid.uuid4().hex
        started = time.monotonic()

        assessment = self._gate.check(command)
        self._emit(execution_id, command, ExecutionStatus.PENDING)

        if assessment.requires_confirmation and not options.require_confirmation:
            options = options.model_copy(update={"require_confirmation": True})

        if options.require_confirmation:
            confirmed = await self._request_confirmation(execution_id, command, assessment)
            if not confirmed:
                logger.debug("Command not confirmed: %s", command)
                self._emit(
                    execution_id, command, ExecutionStatus.CANCELLED, elapsed_ms=_elapsed_ms(started)
                )
                return self._cancelled_result(execution_id, command, started)

        if assessment.blocked:
            logger.warning("Dangerous command blocked: %s (%s)", command, assessment.reason)
            self._emit(
                execution_id, command, ExecutionStatus.FAILED, elapsed_ms=_elapsed_ms(started)
            )
            return ExecutionResult(
                id=execution_id,
                command=command,
                outcome=ExecutionOutcome.BLOCKED,
                exit_code=1,
                stderr=f"Command blocked: {assessment.reason}",
                duration_ms=_elapsed_ms(started),
                success=False,
                error=f"Dangerous command blocked: {assessment.reason}",
            )

        return await self._dispatch(execution_id, command, options, started)

    async def execute_with_confirmation(
        self, command: str, options: ExecuteOptions | None = None
    ) -> ExecutionResult:
        options = (options or ExecuteOptions()).model_copy(update={"require_confirmation": True})
        return await self.execute(command, options)

    async def execute_batch(
        self, commands: list[str], options: ExecuteOptions | None = None
    ) -> list[ExecutionResult]:
        results: list[ExecutionResult] = []
        for command in commands:
            started = time.monotonic()
            try:
                result = await self.execute(command, options)
            except ChannelError as exc:
                logger.error("Batch execution stopped at command: %s (%s)", command, exc)
                results.append(
                    ExecutionResult(
                        id=exc.execution_id or uuid.uuid4().hex,
                        command=command,
                        outcome=ExecutionOutcome.CHANNEL_ERROR,
                        stderr=str(exc),
                        duration_ms=_elapsed_ms(started),
                        success=False,
                        error=str(exc),
                    )
                )
                break
            results.append(result)
            if not result.success:
                logger.info("Batch execution stopped at command: %s", command)
                break
        return results

    def cancel_execution(self, execution_id: str) -> bool:
        record = self._executions.pop(execution_id, None)
        if record is not None:
            record.cancelled = True
            record.release()
            logger.debug("Cancelled execution %s: %s", execution_id, record.command)
            self._emit(
                execution_id,
                record.command,
                ExecutionStatus.CANCELLED,
                elapsed_ms=record.elapsed_ms(),
            )
            return True

        return self._confirmations.respond(execution_id, False)

    def get_execution_status(self, execution_id: str) -> ExecutionProgress | None:
        record = self._executions.get(execution_id)
        if record is not None:
            return ExecutionProgress(
                id=execution_id,
                command=record.command,
                status=ExecutionStatus.CANCELLED if record.cancelled else ExecutionStatus.RUNNING,
                output=record.output,
                elapsed_ms=record.elapsed_ms(),
            )

        request = self._confirmations.get(execution_id)
        if request is not None:
            return ExecutionProgress(
                id=execution_id, command=request.command, status=ExecutionStatus.CONFIRMING
            )

        return None

    def respond_to_confirmation(self, execution_id: str, confirmed: bool) -> None:
        self._confirmations.respond(execution_id, confirmed)

    def dispose(self) -> None:
        for execution_id in self.running_ids:
            self.cancel_execution(execution_id)
        self._confirmations.dispose()
        self.on_progress.dispose()

    async def _request_confirmation(
        self, execution_id: str, command: str, assessment: SafetyAssessment
    ) -> bool:
        slot = self._confirmations.open(execution_id, command, assessment)
        self._emit(execution_id, command, ExecutionStatus.CONFIRMING)
        try:
            return await slot.wait()
        finally:
            self._confirmations.discard(execution_id)

    async def _dispatch(
        self, execution_id: str, command: str, options: ExecuteOptions, started: float
    ) -> ExecutionResult:
        channel = options.channel or self._channel_provider()
        if channel is None:
            self._emit(
                execution_id, command, ExecutionStatus.FAILED, elapsed_ms=_elapsed_ms(started)
            )
            return ExecutionResult(
                id=execution_id,
                command=command,
                outcome=ExecutionOutcome.NO_CHANNEL,
                exit_code=1,
                stderr="No terminal available",
                duration_ms=_elapsed_ms(started),
                success=False,
                error="No terminal available for command execution",
            )

        timeout_ms = self._default_timeout_ms if options.timeout_ms is None else options.timeout_ms
        record = ExecutionRecord(id=execution_id, command=command, start_time=started)
        self._executions[execution_id] = record
        self._emit(execution_id, command, ExecutionStatus.RUNNING)

        try:
            if options.capture_output:
                record.subscription = channel.on_output(partial(self._on_output, record))

            marker = make_marker(execution_id)
            logger.debug("Dispatching %s: %s", execution_id, command)
            try:
                await channel.send_text(wrap_command(command, marker) + "\n")
            except ChannelError as exc:
                exc.execution_id = exc.execution_id or execution_id
                self._emit(
                    execution_id, command, ExecutionStatus.FAILED, elapsed_ms=_elapsed_ms(started)
                )
                raise
            except Exception as exc:
                logger.error("Command execution failed: %s", exc)
                self._emit(
                    execution_id, command, ExecutionStatus.FAILED, elapsed_ms=_elapsed_ms(started)
                )
                raise ChannelError(
                    f"Failed to send command to terminal: {exc}", execution_id=execution_id
                ) from exc

            completion = await wait_for_completion(
                record, marker, timeout_ms, self._poll_interval_ms
            )

            if record.cancelled:
                return self._cancelled_result(execution_id, command, started)

            output = record.output
            stdout = clean_output(output, marker, command)
            duration_ms = _elapsed_ms(started)

            if completion.timed_out:
                logger.debug("Execution %s timed out after %dms", execution_id, timeout_ms)
                self._emit(
                    execution_id, command, ExecutionStatus.TIMED_OUT, stdout, duration_ms
                )
                return ExecutionResult(
                    id=execution_id,
                    command=command,
                    outcome=ExecutionOutcome.TIMED_OUT,
                    stdout=stdout,
                    duration_ms=duration_ms,
                    success=False,
                    error=f"Command timed out after {timeout_ms}ms",
                    timed_out=True,
                )

            exit_code = parse_exit_code(output, marker)
            logger.debug("Execution %s completed with exit code %d", execution_id, exit_code)
            status = ExecutionStatus.COMPLETED if exit_code == 0 else ExecutionStatus.FAILED
            self._emit(execution_id, command, status, stdout, duration_ms)
            return ExecutionResult(
                id=execution_id,
                command=command,
                outcome=ExecutionOutcome.COMPLETED,
                exit_code=exit_code,
                stdout=stdout,
                duration_ms=duration_ms,
                success=exit_code == 0,
            )
        finally:
            record.release()
            self._executions.pop(execution_id, None)

    def _on_output(self, record: ExecutionRecord, chunk: str) -> None:
        if record.cancelled:
            return
        record.append(chunk)
        self._emit(
            record.id,
            record.command,
            ExecutionStatus.RUNNING,
            record.output,
            record.elapsed_ms(),
        )

    def _emit(
        self,
        execution_id: str,
        command: str,
        status: ExecutionStatus,
        output: str | None = None,
        elapsed_ms: int | None = None,
    ) -> None:
        self.on_progress.fire(
            ExecutionProgress(
                id=execution_id,
                command=command,
                status=status,
                output=output,
                elapsed_ms=elapsed_ms,
            )
        )

    @staticmethod
    def _cancelled_result(execution_id: str, command: str, started: float) -> ExecutionResult:
        return ExecutionResult(
            id=execution_id,
            command=command,
            outcome=ExecutionOutcome.CANCELLED,
            duration_ms=_elapsed_ms(started),
            success=False,
            cancelled=True,
        )
