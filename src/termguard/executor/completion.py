"""Completion detection for commands typed into a shared terminal.

The command is followed by an echo of a per-execution marker and the shell's
exit status. A poller watches the captured output for the marker while a
timer races it; the first to settle wins.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import NamedTuple

from termguard.models.execution import ExecutionRecord

logger = logging.getLogger(__name__)

MARKER_PREFIX = "__TERMGUARD_EXIT_"
DEFAULT_POLL_INTERVAL_MS = 100

_EXIT_STATUS = r"(\d+)"


class CompletionOutcome(NamedTuple):
    completed: bool
    timed_out: bool


COMPLETED = CompletionOutcome(completed=True, timed_out=False)
TIMED_OUT = CompletionOutcome(completed=False, timed_out=True)
ABANDONED = CompletionOutcome(completed=False, timed_out=False)


def make_marker(execution_id: str) -> str:
    return f"{MARKER_PREFIX}{execution_id}__"


def wrap_command(command: str, marker: str) -> str:
    return f'{command}; echo "{marker}$?"'


def _status_line(marker: str) -> re.Pattern[str]:
    # The echoed wrapper carries the bare marker too.
    return re.compile(re.escape(marker) + _EXIT_STATUS)


async def wait_for_completion(
    record: ExecutionRecord,
    marker: str,
    timeout_ms: int,
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
) -> CompletionOutcome:
    """Wait until the marker shows up, the timeout fires, or the record is cancelled.

    A timeout of 0 waits indefinitely.
    """
    status_line = _status_line(marker)
    loop = asyncio.get_running_loop()
    settled: asyncio.Future[CompletionOutcome] = loop.create_future()

    def settle(outcome: CompletionOutcome) -> None:
        if not settled.done():
            settled.set_result(outcome)

    async def poll() -> None:
        while not settled.done():
            if record.cancelled:
                settle(ABANDONED)
                return
            if status_line.search(record.output):
                settle(COMPLETED)
                return
            await asyncio.sleep(poll_interval_ms / 1000)

    poller = asyncio.create_task(poll())
    timer = loop.call_later(timeout_ms / 1000, settle, TIMED_OUT) if timeout_ms > 0 else None
    try:
        return await settled
    finally:
        poller.cancel()
        if timer is not None:
            timer.cancel()


def parse_exit_code(output: str, marker: str) -> int:
    """Read the exit status after the last marker; falls back to 0."""
    matches = _status_line(marker).findall(output)
    if matches:
        return int(matches[-1])
    logger.warning("Could not parse exit status after marker %s; assuming success", marker)
    return 0


def clean_output(output: str, marker: str, command: str) -> str:
    """Strip the marker line and the terminal's echo of the wrapped command."""
    text = re.sub(_status_line(marker).pattern + r"\r?\n?", "", output)
    if command:
        text = re.sub(re.escape(wrap_command(command, marker)) + r"\r?\n?", "", text)
    text = re.sub(r'echo "' + re.escape(marker) + r'\$\?"\r?\n?', "", text)

    return text.strip()
