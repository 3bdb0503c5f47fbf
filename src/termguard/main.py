"""Entry point and dependency wiring."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from termguard.cli.app import app
from termguard.config.settings import Settings
from termguard.executor.channel import ChannelProvider
from termguard.executor.orchestrator import ExecutionOrchestrator
from termguard.models.policy import SafetyMode
from termguard.policy.safety_gate import SafetyGate


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def build_gate(
    settings: Settings | None = None,
    mode: SafetyMode | None = None,
) -> SafetyGate:
    settings = settings or Settings()
    return SafetyGate(mode=mode or settings.safety_mode)


def build_orchestrator(
    settings: Settings | None = None,
    gate: SafetyGate | None = None,
    channel_provider: ChannelProvider | None = None,
) -> ExecutionOrchestrator:
    settings = settings or Settings()
    return ExecutionOrchestrator(
        gate=gate or build_gate(settings),
        channel_provider=channel_provider,
        default_timeout_ms=settings.default_timeout_ms,
        poll_interval_ms=settings.poll_interval_ms,
    )


if __name__ == "__main__":
    app()
