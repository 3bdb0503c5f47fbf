"""Typer CLI commands."""

from __future__ import annotations

import asyncio
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from termguard.cli.output import (
    print_assessments,
    print_error,
    print_info,
    print_patterns,
    print_results,
)
from termguard.cli.prompts import confirm_command
from termguard.exceptions import TermguardError
from termguard.executor.channels.local_shell import LocalShellChannel
from termguard.executor.orchestrator import ExecutionOrchestrator
from termguard.models.execution import ConfirmationRequest, ExecuteOptions, ExecutionResult
from termguard.policy.patterns import BUILTIN_PATTERNS
from termguard.policy.risk_levels import compare_risk_levels, mode_from_string, risk_from_string

console = Console()
app = typer.Typer(name="termguard", help="Risk-gated shell command execution.")


def _get_settings():
    from termguard.config.settings import Settings
    return Settings()


def _get_gate(mode: Optional[str], settings=None):
    from termguard.main import build_gate
    try:
        safety_mode = mode_from_string(mode) if mode else None
    except ValueError as exc:
        print_error(str(exc))
        raise typer.Exit(2)
    return build_gate(settings=settings, mode=safety_mode)


def _answer_with_prompt(orchestrator: ExecutionOrchestrator, request: ConfirmationRequest) -> None:
    loop = asyncio.get_running_loop()
    pending = loop.run_in_executor(None, confirm_command, request)

    def _done(future: asyncio.Future) -> None:
        confirmed = (
            not future.cancelled() and future.exception() is None and bool(future.result())
        )
        orchestrator.respond_to_confirmation(request.id, confirmed)

    pending.add_done_callback(_done)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level override"),
) -> None:
    """Risk-gated shell command execution."""
    from termguard.main import configure_logging
    configure_logging(log_level or _get_settings().log_level)


@app.command()
def check(
    commands: List[str] = typer.Argument(..., help="Shell command(s) to assess"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="Safety mode override"),
) -> None:
    """Assess shell commands for risk without running them."""
    gate = _get_gate(mode)
    assessments = gate.check_many(commands)
    print_assessments(assessments)
    if any(a.blocked for a in assessments):
        raise typer.Exit(1)


@app.command()
def run(
    commands: List[str] = typer.Argument(..., help="Shell command(s) to run in order"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="Safety mode override"),
    timeout: Optional[int] = typer.Option(
        None, "--timeout", "-t", min=0, help="Timeout per command in milliseconds (0 = none)"
    ),
    confirm: bool = typer.Option(False, "--confirm", help="Confirm every command"),
) -> None:
    """Run commands through the safety gate in a local shell session."""
    settings = _get_settings()
    gate = _get_gate(mode, settings)

    async def _run() -> list[ExecutionResult]:
        from termguard.main import build_orchestrator

        async with LocalShellChannel(shell=settings.shell) as channel:
            orchestrator = build_orchestrator(
                settings, gate=gate, channel_provider=lambda: channel
            )
            subscription = orchestrator.on_confirmation_required.subscribe(
                lambda request: _answer_with_prompt(orchestrator, request)
            )
            options = ExecuteOptions(
                require_confirmation=confirm or settings.require_confirmation,
                timeout_ms=timeout,
            )
            try:
                return await orchestrator.execute_batch(commands, options)
            finally:
                subscription.dispose()
                orchestrator.dispose()

    try:
        results = asyncio.run(_run())
    except TermguardError as exc:
        print_error(str(exc))
        raise typer.Exit(1)

    print_results(results)
    if len(results) < len(commands):
        print_info(f"Skipped {len(commands) - len(results)} remaining command(s).")
    try:
        for result in results:
            result.raise_for_outcome()
    except TermguardError as exc:
        print_error(str(exc))
        raise typer.Exit(1)


@app.command()
def patterns(
    min_risk: str = typer.Option("LOW", "--min-risk", help="Lowest risk level to list"),
) -> None:
    """List the built-in dangerous command patterns."""
    try:
        threshold = risk_from_string(min_risk)
    except ValueError as exc:
        print_error(str(exc))
        raise typer.Exit(2)
    print_patterns(
        p for p in BUILTIN_PATTERNS if compare_risk_levels(p.risk_level, threshold) >= 0
    )


@app.command(name="config")
def show_config() -> None:
    """Show current configuration."""
    try:
        settings = _get_settings()
    except Exception as exc:
        print_error(f"Failed to load settings: {exc}")
        raise typer.Exit(1)

    table_data = {
        "Safety Mode": settings.safety_mode.value,
        "Default Timeout (ms)": str(settings.default_timeout_ms),
        "Poll Interval (ms)": str(settings.poll_interval_ms),
        "Shell": settings.shell,
        "Log Level": settings.log_level,
        "Require Confirmation": str(settings.require_confirmation),
    }

    table = Table(title="Configuration", show_header=False)
    table.add_column("Setting", style="bold cyan")
    table.add_column("Value")
    for k, v in table_data.items():
        table.add_row(k, v)
    console.print(table)
