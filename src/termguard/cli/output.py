"""Rich display helpers for CLI output."""

from __future__ import annotations

from collections.abc import Iterable

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from termguard.models.execution import ExecutionResult
from termguard.models.policy import DangerousPattern, RiskLevel, SafetyAssessment

console = Console()

_RISK_STYLE = {
    RiskLevel.NONE: "green",
    RiskLevel.LOW: "cyan",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.HIGH: "red",
    RiskLevel.CRITICAL: "bold red",
}


def format_risk(level: RiskLevel) -> str:
    style = _RISK_STYLE[level]
    return f"[{style}]{level.name}[/]"


def print_assessments(assessments: list[SafetyAssessment]) -> None:
    table = Table(title="Safety Assessment", expand=True)
    table.add_column("Command", style="bold")
    table.add_column("Risk", justify="center")
    table.add_column("Status", justify="center")
    table.add_column("Matched")
    table.add_column("Suggestion")

    for a in assessments:
        if a.blocked:
            status = "[red]BLOCKED[/]"
        elif a.requires_confirmation:
            status = "[yellow]CONFIRM[/]"
        else:
            status = "[green]ALLOWED[/]"
        table.add_row(
            escape(a.command),
            format_risk(a.risk_level),
            status,
            escape("\n".join(a.matched_descriptions)),
            escape(a.suggestion or ""),
        )

    console.print(table)


def print_results(results: list[ExecutionResult]) -> None:
    table = Table(title="Execution Results", expand=True)
    table.add_column("#", style="bold", width=3)
    table.add_column("Command")
    table.add_column("Status", justify="center")
    table.add_column("Exit", justify="right")
    table.add_column("Output")

    for i, r in enumerate(results, 1):
        if r.success:
            status = "[green]OK[/]"
        elif r.cancelled:
            status = "[yellow]CANCELLED[/]"
        elif r.timed_out:
            status = "[yellow]TIMEOUT[/]"
        else:
            status = "[red]FAIL[/]"
        exit_code = "" if r.exit_code is None else str(r.exit_code)
        output = r.stdout if r.stdout else (r.error or "")
        table.add_row(str(i), escape(r.command), status, exit_code, escape(output))

    console.print(table)


def print_patterns(patterns: Iterable[DangerousPattern]) -> None:
    table = Table(title="Dangerous Command Patterns", expand=True)
    table.add_column("Risk", justify="center")
    table.add_column("Description")
    table.add_column("Strict", justify="center")
    table.add_column("Pattern", style="dim")

    for p in patterns:
        strict = "[red]block[/]" if p.block_in_strict_mode else ""
        table.add_row(format_risk(p.risk_level), escape(p.description), strict, escape(p.source))

    console.print(table)


def print_error(message: str) -> None:
    console.print(Panel(f"[red]{escape(message)}[/]", title="Error", border_style="red"))


def print_info(message: str) -> None:
    console.print(f"[dim]{escape(message)}[/]")
