"""User confirmation dialogs."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm

from termguard.cli.output import format_risk
from termguard.models.execution import ConfirmationRequest

console = Console()


def confirm_command(request: ConfirmationRequest) -> bool:
    assessment = request.assessment
    console.print("\n[bold yellow]The following command requires confirmation:[/]\n")
    console.print(f"  {format_risk(assessment.risk_level)} [bold]{escape(request.command)}[/]")
    for description in assessment.matched_descriptions:
        console.print(f"     - {escape(description)}")
    if assessment.suggestion:
        console.print(f"     Suggestion: [dim]{escape(assessment.suggestion)}[/]")

    console.print()
    return Confirm.ask("Run this command?", default=False)
