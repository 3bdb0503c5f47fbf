"""Shared fixtures and fakes for all tests."""

from __future__ import annotations

import re

import pytest

from termguard.config.settings import Settings
from termguard.executor.channel import TextChannel
from termguard.executor.orchestrator import ExecutionOrchestrator
from termguard.models.policy import DangerousPattern, RiskLevel, SafetyMode
from termguard.policy.safety_gate import SafetyGate

_WRAPPED = re.compile(r'^(?P<command>.*); echo "(?P<marker>__TERMGUARD_EXIT_\w+?__)\$\?"\n$', re.S)


class FakeChannel(TextChannel):
    """Records sent text and answers with scripted output and exit status.

    replies maps a command to (output, exit_code). Unknown commands succeed
    silently. failures maps a command to the exception its send raises.
    With respond=False nothing is ever published back, so tests can push
    chunks by hand via publish().
    """

    def __init__(
        self,
        replies: dict[str, tuple[str, int]] | None = None,
        respond: bool = True,
        echo: bool = False,
        failures: dict[str, Exception] | None = None,
    ) -> None:
        super().__init__()
        self.replies = replies or {}
        self.respond = respond
        self.echo = echo
        self.failures = failures or {}
        self.sent: list[str] = []

    @property
    def commands(self) -> list[str]:
        return [self.unwrap(text)[0] for text in self.sent]

    @staticmethod
    def unwrap(text: str) -> tuple[str, str]:
        match = _WRAPPED.match(text)
        assert match is not None, f"unexpected wrapped command: {text!r}"
        return match.group("command"), match.group("marker")

    async def send_text(self, text: str) -> None:
        self.sent.append(text)
        command, marker = self.unwrap(text)
        if command in self.failures:
            raise self.failures[command]
        if self.echo:
            self.publish(text.replace("\n", "\r\n"))
        if not self.respond:
            return
        output, exit_code = self.replies.get(command, ("", 0))
        if output:
            self.publish(output + "\r\n")
        self.publish(f"{marker}{exit_code}\r\n")


@pytest.fixture
def mock_settings(monkeypatch):
    monkeypatch.setenv("TERMGUARD_SAFETY_MODE", "cautious")
    monkeypatch.setenv("TERMGUARD_DEFAULT_TIMEOUT_MS", "2000")
    monkeypatch.setenv("TERMGUARD_POLL_INTERVAL_MS", "10")
    monkeypatch.setenv("TERMGUARD_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("TERMGUARD_REQUIRE_CONFIRMATION", "false")
    return Settings()


@pytest.fixture
def make_channel():
    def _make(**kwargs) -> FakeChannel:
        return FakeChannel(**kwargs)
    return _make


@pytest.fixture
def channel():
    return FakeChannel()


@pytest.fixture
def strict_gate():
    return SafetyGate(mode=SafetyMode.STRICT)


@pytest.fixture
def cautious_gate():
    return SafetyGate(mode=SafetyMode.CAUTIOUS)


@pytest.fixture
def unrestricted_gate():
    return SafetyGate(mode=SafetyMode.UNRESTRICTED)


@pytest.fixture
def make_orchestrator():
    def _make(
        gate: SafetyGate | None = None,
        channel: TextChannel | None = None,
        default_timeout_ms: int = 2000,
    ) -> ExecutionOrchestrator:
        return ExecutionOrchestrator(
            gate=gate or SafetyGate(mode=SafetyMode.UNRESTRICTED),
            channel_provider=(lambda: channel),
            default_timeout_ms=default_timeout_ms,
            poll_interval_ms=10,
        )
    return _make


@pytest.fixture
def custom_pattern():
    return DangerousPattern(
        pattern=re.compile(r"\bterraform\s+destroy\b"),
        risk_level=RiskLevel.HIGH,
        description="Terraform destroy",
        suggestion="Run terraform plan -destroy first",
        block_in_strict_mode=True,
    )
