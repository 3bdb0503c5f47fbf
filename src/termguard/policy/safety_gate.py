"""Safety gate — classifies shell commands by risk under a safety mode."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence

from termguard.events import Emitter
from termguard.models.policy import DangerousPattern, RiskLevel, SafetyAssessment, SafetyMode
from termguard.policy.patterns import BUILTIN_PATTERNS
from termguard.policy.risk_levels import is_above_threshold

logger = logging.getLogger(__name__)


def assess(
    command: str, mode: SafetyMode, patterns: Iterable[DangerousPattern]
) -> SafetyAssessment:
    """Classify a command against a rule set. Pure and deterministic.

    Every matching rule is recorded; the first rule seen at the highest
    matched level supplies the reason and suggestion. Any matching rule
    flagged for strict mode blocks the command when mode is STRICT.
    """
    normalized = command.strip()
    matched: list[str] = []
    highest = RiskLevel.NONE
    reason: str | None = None
    suggestion: str | None = None
    blocked = False

    for rule in patterns:
        if rule.pattern.search(normalized) is None:
            continue
        matched.append(rule.description)
        if is_above_threshold(rule.risk_level, highest):
            highest = rule.risk_level
            reason = rule.description
            suggestion = rule.suggestion
        if mode == SafetyMode.STRICT and rule.block_in_strict_mode:
            blocked = True

    return SafetyAssessment(
        command=normalized,
        is_safe=highest == RiskLevel.NONE,
        risk_level=highest,
        requires_confirmation=mode == SafetyMode.CAUTIOUS and highest != RiskLevel.NONE,
        blocked=blocked,
        reason=reason,
        matched_descriptions=matched,
        suggestion=suggestion,
    )


class SafetyGate:
    def __init__(
        self,
        mode: SafetyMode = SafetyMode.CAUTIOUS,
        custom_patterns: list[DangerousPattern] | None = None,
        builtin_patterns: Sequence[DangerousPattern] = BUILTIN_PATTERNS,
    ) -> None:
        self._mode = SafetyMode(mode)
        self._builtin = tuple(builtin_patterns)
        self._custom = custom_patterns if custom_patterns is not None else []
        self.on_safety_mode_changed: Emitter[SafetyMode] = Emitter("safety_mode_changed")

    @property
    def custom_patterns(self) -> tuple[DangerousPattern, ...]:
        return tuple(self._custom)

    def get_safety_mode(self) -> SafetyMode:
        return self._mode

    def set_safety_mode(self, mode: SafetyMode) -> None:
        mode = SafetyMode(mode)
        if mode == self._mode:
            return
        self._mode = mode
        logger.info("Terminal safety mode changed to: %s", mode.value)
        self.on_safety_mode_changed.fire(mode)

    def check(self, command: str) -> SafetyAssessment:
        return assess(command, self._mode, (*self._builtin, *self._custom))

    def check_many(self, commands: Iterable[str]) -> list[SafetyAssessment]:
        return [self.check(command) for command in commands]

    def is_command_allowed(self, command: str) -> bool:
        return not self.check(command).blocked

    def add_dangerous_pattern(self, pattern: DangerousPattern) -> None:
        self._custom.append(pattern)
        logger.info("Added custom dangerous pattern: %s", pattern.description)

    def remove_dangerous_pattern(self, matcher: str | re.Pattern[str]) -> bool:
        source = matcher.pattern if isinstance(matcher, re.Pattern) else matcher
        for index, rule in enumerate(self._custom):
            if rule.source == source:
                removed = self._custom.pop(index)
                logger.info("Removed custom dangerous pattern: %s", removed.description)
                return True
        return False

    def dispose(self) -> None:
        self.on_safety_mode_changed.dispose()
