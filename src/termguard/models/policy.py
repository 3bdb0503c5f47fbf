"""Policy models — input and output of the risk classifier."""

from __future__ import annotations

import enum
import re

from pydantic import BaseModel, Field


class SafetyMode(str, enum.Enum):
    STRICT = "strict"
    CAUTIOUS = "cautious"
    UNRESTRICTED = "unrestricted"


class RiskLevel(int, enum.Enum):
    NONE = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4


class DangerousPattern(BaseModel):
    model_config = {"frozen": True}

    pattern: re.Pattern[str]
    risk_level: RiskLevel
    description: str
    suggestion: str | None = None
    block_in_strict_mode: bool = False

    @property
    def source(self) -> str:
        return self.pattern.pattern


class SafetyAssessment(BaseModel):
    command: str
    is_safe: bool
    risk_level: RiskLevel = RiskLevel.NONE
    requires_confirmation: bool = False
    blocked: bool = False
    reason: str | None = None
    matched_descriptions: list[str] = Field(default_factory=list)
    suggestion: str | None = None
