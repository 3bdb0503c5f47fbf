"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

from termguard.models.policy import SafetyMode


class Settings(BaseSettings):
    model_config = {"env_prefix": "TERMGUARD_"}

    safety_mode: SafetyMode = Field(
        default=SafetyMode.CAUTIOUS,
        description="Safety mode (strict/cautious/unrestricted)",
    )
    default_timeout_ms: int = Field(
        default=120_000, ge=0, description="Command timeout in milliseconds (0 = none)"
    )
    poll_interval_ms: int = Field(
        default=100, gt=0, description="Completion marker poll interval in milliseconds"
    )
    shell: str = Field(default="bash", description="Shell started for local execution")
    log_level: str = Field(default="INFO", description="Logging level")
    require_confirmation: bool = Field(
        default=False, description="Confirm every command, regardless of risk"
    )
