"""Risk classification helpers."""

from __future__ import annotations

from termguard.models.policy import RiskLevel, SafetyMode


def risk_from_string(value: str) -> RiskLevel:
    mapping = {
        "NONE": RiskLevel.NONE,
        "LOW": RiskLevel.LOW,
        "MEDIUM": RiskLevel.MEDIUM,
        "HIGH": RiskLevel.HIGH,
        "CRITICAL": RiskLevel.CRITICAL,
    }
    result = mapping.get(value.upper())
    if result is None:
        raise ValueError(f"Unknown risk level: {value}")
    return result


def mode_from_string(value: str) -> SafetyMode:
    try:
        return SafetyMode(value.lower())
    except ValueError:
        raise ValueError(f"Unknown safety mode: {value}") from None


def is_above_threshold(level: RiskLevel, threshold: RiskLevel) -> bool:
    return level.value > threshold.value


def compare_risk_levels(a: RiskLevel, b: RiskLevel) -> int:
    """Positive if a is riskier than b, negative if less risky, 0 if equal."""
    return a.value - b.value
