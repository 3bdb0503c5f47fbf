"""Built-in dangerous command catalogue, ordered by severity band.

Order matters: when two rules share the highest matched risk level, the one
listed first supplies the assessment's reason and suggestion.
"""

from __future__ import annotations

import re

from termguard.models.policy import DangerousPattern, RiskLevel

_DISK_DEVICE = r"/dev/(sd[a-z]|nvme|hd[a-z])"


def _rule(
    regex: str,
    risk_level: RiskLevel,
    description: str,
    suggestion: str | None = None,
    block: bool = False,
    flags: int = 0,
) -> DangerousPattern:
    return DangerousPattern(
        pattern=re.compile(regex, flags),
        risk_level=risk_level,
        description=description,
        suggestion=suggestion,
        block_in_strict_mode=block,
    )


BUILTIN_PATTERNS: tuple[DangerousPattern, ...] = (
    # Critical: system destruction
    _rule(
        r"\brm\s+(-[rRf]+\s+)*[/~]\s*$",
        RiskLevel.CRITICAL,
        "Recursive delete of root or home directory",
        suggestion="Specify a more specific path",
        block=True,
    ),
    _rule(
        r"\brm\s+(-[rRf]+\s+)+\*\s*$",
        RiskLevel.CRITICAL,
        "Recursive delete with wildcard",
        suggestion="Use a more specific pattern",
        block=True,
    ),
    _rule(
        r":\(\)\s*\{\s*:\s*\|\s*:\s*&\s*\}\s*;\s*:",
        RiskLevel.CRITICAL,
        "Fork bomb detected",
        block=True,
    ),
    _rule(
        r"\bdd\s+.*\bof=" + _DISK_DEVICE,
        RiskLevel.CRITICAL,
        "Direct disk write - could destroy data",
        block=True,
        flags=re.IGNORECASE,
    ),
    _rule(
        r"\bmkfs\b",
        RiskLevel.CRITICAL,
        "Filesystem creation - will destroy existing data",
        block=True,
    ),
    _rule(
        r">\s*" + _DISK_DEVICE,
        RiskLevel.CRITICAL,
        "Redirect to disk device",
        block=True,
        flags=re.IGNORECASE,
    ),
    # High: system modification
    _rule(
        r"\bchmod\s+(-[rR]+\s+)*777\s+/",
        RiskLevel.HIGH,
        "Setting world-writable permissions on system paths",
        suggestion="Use more restrictive permissions (755 or 644)",
        block=True,
    ),
    _rule(
        r"\bchown\s+(-[rR]+\s+)*root",
        RiskLevel.HIGH,
        "Changing ownership to root",
        block=True,
    ),
    _rule(
        r"\bsudo\s+rm\s+-rf",
        RiskLevel.HIGH,
        "Sudo recursive force delete",
        suggestion="Review the path carefully before executing",
        block=True,
    ),
    _rule(
        r"\b(systemctl|service)\s+(stop|disable|mask)\s+(docker|nginx|apache|mysql|postgres|sshd)",
        RiskLevel.HIGH,
        "Stopping critical system service",
        block=True,
    ),
    _rule(
        r"\biptables\s+(-[FA]|--flush)",
        RiskLevel.HIGH,
        "Flushing firewall rules",
        block=True,
    ),
    # Medium: data modification
    _rule(
        r"\brm\s+(-[rRf]+\s+)+",
        RiskLevel.MEDIUM,
        "Recursive or force delete",
        suggestion="Consider using trash-cli instead",
    ),
    _rule(
        r"\bgit\s+(reset|checkout)\s+--hard",
        RiskLevel.MEDIUM,
        "Git hard reset - uncommitted changes will be lost",
        suggestion="Stash changes first with git stash",
    ),
    _rule(
        r"\bgit\s+push\s+(-f|--force)",
        RiskLevel.MEDIUM,
        "Force push - could overwrite remote history",
        suggestion="Use --force-with-lease instead",
    ),
    _rule(
        r"\bgit\s+clean\s+-[fd]+",
        RiskLevel.MEDIUM,
        "Git clean - will delete untracked files",
        suggestion="Run with -n first to preview",
    ),
    _rule(
        r"\bDROP\s+(DATABASE|TABLE|SCHEMA)",
        RiskLevel.MEDIUM,
        "SQL drop statement",
        flags=re.IGNORECASE,
    ),
    _rule(
        r"\bTRUNCATE\s+TABLE",
        RiskLevel.MEDIUM,
        "SQL truncate statement",
        flags=re.IGNORECASE,
    ),
    _rule(
        r"\bDELETE\s+FROM\s+\w+\s*;?\s*$",
        RiskLevel.MEDIUM,
        "SQL delete without WHERE clause",
        suggestion="Add a WHERE clause to limit deletion",
        flags=re.IGNORECASE,
    ),
    # Low: caution needed
    _rule(r"\bsudo\b", RiskLevel.LOW, "Elevated privileges requested"),
    _rule(
        r"\bcurl\s+.*\|\s*(sudo\s+)?(ba)?sh",
        RiskLevel.LOW,
        "Piping curl to shell",
        suggestion="Download and inspect script first",
    ),
    _rule(
        r"\bwget\s+.*\|\s*(sudo\s+)?(ba)?sh",
        RiskLevel.LOW,
        "Piping wget to shell",
        suggestion="Download and inspect script first",
    ),
    _rule(r"\beval\s+", RiskLevel.LOW, "Eval command - executes arbitrary code"),
    _rule(r"\bnpm\s+(install|i)\s+--global", RiskLevel.LOW, "Global npm install"),
    _rule(r"\bchmod\s+\+x", RiskLevel.LOW, "Making file executable"),
)
