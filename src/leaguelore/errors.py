"""Exception types raised by the analytics engine."""

from __future__ import annotations


class LeagueloreError(RuntimeError):
    """Base class for engine errors."""


class IngestError(LeagueloreError, ValueError):
    """Raised when a single raw league record cannot be normalised."""


class BadgeRuleError(LeagueloreError):
    """Raised when a badge rule fails; carries the rule name for diagnostics."""

    def __init__(self, rule: str, message: str):
        super().__init__(f"{rule}: {message}")
        self.rule = rule


__all__ = ["LeagueloreError", "IngestError", "BadgeRuleError"]
