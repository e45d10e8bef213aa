"""Exception types raised by the matching engine."""

from __future__ import annotations


class RealMatchError(Exception):
    """Base class for all real_match errors."""


class ValidationError(RealMatchError):
    """A profile or record is missing required fields or holds bad values."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class InvariantViolation(RealMatchError):
    """A computed value broke a hard invariant (programming defect)."""


class ConfigError(RealMatchError):
    """Configuration values are inconsistent."""
