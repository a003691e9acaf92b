"""
Typed domain errors.

Each carries a localized message so callers can surface it directly.
"""

from admitplan.messages import t


class DomainError(Exception):
    """Base class for all domain-specific errors."""

    def __init__(self, message_key: str, **params) -> None:
        self.message_key = message_key
        self.params = params
        super().__init__(t(message_key, **params))

    @property
    def message(self) -> str:
        return str(self)


class NotFound(DomainError):
    """Plan, task or stored output is missing or not owned by the caller."""


class Forbidden(DomainError):
    """Cross-ownership or cross-family access."""


class BadRequest(DomainError):
    """Malformed status value or out-of-range pagination."""
