from __future__ import annotations

from typing import Any


class GateError(Exception):
    """Base class for gating errors."""


class ConfigurationError(GateError):
    """
    Malformed input handed to the evaluator or differ (non-string or empty identifier).

    Never escapes the core: callers get Deny / no suppression instead.
    """

    def __init__(self, message: str, *, value: Any = None) -> None:
        super().__init__(message)
        self.value = value


class UnknownDomainError(GateError):
    """A provider was asked about a domain it does not know."""

    def __init__(self, domain: str) -> None:
        super().__init__(f"Unknown gating domain: {domain!r}")
        self.domain = domain
