"""Errors raised by the health domain.

Only store availability, a refused authorization request and a refused
write get their own kind. Any other error coming out of a store query is
passed through to callers untranslated.
"""

from __future__ import annotations


class HealthError(Exception):
    """Base class for health domain errors."""


class HealthDataUnavailableError(HealthError):
    """Raised when health data is not available on this device."""

    def __init__(self, message: str = "Health data is not available on this device.") -> None:
        super().__init__(message)


class AuthorizationDeniedError(HealthError):
    """Raised when an authorization request completes without success."""

    def __init__(self, message: str = "Health data authorization was not granted.") -> None:
        super().__init__(message)


class WriteRejectedError(HealthError):
    """Raised when a batch save reports failure without giving an error."""

    def __init__(self, message: str = "The health store did not accept the samples.") -> None:
        super().__init__(message)


class HealthStoreError(HealthError):
    """A query or save failure reported by a health store."""


class FixtureError(HealthError):
    """Raised when a fixture or export file cannot be loaded."""
