"""
Custom exceptions for the licensing engine.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pdnslic.common.models import ReasonCode


class LicenseError(Exception):
    """Base exception for licensing failures."""

    def __init__(self, message: str, code: ReasonCode | None = None) -> None:
        super().__init__(message)
        self.code = code


class LicenseFormatError(LicenseError):
    """Raised by the codec when a license key cannot be decoded."""

    def __init__(self, code: ReasonCode, message: str | None = None) -> None:
        super().__init__(message or code.value, code)


class InstallationError(LicenseError):
    """Raised when the persisted installation secret is unusable."""


class StoreError(LicenseError):
    """Raised when the settings store cannot be read or written."""


class ValidationError(Exception):
    """Exception for validation failures."""

    def __init__(self, message: str, status_code: int = 403) -> None:
        super().__init__(message)
        self.status_code = status_code


class QuotaExceededError(ValidationError):
    """Exception for a denied resource creation."""

    def __init__(self, message: str, limit: int | None = None) -> None:
        super().__init__(message, 403)
        self.limit = limit
