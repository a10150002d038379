"""
Exception classes for the AbuseIPDB client.

All exceptions inherit from AbuseIpDbError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class AbuseIpDbError(Exception):
    """Base exception for all AbuseIPDB client errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class InputError(AbuseIpDbError):
    """Raised when caller-supplied input is rejected before any network I/O."""

    pass


class InvalidCategoriesError(InputError):
    """Raised when a report category set is empty or cannot be decoded."""

    pass


class BulkReportFileError(InputError):
    """Raised when the CSV for a bulk report is missing, not a file, or unreadable."""

    pass


class TransportClosedError(AbuseIpDbError):
    """Raised when a request is issued on a transport that was already closed."""

    pass


class ApiKeyMismatchError(AbuseIpDbError):
    """Raised when the factory holds a client for a different API key."""

    pass


class ConfigError(AbuseIpDbError):
    """Raised when configuration is missing, malformed, or addressed with a bad path."""

    pass
