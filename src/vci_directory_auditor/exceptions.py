"""
Exception classes for the directory auditor.

All exceptions inherit from AuditorError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class AuditorError(Exception):
    """Base exception for all directory auditor errors."""

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


class NetworkError(AuditorError):
    """Raised when an endpoint is unreachable, times out or answers with a non-success status."""

    pass


class ParseError(AuditorError):
    """Raised when a document is not valid JSON or lacks required fields."""

    pass


class PreviousSnapshotLoadError(AuditorError):
    """Raised when a previous directory log cannot be read or parsed."""

    pass


class PersistenceError(AuditorError):
    """Raised when a log file cannot be written."""

    pass
