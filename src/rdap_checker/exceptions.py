"""
Exception classes for the RDAP checker.

All exceptions inherit from RdapCheckerError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class RdapCheckerError(Exception):
    """Base exception for all RDAP checker errors."""

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


class ValidationError(RdapCheckerError):
    """Raised when a domain name fails validation."""

    pass


class NetworkError(RdapCheckerError):
    """Raised when network operations fail."""

    pass


class BootstrapError(RdapCheckerError):
    """Raised when the bootstrap directory cannot be fetched or parsed."""

    pass
