"""
Enumeration types for the RDAP checker.

These enums provide type-safe constants for resolution status, batch
classification, resolver states, and validation error codes.
"""

from enum import Enum


class DomainStatus(Enum):
    """Tri-state registration status of a single domain."""

    AVAILABLE = "available"
    REGISTERED = "registered"
    UNKNOWN = "unknown"

    @property
    def is_definitive(self) -> bool:
        """True when the status is a definitive answer (not unknown)."""
        return self is not DomainStatus.UNKNOWN


class BatchStatus(Enum):
    """Overall classification of a batch of results."""

    AVAILABLE = "available"
    REGISTERED = "registered"
    MIXED = "mixed"
    ERROR = "error"


class ResolutionState(Enum):
    """States of the per-domain fallback state machine."""

    QUERYING_PRIMARY = "querying_primary"
    QUERYING_AUTHORITATIVE = "querying_authoritative"
    DONE = "done"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _LEVEL_RANKS[self]


_LEVEL_RANKS = {
    LogLevel.DEBUG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARN: 2,
    LogLevel.ERROR: 3,
}


class DomainValidationErrorCode(Enum):
    """Error codes for domain validation failures."""

    EMPTY_INPUT = "empty_input"
    FORBIDDEN_CHARS = "forbidden_chars"
    IDNA_ERROR = "idna_error"
    MISSING_TLD = "missing_tld"
    INVALID_LABEL = "invalid_label"
    TOO_LONG = "too_long"
