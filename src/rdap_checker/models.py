"""
Data models for the RDAP checker.

This module defines the per-domain check result, the raw outcome of a
single RDAP HTTP exchange, the interpreter's verdict, and the cached
bootstrap directory entry.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .enums import DomainStatus


@dataclass(frozen=True)
class CheckResult:
    """Outcome of resolving one domain."""

    domain: str
    status: DomainStatus
    http_status: Optional[int] = None
    error_code: Optional[int] = None
    source: Optional[str] = None  # hostname or base URL that answered
    response_time_ms: int = 0

    def to_dict(self) -> dict:
        """Convert to a JSON-friendly dictionary, omitting absent fields."""
        data: dict[str, Any] = {
            "domain": self.domain,
            "status": self.status.value,
        }
        if self.http_status is not None:
            data["http_status"] = self.http_status
        if self.error_code is not None:
            data["error_code"] = self.error_code
        if self.source is not None:
            data["source"] = self.source
        data["response_time_ms"] = self.response_time_ms
        return data


@dataclass(frozen=True)
class RdapFetch:
    """
    Raw outcome of one RDAP HTTP exchange.

    A transport failure (timeout, DNS error, connection reset) is
    represented by ``http_status=None`` and ``elapsed_ms=0``.
    """

    url: str
    http_status: Optional[int]
    body: Any
    final_url: str
    elapsed_ms: int
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        """True when an HTTP response was received."""
        return self.http_status is not None

    @classmethod
    def failed(cls, url: str, error: str) -> "RdapFetch":
        """Build the sentinel for a request that produced no response."""
        return cls(
            url=url,
            http_status=None,
            body=None,
            final_url=url,
            elapsed_ms=0,
            error=error,
        )


@dataclass(frozen=True)
class Interpretation:
    """Verdict of the response interpreter."""

    status: DomainStatus
    error_code: Optional[int] = None


@dataclass(frozen=True)
class BootstrapCacheEntry:
    """The cached bootstrap directory (whole document, not per TLD)."""

    fetched_at: float
    mapping: dict[str, list[str]] = field(default_factory=dict)

    def age(self, now: float) -> float:
        """Seconds elapsed since the entry was fetched."""
        return now - self.fetched_at
