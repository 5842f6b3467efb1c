"""
Batch Aggregator for the RDAP checker.

Reduces per-domain outcomes to one overall classification. Any unknown
result (or a worker failure) makes the whole batch an error, so an
ambiguous answer is never hidden behind other definitive ones.
"""

from dataclasses import dataclass
from typing import Iterable, Union

from .concurrency import Failure
from .enums import BatchStatus, DomainStatus
from .models import CheckResult


BatchItem = Union[CheckResult, Failure]


@dataclass(frozen=True)
class BatchSummary:
    """Counts per status plus the overall classification."""

    total: int
    available: int
    registered: int
    unknown: int
    failed: int
    status: BatchStatus

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "available": self.available,
            "registered": self.registered,
            "unknown": self.unknown,
            "failed": self.failed,
            "status": self.status.value,
        }


def _status_of(item: BatchItem) -> DomainStatus:
    if isinstance(item, Failure):
        return DomainStatus.UNKNOWN
    return item.status


def aggregate_status(results: Iterable[BatchItem]) -> BatchStatus:
    """
    Classify a batch of results.

    Args:
        results: CheckResults, possibly mixed with Failure outcomes

    Returns:
        ERROR if any result is unknown or failed, AVAILABLE if all are
        available, REGISTERED if all are registered, MIXED otherwise
    """
    statuses = [_status_of(item) for item in results]

    if DomainStatus.UNKNOWN in statuses:
        return BatchStatus.ERROR
    if all(status is DomainStatus.AVAILABLE for status in statuses):
        return BatchStatus.AVAILABLE
    if all(status is DomainStatus.REGISTERED for status in statuses):
        return BatchStatus.REGISTERED
    return BatchStatus.MIXED


def summarize(results: Iterable[BatchItem]) -> BatchSummary:
    """Count results by status and attach the overall classification."""
    items = list(results)
    failed = sum(1 for item in items if isinstance(item, Failure))
    checked = [item for item in items if not isinstance(item, Failure)]

    return BatchSummary(
        total=len(items),
        available=sum(1 for r in checked if r.status is DomainStatus.AVAILABLE),
        registered=sum(1 for r in checked if r.status is DomainStatus.REGISTERED),
        unknown=sum(1 for r in checked if r.status is DomainStatus.UNKNOWN),
        failed=failed,
        status=aggregate_status(items),
    )
