"""
mileage_batch.domain.types -- Pure frozen dataclasses for bulk settlement.

ZERO I/O.  Per-item outcomes are ``SettlementResult`` values from the
submission service; this module aggregates them.

Invariants enforced:
    - ``success_count + fail_count == len(items)``.
    - Items keep the order in which they were processed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from mileage_kernel.services.submission_service import SettlementResult


@dataclass(frozen=True)
class BulkSettlementResult:
    """Immutable result of settling every pending submission of a month."""

    batch_id: UUID
    year: int
    month: int
    items: tuple[SettlementResult, ...] = ()
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_ms: int = 0

    @property
    def success_count(self) -> int:
        return sum(1 for item in self.items if item.is_success)

    @property
    def fail_count(self) -> int:
        return sum(1 for item in self.items if not item.is_success)

    @property
    def failures(self) -> tuple[SettlementResult, ...]:
        return tuple(item for item in self.items if not item.is_success)

    def as_counts(self) -> dict[str, int]:
        return {"successCount": self.success_count, "failCount": self.fail_count}
