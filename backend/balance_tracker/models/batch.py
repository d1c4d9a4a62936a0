"""Batch models."""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from uuid import uuid4
from pydantic import BaseModel, Field
from balance_tracker.models.balance import ExtractionResult
from balance_tracker.utils.parsing import calculate_total

TOTAL_LABEL = "Total Balance"
PARTIAL_TOTAL_LABEL = "Balance So Far"


class BatchStatus(str, Enum):
    """Batch lifecycle status."""
    RUNNING = "running"
    FINISHED = "finished"
    FAILED = "failed"
    CANCELLED = "cancelled"


class BatchRequest(BaseModel):
    """Request model for starting a batch."""
    addresses: Optional[List[str]] = Field(None, description="Raw address strings, in order")
    text: Optional[str] = Field(None, description="Free-form input, one address per line")

    def raw_lines(self) -> List[str]:
        lines = list(self.addresses or [])
        if self.text:
            lines.extend(self.text.splitlines())
        return lines


class BatchSnapshot(BaseModel):
    """Point-in-time copy of a batch, as published to observers."""
    id: str
    status: BatchStatus
    finished: bool
    results: List[ExtractionResult]
    total: Decimal
    total_label: str
    error: Optional[str] = None
    created_at: datetime
    finished_at: Optional[datetime] = None

    class Config:
        json_encoders = {
            Decimal: str,
            datetime: lambda v: v.isoformat()
        }


class BatchSession(BaseModel):
    """
    Ordered results of one batch run.

    The set of addresses is fixed at creation; slots are only ever replaced
    in place, never added, removed or reordered.
    """
    id: str = Field(default_factory=lambda: uuid4().hex)
    status: BatchStatus = Field(default=BatchStatus.RUNNING)
    results: List[ExtractionResult] = Field(default_factory=list)
    error: Optional[str] = Field(None, description="Batch-level (infrastructural) error")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    finished_at: Optional[datetime] = None

    @classmethod
    def seed(cls, addresses: List[str]) -> "BatchSession":
        """Create a batch with every address pending."""
        return cls(results=[ExtractionResult.pending(address) for address in addresses])

    @property
    def addresses(self) -> List[str]:
        return [r.address for r in self.results]

    @property
    def finished(self) -> bool:
        return self.status != BatchStatus.RUNNING

    @property
    def total(self) -> Decimal:
        return calculate_total(r.balance for r in self.results)

    @property
    def total_label(self) -> str:
        # Only a normally completed batch has a complete total
        return TOTAL_LABEL if self.status == BatchStatus.FINISHED else PARTIAL_TOTAL_LABEL

    def update(self, index: int, result: ExtractionResult):
        """Replace one pending slot with its resolved result."""
        current = self.results[index]
        if current.address != result.address:
            raise ValueError(f"Slot {index} holds {current.address}, not {result.address}")
        if current.resolved:
            raise ValueError(f"Slot {index} ({current.address}) is already resolved")
        self.results[index] = result

    def fail_pending(self, error: str) -> int:
        """Mark every unresolved slot failed. Returns the number of slots changed."""
        changed = 0
        for index, result in enumerate(self.results):
            if not result.resolved:
                self.results[index] = ExtractionResult.failed(result.address, error)
                changed += 1
        return changed

    def close(self, status: BatchStatus, error: Optional[str] = None):
        self.status = status
        self.error = error
        self.finished_at = datetime.utcnow()

    def snapshot(self) -> BatchSnapshot:
        return BatchSnapshot(
            id=self.id,
            status=self.status,
            finished=self.finished,
            results=[r.model_copy() for r in self.results],
            total=self.total,
            total_label=self.total_label,
            error=self.error,
            created_at=self.created_at,
            finished_at=self.finished_at
        )
