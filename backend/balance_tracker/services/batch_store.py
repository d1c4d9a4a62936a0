"""In-process registry of batch runs."""
from datetime import datetime, timedelta
from typing import Dict, Optional
from balance_tracker.config import settings
from balance_tracker.services.batch_runner import BatchRunner
from balance_tracker.utils.errors import BatchNotFoundError


class BatchStore:
    """
    Keeps batch runners addressable by id for the life of the process.

    Running batches are never evicted; a finished batch expires
    ttl_seconds after it closed.
    """

    def __init__(self, ttl_seconds: Optional[int] = None):
        self.ttl_seconds = settings.batch_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._batches: Dict[str, BatchRunner] = {}

    def add(self, runner: BatchRunner) -> BatchRunner:
        self.purge_expired()
        self._batches[runner.session.id] = runner
        return runner

    def get(self, batch_id: str) -> BatchRunner:
        """
        Get a batch runner by id.

        Raises:
            BatchNotFoundError: If the id is unknown or expired
        """
        self.purge_expired()
        runner = self._batches.get(batch_id)
        if runner is None:
            raise BatchNotFoundError(f"Batch '{batch_id}' not found")
        return runner

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        """Drop finished batches past their expiry. Returns the number dropped."""
        now = now or datetime.utcnow()
        expired = [
            batch_id for batch_id, runner in self._batches.items()
            if self._expiry(runner) is not None and now > self._expiry(runner)
        ]
        for batch_id in expired:
            del self._batches[batch_id]
        if expired:
            print(f"[STORE] Purged {len(expired)} expired batch(es)")
        return len(expired)

    def _expiry(self, runner: BatchRunner) -> Optional[datetime]:
        finished_at = runner.session.finished_at
        if finished_at is None:
            return None
        return finished_at + timedelta(seconds=self.ttl_seconds)
