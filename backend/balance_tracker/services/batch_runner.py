"""Batch orchestration across many addresses."""
import asyncio
from typing import Callable, Iterable, List, Optional
from balance_tracker.config import settings
from balance_tracker.models.balance import ExtractionResult
from balance_tracker.models.batch import BatchSession, BatchSnapshot, BatchStatus
from balance_tracker.services.extractor import BalanceExtractor
from balance_tracker.utils.addresses import normalize_addresses
from balance_tracker.utils.errors import BrowserLaunchError

CANCELLED_ERROR = "cancelled"

UpdateCallback = Callable[[BatchSnapshot], None]


class BatchRunner:
    """
    Runs the extractor over every address of one batch.

    The runner exclusively owns its BatchSession. After every slot update a
    snapshot is published to the optional callback and to every subscriber
    queue, so observers see progress address by address.
    """

    def __init__(
        self,
        session: BatchSession,
        extractor: BalanceExtractor,
        concurrency: int = 1,
        on_update: Optional[UpdateCallback] = None
    ):
        self.session = session
        self.extractor = extractor
        self.concurrency = max(1, concurrency)
        self.on_update = on_update
        self._subscribers: List[asyncio.Queue] = []
        self._task: Optional[asyncio.Task] = None
        self._infra_error: Optional[str] = None

    @classmethod
    def from_input(
        cls,
        raw_lines: Iterable[str],
        extractor: BalanceExtractor,
        concurrency: Optional[int] = None,
        max_addresses: Optional[int] = None,
        on_update: Optional[UpdateCallback] = None
    ) -> "BatchRunner":
        """
        Validate raw input and seed a batch with every address pending.

        Raises:
            InvalidInputError: If no valid address is left after validation
        """
        addresses = normalize_addresses(
            raw_lines,
            max_addresses=settings.max_addresses if max_addresses is None else max_addresses
        )
        session = BatchSession.seed(addresses)
        print(f"[BATCH] Created batch {session.id} with {len(addresses)} address(es)")
        return cls(
            session,
            extractor,
            concurrency=settings.batch_concurrency if concurrency is None else concurrency,
            on_update=on_update
        )

    def snapshot(self) -> BatchSnapshot:
        return self.session.snapshot()

    def subscribe(self) -> asyncio.Queue:
        """Queue receiving a snapshot after every update, ending with the terminal one."""
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue):
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    def publish(self):
        snapshot = self.session.snapshot()
        for queue in self._subscribers:
            queue.put_nowait(snapshot)
        if self.on_update is not None:
            self.on_update(snapshot)

    def start(self) -> asyncio.Task:
        """Run the batch in the background of the current event loop."""
        if self._task is None:
            self._task = asyncio.create_task(self.run())
        return self._task

    async def cancel(self):
        """Stop scheduling addresses and release in-flight browser sessions."""
        if self._task is None:
            if not self.session.finished:
                self._close_cancelled()
            return
        if not self._task.done():
            self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    async def run(self) -> BatchSession:
        """
        Process every address and close the batch.

        Address-level failures become failed slots. A browser that cannot
        start fails the batch: the remaining slots are failed with the batch
        error while already resolved slots are kept.
        """
        session = self.session
        if self._task is None:
            self._task = asyncio.current_task()
        self.publish()
        semaphore = asyncio.Semaphore(self.concurrency)

        async def worker(index: int):
            async with semaphore:
                await self._process(index)

        try:
            await asyncio.gather(*(worker(i) for i in range(len(session.results))))
        except asyncio.CancelledError:
            self._close_cancelled()
            raise

        if self._infra_error is not None:
            session.fail_pending(self._infra_error)
            session.close(BatchStatus.FAILED, self._infra_error)
            print(f"[BATCH] Batch {session.id} failed: {self._infra_error}")
        else:
            session.close(BatchStatus.FINISHED)
            print(f"[BATCH] Batch {session.id} finished, {session.total_label}: ${session.total:,}")
        self.publish()
        return session

    async def _process(self, index: int):
        address = self.session.results[index].address
        if self._infra_error is not None:
            # Left pending; failed together when the batch closes
            return

        try:
            result = await self.extractor.extract(address)
        except BrowserLaunchError as e:
            print(f"[BATCH] ERROR: Browser unavailable while processing {address}: {e}")
            self._infra_error = str(e)
            result = ExtractionResult.failed(address, str(e))
        except Exception as e:
            # Anything else is still confined to this address
            print(f"[BATCH] Unexpected error for address {address}: {e!r}")
            result = ExtractionResult.failed(address, f"Failed to fetch data for address: {address}")

        self.session.update(index, result)
        self.publish()

    def _close_cancelled(self):
        changed = self.session.fail_pending(CANCELLED_ERROR)
        self.session.close(BatchStatus.CANCELLED, CANCELLED_ERROR)
        print(f"[BATCH] WARNING: Batch {self.session.id} cancelled, {changed} address(es) not processed")
        self.publish()
