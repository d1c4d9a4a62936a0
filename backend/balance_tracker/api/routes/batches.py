"""Batch processing endpoints."""
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from balance_tracker.api.deps import get_batch_store, get_extractor
from balance_tracker.models.balance import ErrorResponse
from balance_tracker.models.batch import BatchRequest, BatchSnapshot
from balance_tracker.services.batch_runner import BatchRunner
from balance_tracker.services.batch_store import BatchStore
from balance_tracker.services.export import generate_csv_export, generate_excel_export
from balance_tracker.services.extractor import BalanceExtractor
from balance_tracker.utils.errors import InvalidInputError

router = APIRouter()

NOT_FOUND = {404: {"model": ErrorResponse}}


def _sse(snapshot: BatchSnapshot) -> str:
    event = "done" if snapshot.finished else "update"
    return f"event: {event}\ndata: {snapshot.model_dump_json(by_alias=True)}\n\n"


@router.post(
    "",
    status_code=202,
    response_model=BatchSnapshot,
    responses={400: {"model": ErrorResponse}}
)
async def start_batch(
    request: BatchRequest,
    extractor: BalanceExtractor = Depends(get_extractor),
    store: BatchStore = Depends(get_batch_store)
):
    """
    Start fetching balances for a list of addresses.

    Blank lines are ignored and malformed addresses dropped. The response is
    the seeded batch with every address pending; progress is available
    from GET /batches/{id} or the /events stream.
    """
    runner = BatchRunner.from_input(request.raw_lines(), extractor)
    store.add(runner)
    runner.start()
    return runner.snapshot()


@router.get("/{batch_id}", response_model=BatchSnapshot, responses=NOT_FOUND)
async def get_batch(batch_id: str, store: BatchStore = Depends(get_batch_store)):
    """Current state of a batch, including its running total."""
    return store.get(batch_id).snapshot()


@router.get("/{batch_id}/events", responses=NOT_FOUND)
async def stream_batch(batch_id: str, store: BatchStore = Depends(get_batch_store)):
    """
    Server-sent events: the current snapshot, then one snapshot per
    address update, ending with the terminal snapshot ("done" event).
    """
    runner = store.get(batch_id)

    async def event_stream():
        queue = runner.subscribe()
        try:
            snapshot = runner.snapshot()
            yield _sse(snapshot)
            while not snapshot.finished:
                snapshot = await queue.get()
                yield _sse(snapshot)
        finally:
            runner.unsubscribe(queue)

    return StreamingResponse(event_stream(), media_type="text/event-stream")


@router.delete("/{batch_id}", response_model=BatchSnapshot, responses=NOT_FOUND)
async def cancel_batch(batch_id: str, store: BatchStore = Depends(get_batch_store)):
    """Abort a batch. Addresses not yet resolved are marked failed."""
    runner = store.get(batch_id)
    await runner.cancel()
    return runner.snapshot()


@router.get("/{batch_id}/export", responses=NOT_FOUND)
async def export_batch(
    batch_id: str,
    format: str = Query(default="xlsx", description="Export format: xlsx or csv"),
    store: BatchStore = Depends(get_batch_store)
):
    """Download the batch rows and total as an Excel or CSV file."""
    snapshot = store.get(batch_id).snapshot()

    if format.lower() == "xlsx":
        return StreamingResponse(
            generate_excel_export(snapshot),
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": f"attachment; filename=balances-{batch_id}.xlsx"}
        )
    if format.lower() == "csv":
        return StreamingResponse(
            generate_csv_export(snapshot),
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename=balances-{batch_id}.csv"}
        )
    raise InvalidInputError(f"Unsupported export format '{format}', use xlsx or csv")
