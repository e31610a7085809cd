from __future__ import annotations

import asyncio
import json as _json
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from sse_starlette.sse import EventSourceResponse

from pagesearch.agents.orchestrator import SearchOrchestrator
from pagesearch.models.pages import SearchResult
from pagesearch.models.schemas import SearchRequest, SearchResponse, SearchResponseData
from pagesearch.services import logger as log_service
from pagesearch.services import streaming
from pagesearch.services.progress_channels import channels

router = APIRouter(prefix="/api/search", tags=["search"])

DISCONNECT_POLL_SECONDS = 0.5


def get_orchestrator() -> SearchOrchestrator:
    return SearchOrchestrator()


async def _wait_for_disconnect(request: Request) -> None:
    while not await request.is_disconnected():
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


async def _run_until_disconnected(request: Request, work: Awaitable[SearchResult]) -> SearchResult | None:
    """Await `work`, cancelling it if the client goes away first. None means cancelled."""
    task = asyncio.ensure_future(work)
    watcher = asyncio.ensure_future(_wait_for_disconnect(request))
    try:
        await asyncio.wait({task, watcher}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        raise
    finally:
        watcher.cancel()

    if not task.done():
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        return None
    return task.result()


@router.get("/progress/{request_id}")
async def stream_progress(request_id: str):
    """SSE endpoint relaying one search run's progress events."""
    queue = channels.open(request_id)

    async def event_generator():
        try:
            hello = streaming.connected(request_id)
            yield {"event": hello.event.value, "data": _json.dumps(hello.data)}
            while True:
                event = await queue.get()
                yield {"event": event.event.value, "data": _json.dumps(event.data)}
                if event.is_terminal:
                    break
        finally:
            channels.close(request_id, queue)

    return EventSourceResponse(event_generator())


@router.post("", response_model=SearchResponse)
async def search(body: SearchRequest, request: Request):
    """Run the intelligent search pipeline for one question."""
    query = body.query.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Query must not be empty")

    request_id = body.request_id
    callback = channels.callback_for(request_id) if request_id else None
    log_service.log_event(
        event_type="search_started",
        message="Search request received",
        request_id=request_id,
        query=query[:100],
    )

    orchestrator = get_orchestrator()
    try:
        result = await _run_until_disconnected(request, orchestrator.run(query, callback))
    except Exception as e:
        log_service.log_event(
            event_type="search_request_failed",
            message="Search request failed",
            level=logging.ERROR,
            request_id=request_id,
            error=str(e),
        )
        if request_id:
            channels.fail(request_id, "Search failed")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Search failed", "details": str(e)},
        )

    if result is None:
        log_service.log_event(
            event_type="search_cancelled",
            message="Client disconnected; search cancelled",
            request_id=request_id,
        )
        if request_id:
            channels.fail(request_id, "Search cancelled")
        return JSONResponse(
            status_code=499,
            content={"success": False, "error": "Client closed request"},
        )

    if request_id:
        channels.complete(request_id)

    metadata: dict[str, Any] = result.metadata.to_dict()
    return SearchResponse(
        data=SearchResponseData(
            response=result.response,
            timestamp=datetime.now(timezone.utc).isoformat(),
            metadata=metadata,
        )
    )
