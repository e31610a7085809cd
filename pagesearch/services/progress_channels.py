"""Per-request progress sinks feeding the server-push progress stream.

A listener opens a channel for its correlation id and drains the queue;
pipeline runs publish into it. Publishing is fire-and-forget: events for a
closed or unknown channel are dropped.
"""
from __future__ import annotations

import asyncio
import logging

from pagesearch.models.events import ProgressEvent, SSEEvent
from pagesearch.services import logger as log_service
from pagesearch.services import streaming

CHANNEL_MAX_EVENTS = 64


class ProgressChannels:
    def __init__(self, max_events: int = CHANNEL_MAX_EVENTS):
        self.max_events = max_events
        self._queues: dict[str, asyncio.Queue[SSEEvent]] = {}

    def open(self, request_id: str) -> asyncio.Queue[SSEEvent]:
        queue: asyncio.Queue[SSEEvent] = asyncio.Queue(maxsize=self.max_events)
        self._queues[request_id] = queue
        log_service.log_event(
            event_type="progress_channel_opened",
            message="Progress channel opened",
            request_id=request_id,
        )
        return queue

    def close(self, request_id: str, queue: asyncio.Queue[SSEEvent] | None = None) -> None:
        """Drop the channel. With `queue`, only if that listener still owns it."""
        current = self._queues.get(request_id)
        if current is None or (queue is not None and current is not queue):
            return
        del self._queues[request_id]
        log_service.log_event(
            event_type="progress_channel_closed",
            message="Progress channel closed",
            request_id=request_id,
        )

    def is_open(self, request_id: str) -> bool:
        return request_id in self._queues

    def publish(self, request_id: str, event: SSEEvent) -> bool:
        """Queue `event` for the listener. Returns False when it was dropped."""
        queue = self._queues.get(request_id)
        if queue is None:
            return False
        try:
            queue.put_nowait(event)
        except asyncio.QueueFull:
            log_service.log_event(
                event_type="progress_dropped",
                message="Progress channel full; dropping event",
                level=logging.WARNING,
                request_id=request_id,
                event=event.event.value,
            )
            return False
        return True

    def publish_progress(self, request_id: str, event: ProgressEvent) -> bool:
        return self.publish(request_id, streaming.progress(event))

    def complete(self, request_id: str) -> bool:
        return self.publish(request_id, streaming.completed())

    def fail(self, request_id: str, message: str) -> bool:
        return self.publish(request_id, streaming.error(message))

    def callback_for(self, request_id: str):
        """Progress callback for `Orchestrator.run` bound to one channel."""

        def _callback(event: ProgressEvent) -> None:
            self.publish_progress(request_id, event)

        return _callback


channels = ProgressChannels()
