from __future__ import annotations

from pagesearch.models.events import EventType, ProgressEvent, SearchStage, SSEEvent


def stage_progress(stage: SearchStage, total_steps: int = len(SearchStage)) -> ProgressEvent:
    """Build the fixed checkpoint event for entering `stage`."""
    return ProgressEvent(
        message=stage.message,
        step=stage.value,
        total_steps=total_steps,
        percentage=stage.percentage,
    )


def connected(request_id: str) -> SSEEvent:
    return SSEEvent(
        event=EventType.CONNECTED,
        data={"type": "connected", "requestId": request_id},
    )


def progress(event: ProgressEvent) -> SSEEvent:
    return SSEEvent(event=EventType.PROGRESS, data=event.to_dict())


def completed(total_steps: int = len(SearchStage)) -> SSEEvent:
    return SSEEvent(
        event=EventType.COMPLETED,
        data={
            "type": "completed",
            "step": total_steps,
            "totalSteps": total_steps,
            "percentage": 100,
        },
    )


def error(message: str) -> SSEEvent:
    return SSEEvent(event=EventType.ERROR, data={"type": "error", "message": message})
