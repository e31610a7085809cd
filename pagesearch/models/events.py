from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EventType(str, Enum):
    CONNECTED = "connected"
    PROGRESS = "progress"
    COMPLETED = "completed"
    ERROR = "error"


class SearchStage(int, Enum):
    """Pipeline stages in execution order. The value is the step number."""

    ANALYZE = 1
    SEARCH = 2
    SELECT = 3
    COLLECT = 4
    GENERATE = 5
    DONE = 6

    @property
    def percentage(self) -> int:
        return STAGE_PERCENTAGES[self]

    @property
    def message(self) -> str:
        return STAGE_MESSAGES[self]


# Fixed checkpoints; COLLECT and GENERATE dominate wall time so these are not step/total.
STAGE_PERCENTAGES: dict[SearchStage, int] = {
    SearchStage.ANALYZE: 17,
    SearchStage.SEARCH: 33,
    SearchStage.SELECT: 50,
    SearchStage.COLLECT: 67,
    SearchStage.GENERATE: 83,
    SearchStage.DONE: 100,
}

STAGE_MESSAGES: dict[SearchStage, str] = {
    SearchStage.ANALYZE: "Analyzing the question...",
    SearchStage.SEARCH: "Searching pages...",
    SearchStage.SELECT: "Selecting the most relevant pages...",
    SearchStage.COLLECT: "Reading page content...",
    SearchStage.GENERATE: "Writing the answer...",
    SearchStage.DONE: "Answer ready",
}


@dataclass(slots=True, frozen=True)
class ProgressEvent:
    message: str
    step: int
    total_steps: int
    percentage: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "step": self.step,
            "totalSteps": self.total_steps,
            "percentage": self.percentage,
        }


@dataclass
class SSEEvent:
    event: EventType
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.event in (EventType.COMPLETED, EventType.ERROR)
