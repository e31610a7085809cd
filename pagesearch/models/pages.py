from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class PageRef:
    """A page as reported by search or metadata lookup. `id` is the dedup key."""

    id: str
    title: str
    url: str = ""
    created_time: str = ""
    last_edited_time: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "created_time": self.created_time,
            "last_edited_time": self.last_edited_time,
        }


@dataclass(slots=True)
class PageContent:
    id: str
    title: str
    content: str
    depth: int
    url: str = ""
    children: list[PageContent] = field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def iter_nodes(self):
        """Yield this node and its descendants depth-first."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()


@dataclass(slots=True)
class Source:
    title: str
    id: str
    url: str

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "id": self.id, "url": self.url}


@dataclass(slots=True)
class SearchMetadata:
    keywords: list[str]
    total_pages_found: int
    selected_pages: int
    processing_time: int  # milliseconds
    sources: list[Source] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "keywords": list(self.keywords),
            "totalPagesFound": self.total_pages_found,
            "selectedPages": self.selected_pages,
            "processingTime": self.processing_time,
            "sources": [source.to_dict() for source in self.sources],
        }


@dataclass(slots=True)
class SearchResult:
    response: str
    metadata: SearchMetadata


@dataclass(slots=True)
class SearchContext:
    """Run-local pipeline state. Never persisted or shared between runs."""

    query: str
    start_time: float = field(default_factory=time.monotonic)
    total_steps: int = 6
    current_step: int = 0

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.start_time) * 1000)
