from __future__ import annotations

from typing import Awaitable, Callable, Protocol, Union

from pagesearch.models.events import ProgressEvent
from pagesearch.models.pages import PageRef


class PageSource(Protocol):
    """Page search, metadata and content lookups (e.g. the Notion API)."""

    async def search(self, query: str) -> list[PageRef]: ...

    async def get_page_info(self, page_id: str) -> PageRef: ...

    async def get_page_content(self, page_id: str) -> str: ...


class TextCompleter(Protocol):
    """Prompt in, free text out. The text may or may not contain valid JSON."""

    async def invoke(self, prompt: str) -> str: ...


ProgressCallback = Callable[[ProgressEvent], Union[None, Awaitable[None]]]
