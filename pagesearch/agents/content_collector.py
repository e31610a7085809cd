from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from pagesearch.config import settings
from pagesearch.models.interfaces import PageSource
from pagesearch.models.pages import PageContent, PageRef
from pagesearch.services import logger as log_service
from pagesearch.services import rate_limit
from pagesearch.tools import notion_client

UNAVAILABLE_CONTENT = "unavailable"


class ContentCollector:
    """Fetches selected pages into a depth-bounded content tree.

    Pages are read one at a time with a pause between them. A page whose
    metadata or body cannot be fetched becomes an error node; its siblings
    are unaffected.
    """

    name = "content_collector"

    def __init__(
        self,
        source: PageSource | None = None,
        *,
        max_depth: int | None = None,
        delay_ms: int | None = None,
    ):
        self.source = source
        self.max_depth = max(int(settings.search_max_depth if max_depth is None else max_depth), 1)
        self.delay_ms = max(int(settings.search_delay_ms if delay_ms is None else delay_ms), 0)

    async def find_child_pages(self, page_id: str) -> list[PageRef]:
        """Child pages to descend into. No discovery mechanism exists yet; override to add one."""
        return []

    async def collect(self, pages: Sequence[PageRef], depth: int = 1) -> list[PageContent]:
        if depth < 1 or depth > self.max_depth:
            raise ValueError(f"depth must be between 1 and {self.max_depth}, got {depth}")

        nodes: list[PageContent] = []
        for index, page in enumerate(pages):
            if index > 0:
                await rate_limit.pause(self.delay_ms)
            log_service.logger.info(
                "Reading %s (level %d, %d/%d)", page.title, depth, index + 1, len(pages)
            )
            nodes.append(await self._collect_page(page, depth))
        return nodes

    async def _fetch(self, page_id: str) -> tuple[PageRef, str]:
        active = self.source or notion_client.client()
        info, body = await asyncio.gather(
            active.get_page_info(page_id),
            active.get_page_content(page_id),
            return_exceptions=True,
        )
        for outcome in (info, body):
            if isinstance(outcome, BaseException):
                raise outcome
        return info, body

    async def _collect_page(self, page: PageRef, depth: int) -> PageContent:
        try:
            info, body = await self._fetch(page.id)
        except Exception as e:
            message = str(e) or type(e).__name__
            log_service.log_event(
                event_type="page_fetch_failed",
                message=f"Failed to read page '{page.title}'",
                level=logging.WARNING,
                page_id=page.id,
                depth=depth,
                error=message,
            )
            return PageContent(
                id=page.id,
                title=page.title,
                url=page.url,
                content=UNAVAILABLE_CONTENT,
                depth=depth,
                error=message,
            )

        node = PageContent(
            id=info.id or page.id,
            title=info.title,
            url=info.url or page.url,
            content=body,
            depth=depth,
        )

        if depth < self.max_depth:
            try:
                child_pages = await self.find_child_pages(page.id)
            except Exception as e:
                log_service.log_event(
                    event_type="child_discovery_failed",
                    message=f"Failed to list child pages of '{page.title}'",
                    level=logging.WARNING,
                    page_id=page.id,
                    error=str(e),
                )
                child_pages = []
            if child_pages:
                log_service.logger.info("Descending into %d child pages of %s", len(child_pages), page.title)
                node.children = await self.collect(child_pages, depth + 1)

        return node
