from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Sequence

from pagesearch.config import settings
from pagesearch.models.interfaces import PageSource
from pagesearch.models.pages import PageRef
from pagesearch.services import logger as log_service
from pagesearch.services import rate_limit
from pagesearch.tools import notion_client


@dataclass(slots=True)
class KeywordSearchResult:
    keyword: str
    queries: list[str] = field(default_factory=list)
    pages: list[PageRef] = field(default_factory=list)
    error: str | None = None


def build_keyword_queries(keyword: str, *, suffixes: Sequence[str]) -> list[str]:
    """The bare keyword plus one planning-flavoured variant per suffix."""
    cleaned = " ".join(keyword.split()).strip()
    if not cleaned:
        return []
    queries = [cleaned]
    for suffix in suffixes:
        suffix = suffix.strip()
        if suffix:
            queries.append(f"{cleaned} {suffix}")
    return queries


def merge_pages(merged: dict[str, PageRef], pages: Sequence[PageRef]) -> int:
    """Add unseen pages to `merged` keyed by id. Returns how many were new."""
    added = 0
    for page in pages:
        if not page.id or page.id in merged:
            continue
        merged[page.id] = page
        added += 1
    return added


class FanOutSearcher:
    """Runs every keyword's query variants concurrently and dedups by page id."""

    name = "search"

    def __init__(
        self,
        source: PageSource | None = None,
        *,
        max_results: int | None = None,
        delay_ms: int | None = None,
        suffixes: Sequence[str] | None = None,
    ):
        self.source = source
        self.max_results = max(
            int(settings.search_max_results if max_results is None else max_results), 1
        )
        self.delay_ms = max(int(settings.search_delay_ms if delay_ms is None else delay_ms), 0)
        self.suffixes = list(settings.search_query_suffixes if suffixes is None else suffixes)

    async def _search_keyword(self, keyword: str) -> KeywordSearchResult:
        result = KeywordSearchResult(keyword=keyword)
        result.queries = build_keyword_queries(keyword, suffixes=self.suffixes)
        if not result.queries:
            return result

        active = self.source or notion_client.client()
        responses = await asyncio.gather(
            *(active.search(query) for query in result.queries),
            return_exceptions=True,
        )
        for response in responses:
            if isinstance(response, BaseException):
                if not isinstance(response, Exception):
                    raise response
                # One failed variant discards the whole keyword.
                result.error = str(response) or type(response).__name__
                return result

        for response in responses:
            result.pages.extend(response)
        return result

    async def search(self, keywords: Sequence[str]) -> list[PageRef]:
        merged: dict[str, PageRef] = {}

        for index, keyword in enumerate(keywords):
            if index > 0:
                await rate_limit.pause(self.delay_ms)

            try:
                item = await self._search_keyword(keyword)
            except Exception as e:
                item = KeywordSearchResult(keyword=keyword, error=str(e) or type(e).__name__)

            if item.error is not None:
                log_service.log_event(
                    event_type="keyword_search_failed",
                    message=f"Search for keyword '{keyword}' failed; skipping",
                    level=logging.WARNING,
                    keyword=keyword,
                    error=item.error,
                )
                continue

            added = merge_pages(merged, item.pages)
            log_service.log_event(
                event_type="keyword_searched",
                message=f"Searched keyword {index + 1}/{len(keywords)}",
                keyword=keyword,
                queries=item.queries,
                hits=len(item.pages),
                new_pages=added,
            )

        pages = list(merged.values())[: self.max_results]
        log_service.log_event(
            event_type="search_complete",
            message="Fan-out search complete",
            unique_pages=len(merged),
            returned=len(pages),
        )
        return pages
