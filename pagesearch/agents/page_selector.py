"""LLM reranking of search candidates down to a few pages worth reading."""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from pagesearch.config import settings
from pagesearch.llm_client import client as llm_client
from pagesearch.models.interfaces import TextCompleter
from pagesearch.models.pages import PageRef
from pagesearch.services import logger as log_service
from pagesearch.services.prompt_store import render_prompt
from pagesearch.services.structured_output import extract_json_object


def parse_selected_indices(payload: dict[str, Any], *, count: int, limit: int) -> list[int]:
    """Valid, unique, in-range indices from the model payload, capped at `limit`."""
    raw = payload.get("selected_indices")
    if raw is None:
        raw = payload.get("selectedIndices")
    if not isinstance(raw, list):
        return []

    indices: list[int] = []
    for value in raw:
        # bool is an int subclass; true/false are not indices.
        if isinstance(value, bool) or not isinstance(value, int):
            continue
        if value < 0 or value >= count or value in indices:
            continue
        indices.append(value)
        if len(indices) >= limit:
            break
    return indices


class PageSelector:
    """Picks at most `max_selected` pages, weighing relevance and recency."""

    name = "page_selector"

    def __init__(self, completer: TextCompleter | None = None, *, max_selected: int | None = None):
        self.completer = completer
        self.max_selected = max(
            int(settings.search_max_selected_pages if max_selected is None else max_selected), 1
        )

    def build_prompt(self, pages: Sequence[PageRef], query: str) -> str:
        candidates = "\n\n".join(
            render_prompt(
                "selector.candidate",
                index=index,
                title=page.title,
                page_id=page.id,
                last_edited_time=page.last_edited_time or "unknown",
            )
            for index, page in enumerate(pages)
        )
        return render_prompt(
            "selector.rank",
            query=query,
            candidates=candidates,
            max_selected=self.max_selected,
        )

    async def select(self, pages: Sequence[PageRef], query: str) -> list[PageRef]:
        pages = list(pages)
        if len(pages) <= self.max_selected:
            return pages

        try:
            active = self.completer or llm_client()
            text = await active.invoke(self.build_prompt(pages, query))
            payload = extract_json_object(text)
            indices = parse_selected_indices(payload, count=len(pages), limit=self.max_selected)
        except json.JSONDecodeError as e:
            return self._fallback(pages, reason=f"unparseable response: {e.msg}")
        except Exception as e:
            return self._fallback(pages, reason=str(e) or type(e).__name__)

        if not indices:
            return self._fallback(pages, reason="no valid indices in response")

        selected = [pages[index] for index in indices]
        log_service.log_event(
            event_type="pages_selected",
            message=f"Selected {len(selected)} of {len(pages)} pages",
            page_ids=[page.id for page in selected],
        )
        return selected

    def _fallback(self, pages: list[PageRef], *, reason: str) -> list[PageRef]:
        selected = pages[: self.max_selected]
        log_service.log_event(
            event_type="page_selection_fallback",
            message="Page selection fell back to first results",
            level=logging.WARNING,
            reason=reason,
            page_ids=[page.id for page in selected],
        )
        return selected
