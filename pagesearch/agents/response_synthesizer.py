from __future__ import annotations

import logging
import time
from typing import Sequence

from pagesearch.config import settings
from pagesearch.llm_client import client as llm_client
from pagesearch.models.interfaces import TextCompleter
from pagesearch.models.pages import PageContent
from pagesearch.services import logger as log_service
from pagesearch.services.prompt_store import render_prompt

SOURCES_HEADER = "**Sources:**"


def build_sources_block(nodes: Sequence[PageContent]) -> str:
    lines = [f"- [{node.title}]({node.url})" for node in nodes]
    return "\n".join(["---", SOURCES_HEADER, *lines])


def _clip(text: str, limit: int) -> str:
    """Cut `text` to at most `limit` characters, marking the cut with "..."."""
    if len(text) <= limit:
        return text
    if limit <= 3:
        return text[: max(limit, 0)]
    return text[: limit - 3].rstrip() + "..."


class ResponseSynthesizer:
    """Writes the final answer from the content tree and appends its sources."""

    name = "response_synthesizer"

    def __init__(self, completer: TextCompleter | None = None, *, context_char_budget: int | None = None):
        self.completer = completer
        budget = settings.synthesis_context_char_budget if context_char_budget is None else context_char_budget
        self.context_char_budget = max(int(budget), 1)

    def build_context(self, content_tree: Sequence[PageContent]) -> str:
        nodes = [node for root in content_tree for node in root.iter_nodes()]
        if not nodes:
            return "(no page content was retrieved)"

        # Even share per node so one long page cannot crowd out the others.
        per_node = self.context_char_budget // len(nodes)
        sections = []
        for node in nodes:
            children_note = f"Child pages: {len(node.children)}\n" if node.children else ""
            sections.append(
                render_prompt(
                    "synthesis.node",
                    title=node.title,
                    depth=node.depth,
                    content=_clip(node.content, per_node),
                    children_note=children_note,
                )
            )
        return "\n".join(sections)

    async def generate(self, query: str, content_tree: Sequence[PageContent]) -> str:
        """Answer `query` from `content_tree`. Completion failures propagate."""
        prompt = render_prompt("synthesis.answer", query=query, context=self.build_context(content_tree))
        t0 = time.monotonic()
        try:
            active = self.completer or llm_client()
            text = await active.invoke(prompt)
        except Exception as e:
            log_service.log_event(
                event_type="synthesis_failed",
                message="Answer generation failed",
                level=logging.ERROR,
                error=str(e),
            )
            raise

        log_service.log_event(
            event_type="synthesis_complete",
            message="Answer generated",
            duration_ms=int((time.monotonic() - t0) * 1000),
            answer_chars=len(text or ""),
            sources=len(content_tree),
        )
        return f"{(text or '').strip()}\n\n{build_sources_block(content_tree)}"
