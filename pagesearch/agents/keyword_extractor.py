from __future__ import annotations

import json
import logging

from pagesearch.config import settings
from pagesearch.llm_client import client as llm_client
from pagesearch.models.interfaces import TextCompleter
from pagesearch.services import logger as log_service
from pagesearch.services.prompt_store import render_prompt
from pagesearch.services.structured_output import extract_json_object, normalize_text_list

STOPWORDS = frozenset(
    {
        # English function words that survive the length filter
        "the", "and", "for", "are", "was", "were", "what", "when", "where",
        "which", "who", "whom", "why", "how", "with", "from", "that", "this",
        "these", "those", "about", "into", "does", "did", "have", "has", "had",
        "can", "could", "should", "would", "will", "any", "all", "our", "your",
        "their", "there", "then", "than", "please", "tell", "show", "give",
        # CJK particles and connectives
        "的", "了", "是", "在", "和", "與", "或", "但", "然後", "因為", "所以",
    }
)


def fallback_keywords(query: str, max_keywords: int) -> list[str]:
    """Whitespace tokenizer used whenever the model cannot be trusted."""
    words = [
        word
        for word in query.split()
        if len(word) > 2 and word.lower() not in STOPWORDS
    ][:max_keywords]
    return words if words else [query]


class KeywordExtractor:
    """Turns a free-text question into a short list of search keywords."""

    name = "keyword_extractor"

    def __init__(self, completer: TextCompleter | None = None, *, max_keywords: int | None = None):
        self.completer = completer
        self.max_keywords = max(
            int(settings.search_max_keywords if max_keywords is None else max_keywords), 1
        )

    async def extract(self, query: str) -> list[str]:
        """Return 1..max_keywords keywords. Never raises on model or parse failure."""
        try:
            active = self.completer or llm_client()
            text = await active.invoke(
                render_prompt("keywords.extract", query=query, max_keywords=self.max_keywords)
            )
            payload = extract_json_object(text)
            keywords = normalize_text_list(payload.get("keywords"), max_items=self.max_keywords)
        except json.JSONDecodeError as e:
            return self._fallback(query, reason=f"unparseable response: {e.msg}")
        except Exception as e:
            return self._fallback(query, reason=str(e) or type(e).__name__)

        if not keywords:
            return self._fallback(query, reason="no keywords in response")

        log_service.log_event(
            event_type="keywords_extracted",
            message="Extracted search keywords",
            keywords=keywords,
        )
        return keywords

    def _fallback(self, query: str, *, reason: str) -> list[str]:
        keywords = fallback_keywords(query, self.max_keywords)
        log_service.log_event(
            event_type="keywords_fallback",
            message="Keyword extraction fell back to tokenizer",
            level=logging.WARNING,
            reason=reason,
            keywords=keywords,
        )
        return keywords
