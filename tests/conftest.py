from __future__ import annotations

from typing import Iterable

import pytest

from pagesearch.models.pages import PageRef


def make_page(n: int) -> PageRef:
    return PageRef(
        id=f"page-{n}",
        title=f"Page {n}",
        url=f"https://www.notion.so/page-{n}",
        created_time="2024-01-01T00:00:00.000Z",
        last_edited_time=f"2024-07-{n:02d}T00:00:00.000Z",
    )


class FakePageSource:
    """In-memory page collaborator recording every call."""

    def __init__(
        self,
        search_results: dict[str, list[PageRef]] | None = None,
        *,
        contents: dict[str, str] | None = None,
        failing_queries: Iterable[str] = (),
        failing_info: Iterable[str] = (),
        failing_content: Iterable[str] = (),
    ):
        self.search_results = search_results or {}
        self.contents = contents or {}
        self.failing_queries = set(failing_queries)
        self.failing_info = set(failing_info)
        self.failing_content = set(failing_content)
        self.search_calls: list[str] = []
        self.info_calls: list[str] = []
        self.content_calls: list[str] = []

    async def search(self, query: str) -> list[PageRef]:
        self.search_calls.append(query)
        if query in self.failing_queries:
            raise RuntimeError(f"search failed for {query}")
        return list(self.search_results.get(query, []))

    async def get_page_info(self, page_id: str) -> PageRef:
        self.info_calls.append(page_id)
        if page_id in self.failing_info:
            raise RuntimeError(f"page {page_id} not found")
        n = int(page_id.rsplit("-", 1)[-1])
        return make_page(n)

    async def get_page_content(self, page_id: str) -> str:
        self.content_calls.append(page_id)
        if page_id in self.failing_content:
            raise RuntimeError(f"content for {page_id} unavailable")
        return self.contents.get(page_id, f"Body of {page_id}")


class FakeCompleter:
    """Answers each prompt kind with a canned response or raises a canned exception."""

    def __init__(
        self,
        *,
        keywords: str | Exception = '{"keywords": []}',
        selection: str | Exception = '{"selected_indices": []}',
        answer: str | Exception = "Answer.",
    ):
        self.responses = {"keywords": keywords, "selection": selection, "answer": answer}
        self.prompts: list[tuple[str, str]] = []

    @staticmethod
    def _kind(prompt: str) -> str:
        if "semantic analyst" in prompt:
            return "keywords"
        if "content curator" in prompt:
            return "selection"
        return "answer"

    async def invoke(self, prompt: str) -> str:
        kind = self._kind(prompt)
        self.prompts.append((kind, prompt))
        response = self.responses[kind]
        if isinstance(response, Exception):
            raise response
        return response

    def calls(self, kind: str) -> list[str]:
        return [prompt for k, prompt in self.prompts if k == kind]


SCENARIO_QUERY = "What is the Q3 project status?"
SCENARIO_KEYWORDS = ["Q3", "project status", "roadmap"]


def scenario_search_results() -> dict[str, list[PageRef]]:
    """Three keywords x three variants; overlapping hits collapse to 12 unique pages."""
    p = {n: make_page(n) for n in range(1, 13)}
    return {
        "Q3": [p[1], p[2], p[3]],
        "Q3 project": [p[2], p[4]],
        "Q3 plan": [p[5]],
        "project status": [p[6], p[1]],
        "project status project": [p[7], p[8]],
        "project status plan": [p[9]],
        "roadmap": [p[10], p[6]],
        "roadmap project": [p[11]],
        "roadmap plan": [p[12], p[3]],
    }


@pytest.fixture
def scenario_source() -> FakePageSource:
    return FakePageSource(scenario_search_results())


@pytest.fixture
def scenario_completer() -> FakeCompleter:
    return FakeCompleter(
        keywords='```json\n{"keywords": ["Q3", "project status", "roadmap"], "reasoning": "core nouns"}\n```',
        selection='Here you go: {"selected_indices": [3, 0, 9], "reasoning": "recent and relevant"}',
        answer="## Q3 status\n\nThe Q3 project is **on track**.",
    )
