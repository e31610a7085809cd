from __future__ import annotations

import pytest

from pagesearch.agents.page_selector import PageSelector, parse_selected_indices
from conftest import SCENARIO_QUERY, FakeCompleter, make_page


def _pages(count: int):
    return [make_page(n) for n in range(1, count + 1)]


@pytest.mark.asyncio
async def test_small_candidate_list_is_returned_unchanged_without_completion():
    completer = FakeCompleter(selection=RuntimeError("must not be called"))
    pages = _pages(3)

    selected = await PageSelector(completer, max_selected=3).select(pages, SCENARIO_QUERY)

    assert selected == pages
    assert completer.prompts == []


@pytest.mark.asyncio
async def test_select_uses_model_indices_in_model_order():
    completer = FakeCompleter(selection='{"selected_indices": [3, 0, 9], "reasoning": "fresh"}')
    pages = _pages(12)

    selected = await PageSelector(completer, max_selected=3).select(pages, SCENARIO_QUERY)

    assert [page.id for page in selected] == ["page-4", "page-1", "page-10"]


@pytest.mark.asyncio
async def test_select_discards_invalid_indices_and_caps_result():
    completer = FakeCompleter(
        selection='{"selectedIndices": [42, -1, "2", true, 5, 5, 1, 7, 0]}'
    )
    pages = _pages(8)

    selected = await PageSelector(completer, max_selected=3).select(pages, SCENARIO_QUERY)

    assert [page.id for page in selected] == ["page-6", "page-2", "page-8"]


@pytest.mark.asyncio
async def test_completion_failure_falls_back_to_first_pages():
    completer = FakeCompleter(selection=RuntimeError("model unavailable"))
    pages = _pages(12)

    selected = await PageSelector(completer, max_selected=3).select(pages, SCENARIO_QUERY)

    assert selected == pages[:3]


@pytest.mark.asyncio
async def test_malformed_or_empty_selection_falls_back_to_first_pages():
    pages = _pages(6)
    for response in ("pick 1 and 2", '{"selected_indices": []}', '{"selected_indices": [99]}', "{broken"):
        selector = PageSelector(FakeCompleter(selection=response), max_selected=3)
        assert await selector.select(pages, SCENARIO_QUERY) == pages[:3]


@pytest.mark.asyncio
async def test_prompt_lists_candidates_with_zero_based_indices():
    completer = FakeCompleter(selection='{"selected_indices": [0]}')
    pages = _pages(4)

    await PageSelector(completer, max_selected=2).select(pages, "roadmap")

    prompt = completer.calls("selection")[0]
    assert "[0] Title: Page 1" in prompt
    assert "[3] Title: Page 4" in prompt
    assert "ID: page-2" in prompt
    assert "Last edited: 2024-07-03T00:00:00.000Z" in prompt
    assert "at most 2" in prompt


def test_parse_selected_indices_rejects_non_list_payloads():
    assert parse_selected_indices({"selected_indices": "0,1"}, count=5, limit=3) == []
    assert parse_selected_indices({}, count=5, limit=3) == []
