"""Tests for keyword extraction and its tokenizer fallback."""
from __future__ import annotations

import pytest

from pagesearch.agents.keyword_extractor import KeywordExtractor, fallback_keywords
from conftest import SCENARIO_QUERY, FakeCompleter


@pytest.mark.asyncio
async def test_extract_parses_fenced_json(scenario_completer):
    extractor = KeywordExtractor(scenario_completer, max_keywords=3)

    keywords = await extractor.extract(SCENARIO_QUERY)

    assert keywords == ["Q3", "project status", "roadmap"]
    prompt = scenario_completer.calls("keywords")[0]
    assert SCENARIO_QUERY in prompt
    assert "at most 3 keywords" in prompt


@pytest.mark.asyncio
async def test_extract_reads_object_after_reasoning_fence():
    completer = FakeCompleter(keywords='```\nthinking...\n```\n{"keywords": ["roadmap"]}')

    keywords = await KeywordExtractor(completer, max_keywords=3).extract("quarterly budget review")

    assert keywords == ["roadmap"]


@pytest.mark.asyncio
async def test_extract_caps_and_cleans_model_keywords():
    completer = FakeCompleter(
        keywords='{"keywords": ["  budget ", 7, "", "Budget", "roadmap", "hiring", "okr"]}'
    )
    extractor = KeywordExtractor(completer, max_keywords=3)

    keywords = await extractor.extract("budget roadmap hiring")

    assert keywords == ["budget", "roadmap", "hiring"]


@pytest.mark.asyncio
async def test_extract_falls_back_on_unparseable_response():
    extractor = KeywordExtractor(FakeCompleter(keywords="I think: Q3, status"), max_keywords=3)

    keywords = await extractor.extract(SCENARIO_QUERY)

    assert keywords == ["project", "status?"]


@pytest.mark.asyncio
async def test_extract_falls_back_when_completion_raises():
    extractor = KeywordExtractor(FakeCompleter(keywords=RuntimeError("quota exceeded")), max_keywords=2)

    keywords = await extractor.extract("quarterly marketing roadmap review")

    assert keywords == ["quarterly", "marketing"]


@pytest.mark.asyncio
async def test_extract_falls_back_on_empty_or_wrong_schema():
    for response in ('{"keywords": []}', '{"keywords": "Q3"}', '{"terms": ["Q3"]}'):
        extractor = KeywordExtractor(FakeCompleter(keywords=response), max_keywords=3)
        assert await extractor.extract("design review notes") == ["design", "review", "notes"]


@pytest.mark.asyncio
async def test_extract_always_returns_between_one_and_max_keywords():
    queries = ["", "a b", "is it ok", "的 了 是", SCENARIO_QUERY, "one two three four five six"]
    for response in ("garbage", RuntimeError("down"), '{"keywords": ["x", "y", "z", "w"]}'):
        extractor = KeywordExtractor(FakeCompleter(keywords=response), max_keywords=3)
        for query in queries:
            keywords = await extractor.extract(query)
            assert 1 <= len(keywords) <= 3


def test_fallback_returns_whole_query_when_nothing_qualifies():
    assert fallback_keywords("is it ok", 3) == ["is it ok"]
    assert fallback_keywords("然後 因為 所以", 3) == ["然後 因為 所以"]


def test_fallback_drops_short_tokens_and_stopwords():
    assert fallback_keywords("What are the latest sprint goals for mobile", 3) == [
        "latest",
        "sprint",
        "goals",
    ]
