from __future__ import annotations

import pytest

from pagesearch.services.prompt_store import render_prompt


def test_render_prompt_substitutes_template_values():
    prompt = render_prompt(
        "keywords.extract",
        query="What is the Q3 project status?",
        max_keywords=3,
    )
    assert "What is the Q3 project status?" in prompt
    assert "at most 3 keywords" in prompt


def test_render_prompt_renders_candidate_line():
    line = render_prompt(
        "selector.candidate",
        index=0,
        title="Q3 Roadmap",
        page_id="abc",
        last_edited_time="2024-07-01",
    )
    assert line.startswith("[0] Title: Q3 Roadmap")
    assert "ID: abc" in line


def test_render_prompt_raises_for_unknown_key():
    with pytest.raises(KeyError):
        render_prompt("missing.prompt.key")


def test_render_prompt_raises_for_missing_value():
    with pytest.raises(KeyError, match="max_keywords"):
        render_prompt("keywords.extract", query="q")
