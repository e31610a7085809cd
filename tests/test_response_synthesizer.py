from __future__ import annotations

import pytest

from pagesearch.agents.response_synthesizer import ResponseSynthesizer, build_sources_block
from pagesearch.models.pages import PageContent
from conftest import FakeCompleter


def _node(n: int, *, content: str = "", depth: int = 1, children=None, error=None) -> PageContent:
    return PageContent(
        id=f"page-{n}",
        title=f"Page {n}",
        url=f"https://www.notion.so/page-{n}",
        content=content or f"Body {n}",
        depth=depth,
        children=children or [],
        error=error,
    )


@pytest.mark.asyncio
async def test_generate_appends_sources_for_top_level_nodes():
    completer = FakeCompleter(answer="  The launch is on track.  ")
    tree = [_node(1), _node(2, children=[_node(3, depth=2)]), _node(4, content="unavailable", error="boom")]

    answer = await ResponseSynthesizer(completer).generate("launch status", tree)

    assert answer.startswith("The launch is on track.")
    assert answer.endswith(
        "---\n**Sources:**\n"
        "- [Page 1](https://www.notion.so/page-1)\n"
        "- [Page 2](https://www.notion.so/page-2)\n"
        "- [Page 4](https://www.notion.so/page-4)"
    )
    assert "page-3)" not in answer


@pytest.mark.asyncio
async def test_sources_present_even_when_model_returns_nothing():
    answer = await ResponseSynthesizer(FakeCompleter(answer="")).generate("q", [_node(1)])

    assert answer.strip().endswith("- [Page 1](https://www.notion.so/page-1)")


@pytest.mark.asyncio
async def test_generate_propagates_completion_failure():
    synthesizer = ResponseSynthesizer(FakeCompleter(answer=RuntimeError("model down")))

    with pytest.raises(RuntimeError, match="model down"):
        await synthesizer.generate("q", [_node(1)])


@pytest.mark.asyncio
async def test_prompt_flattens_tree_with_depth_and_child_count():
    completer = FakeCompleter(answer="ok")
    tree = [_node(1, content="Parent body", children=[_node(2, content="Child body", depth=2)])]

    await ResponseSynthesizer(completer).generate("What changed?", tree)

    prompt = completer.calls("answer")[0]
    assert '"What changed?"' in prompt
    assert "Title: Page 1\nLevel: 1\nContent: Parent body\nChild pages: 1" in prompt
    assert "Title: Page 2\nLevel: 2\nContent: Child body" in prompt
    assert "say so plainly" in prompt


def test_context_is_clipped_to_budget():
    synthesizer = ResponseSynthesizer(context_char_budget=1000)
    tree = [_node(1, content="x" * 5000), _node(2, content="y" * 50)]

    context = synthesizer.build_context(tree)

    assert "x" * 498 not in context
    assert "x" * 497 + "..." in context
    assert "y" * 50 in context


def test_build_sources_block_for_empty_tree():
    assert build_sources_block([]) == "---\n**Sources:**"


def test_node_content_never_exceeds_budget_with_many_nodes():
    synthesizer = ResponseSynthesizer(context_char_budget=1000)
    tree = [_node(n, content=chr(ord("a") + n) * 400) for n in range(10)]

    context = synthesizer.build_context(tree)

    contents = [line[len("Content: "):] for line in context.splitlines() if line.startswith("Content: ")]
    assert len(contents) == 10
    assert sum(len(content) for content in contents) <= 1000
    assert all(content.endswith("...") for content in contents)
