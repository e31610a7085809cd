"""pagesearch - intelligent search over a Notion workspace

Simple CLI for running one search query.
"""

import argparse
import asyncio
import sys

from pagesearch.agents.orchestrator import SearchOrchestrator
from pagesearch.llm_client import get_client
from pagesearch.models.events import ProgressEvent


def print_progress(event: ProgressEvent) -> None:
    print(f"[{event.step}/{event.total_steps}] {event.message} ({event.percentage}%)")


async def run_search(query: str, model: str | None = None) -> int:
    """Run the search pipeline for the given query."""
    print(f"Query: {query}")
    print("-" * 50)

    completer = get_client(model) if model else None
    orchestrator = SearchOrchestrator(completer=completer)

    try:
        result = await orchestrator.run(query, print_progress)
    except Exception as e:
        print(f"\n[!] Error: {e}", file=sys.stderr)
        return 1

    metadata = result.metadata
    print(f"\n[*] Keywords: {', '.join(metadata.keywords)}")
    print(f"   Pages found: {metadata.total_pages_found}")
    print(f"   Pages read: {metadata.selected_pages}")
    print(f"   Runtime: {metadata.processing_time}ms")
    for source in metadata.sources:
        print(f"   - {source.title}: {source.url}")
    print(f"\n{'='*50}")
    print("ANSWER:")
    print(f"{'='*50}")
    print(result.response)
    return 0


def main():
    parser = argparse.ArgumentParser(description="pagesearch intelligent search")
    parser.add_argument("--query", "-q", required=True, help="Question to answer")
    parser.add_argument("--model", "-m", help="Model to use (default: from config)")

    args = parser.parse_args()

    sys.exit(asyncio.run(run_search(args.query, args.model)))


if __name__ == "__main__":
    main()
