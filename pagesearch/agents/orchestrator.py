from __future__ import annotations

import inspect
import logging

from pagesearch.agents.content_collector import ContentCollector
from pagesearch.agents.keyword_extractor import KeywordExtractor
from pagesearch.agents.page_selector import PageSelector
from pagesearch.agents.response_synthesizer import ResponseSynthesizer
from pagesearch.models.events import ProgressEvent, SearchStage
from pagesearch.models.interfaces import PageSource, ProgressCallback, TextCompleter
from pagesearch.models.pages import SearchContext, SearchMetadata, SearchResult, Source
from pagesearch.services import logger as log_service
from pagesearch.services import streaming
from pagesearch.services.search_executor import FanOutSearcher


class SearchOrchestrator:
    """Orchestrates the intelligent search pipeline.

    Flow:
      1. ANALYZE   extract keywords from the question
      2. SEARCH    fan keywords out across page search, dedup by page id
      3. SELECT    rerank candidates down to a few pages
      4. COLLECT   read the selected pages into a content tree
      5. GENERATE  write the cited answer
      6. DONE

    One progress event is emitted on entering each stage. Stages never
    overlap and never repeat; an exception that a stage does not absorb
    aborts the run before DONE.
    """

    def __init__(
        self,
        source: PageSource | None = None,
        completer: TextCompleter | None = None,
        *,
        keyword_extractor: KeywordExtractor | None = None,
        searcher: FanOutSearcher | None = None,
        selector: PageSelector | None = None,
        collector: ContentCollector | None = None,
        synthesizer: ResponseSynthesizer | None = None,
    ):
        self.keyword_extractor = keyword_extractor or KeywordExtractor(completer)
        self.searcher = searcher or FanOutSearcher(source)
        self.selector = selector or PageSelector(completer)
        self.collector = collector or ContentCollector(source)
        self.synthesizer = synthesizer or ResponseSynthesizer(completer)

    async def _enter(
        self,
        context: SearchContext,
        stage: SearchStage,
        callback: ProgressCallback | None,
    ) -> None:
        if stage.value != context.current_step + 1:
            raise RuntimeError(
                f"Invalid stage transition {context.current_step} -> {stage.value}"
            )
        context.current_step = stage.value
        event = streaming.stage_progress(stage, total_steps=context.total_steps)
        log_service.log_search_step(
            query=context.query,
            step=event.step,
            total_steps=event.total_steps,
            message=event.message,
            percentage=event.percentage,
        )
        await self._deliver(callback, event)

    @staticmethod
    async def _deliver(callback: ProgressCallback | None, event: ProgressEvent) -> None:
        if callback is None:
            return
        try:
            outcome = callback(event)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            # The listener may already be gone; the run carries on regardless.
            log_service.log_event(
                event_type="progress_delivery_failed",
                message="Failed to deliver progress event",
                level=logging.DEBUG,
                step=event.step,
                error=str(e),
            )

    async def run(self, query: str, progress_callback: ProgressCallback | None = None) -> SearchResult:
        context = SearchContext(query=query, total_steps=len(SearchStage))
        try:
            await self._enter(context, SearchStage.ANALYZE, progress_callback)
            keywords = await self.keyword_extractor.extract(query)

            await self._enter(context, SearchStage.SEARCH, progress_callback)
            all_pages = await self.searcher.search(keywords)

            await self._enter(context, SearchStage.SELECT, progress_callback)
            selected_pages = await self.selector.select(all_pages, query)

            await self._enter(context, SearchStage.COLLECT, progress_callback)
            content_tree = await self.collector.collect(selected_pages)

            await self._enter(context, SearchStage.GENERATE, progress_callback)
            response = await self.synthesizer.generate(query, content_tree)

            await self._enter(context, SearchStage.DONE, progress_callback)
        except Exception as e:
            log_service.log_event(
                event_type="search_failed",
                message="Intelligent search failed",
                level=logging.ERROR,
                query=query[:100],
                step=context.current_step,
                error=str(e),
            )
            raise

        metadata = SearchMetadata(
            keywords=keywords,
            total_pages_found=len(all_pages),
            selected_pages=len(selected_pages),
            processing_time=context.elapsed_ms(),
            sources=[Source(title=page.title, id=page.id, url=page.url) for page in selected_pages],
        )
        log_service.log_event(
            event_type="pipeline_complete",
            message="Intelligent search finished",
            query=query[:100],
            processing_time_ms=metadata.processing_time,
            failed_pages=sum(1 for node in content_tree if node.failed),
        )
        return SearchResult(response=response, metadata=metadata)
