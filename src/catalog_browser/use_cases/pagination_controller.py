"""Pagination controller.

State machine that turns committed queries and near-end signals into a
sequence of page fetches, and owns the load state and page cursor.

Lifecycle:
    IDLE -> LOADING_FIRST_PAGE -> READY | EXHAUSTED | ERROR
    READY -(near end)-> LOADING_NEXT_PAGE -> READY | EXHAUSTED | ERROR
    ERROR -(retry)-> LOADING_FIRST_PAGE | LOADING_NEXT_PAGE

EXHAUSTED and ERROR are stable until the next query change (or an
explicit retry out of ERROR).

Every outgoing request is tagged with a monotonically increasing sequence
number. A completion whose number is no longer current belongs to a
superseded query and is discarded without touching state.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from catalog_browser.domain.browse_state import BrowseSnapshot, LoadState, LoadStatus
from catalog_browser.domain.errors import NoMatchesError, TransportError, UpstreamError
from catalog_browser.domain.title import Page, Query, ResultRecord
from catalog_browser.use_cases.aggregate_results import ResultAggregator
from catalog_browser.use_cases.enrich_genres import GenreEnricher
from catalog_browser.use_cases.fetch_page import FetchPageRequest, PageFetcher
from catalog_browser.use_cases.query_state import QueryState

logger = logging.getLogger(__name__)

StateListener = Callable[[BrowseSnapshot], None]


class PaginationController:
    def __init__(
        self,
        page_fetcher: PageFetcher,
        genre_enricher: GenreEnricher | None = None,
        aggregator: ResultAggregator | None = None,
        query_state: QueryState | None = None,
    ) -> None:
        self._fetcher = page_fetcher
        self._enricher = genre_enricher
        self._aggregator = aggregator or ResultAggregator()
        self._query_state = query_state or QueryState()
        self._query_state.subscribe(self._on_fingerprint_changed)

        self._listeners: list[StateListener] = []
        self._tasks: set[asyncio.Task[None]] = set()

        self._sequence = 0
        self._cursor = 0
        self._aggregate: tuple[ResultRecord, ...] = ()
        self._load_state = LoadState.idle()
        self._has_more = False
        self._total_available = 0
        # Genre browsing decides exhaustion on raw upstream consumption
        self._upstream_total = 0
        self._raw_seen = 0

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> BrowseSnapshot:
        return BrowseSnapshot(
            query=self._query_state.current or Query(),
            aggregate=self._aggregate,
            load_state=self._load_state,
            has_more=self._has_more,
            page=self._cursor,
            total_available=self._total_available,
        )

    @property
    def load_state(self) -> LoadState:
        return self._load_state

    def subscribe(self, listener: StateListener) -> None:
        """Register an ``on_state_change`` callback fired after every transition."""
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def submit_query(self, query: Query) -> bool:
        """
        Commit user input.

        Returns:
            True if the query differed from the current one and a reload started

        Raises:
            FilterValidationError: If the query's filters are invalid
            RuntimeError: If called outside a running event loop (nothing is committed)
        """
        asyncio.get_running_loop()  # fetches are scheduled on it
        return self._query_state.set_query(query)

    def notify_near_end(self) -> bool:
        """
        Request the next page because the last visible item came into view.

        Ignored unless results are idle with more pages available.

        Returns:
            True if a next-page fetch was issued
        """
        if self._load_state.status is not LoadStatus.READY or not self._has_more:
            logger.debug(
                "Near-end signal ignored",
                extra={"status": self._load_state.status.value, "has_more": self._has_more},
            )
            return False

        asyncio.get_running_loop()
        self._cursor += 1
        self._transition(LoadState.loading(self._cursor))
        self._issue(self._cursor)
        return True

    def retry(self) -> bool:
        """
        Re-issue the failed page for the current query.

        Returns:
            True if a fetch was issued (only possible from ERROR)
        """
        if self._load_state.status is not LoadStatus.ERROR:
            return False

        asyncio.get_running_loop()
        logger.info("Retrying page", extra={"page": self._cursor})
        self._transition(LoadState.loading(self._cursor))
        self._issue(self._cursor)
        return True

    async def wait_idle(self) -> None:
        """
        Wait until every in-flight request has completed (or been discarded).

        Requests abandoned by aclose() count as completed; only cancelling
        the waiter itself interrupts the wait.
        """
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        """Abandon in-flight requests; their results can no longer apply."""
        self._sequence += 1
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _on_fingerprint_changed(self, query: Query) -> None:
        logger.info(
            "Query changed; resetting results",
            extra={
                "text": query.text,
                "kind": query.kind.value,
                "year": query.year,
                "genre": query.genre,
            },
        )
        self._aggregate = ()
        self._cursor = 1
        self._has_more = False
        self._total_available = 0
        self._upstream_total = 0
        self._raw_seen = 0
        self._transition(LoadState.loading(1))
        self._issue(1)

    def _issue(self, page_number: int) -> None:
        self._sequence += 1
        sequence = self._sequence
        query = self._query_state.current or Query()
        task = asyncio.get_running_loop().create_task(
            self._load(sequence, query, page_number)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _load(self, sequence: int, query: Query, page_number: int) -> None:
        try:
            page = await self._fetcher.execute(FetchPageRequest(query, page_number))
            raw_count = len(page.records)
            upstream_total = page.total_available
            if query.genre and self._enricher is not None:
                enriched = await self._enricher.execute(page, query.genre)
                page = enriched.page
                raw_count = enriched.raw_count
        except NoMatchesError:
            if self._is_stale(sequence, page_number):
                return
            self._apply_no_matches(page_number)
        except UpstreamError as exc:
            if self._is_stale(sequence, page_number):
                return
            self._apply_failure(exc, page_number)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error(
                "Unexpected error while loading page",
                exc_info=exc,
                extra={"page": page_number, "error_type": type(exc).__name__},
            )
            if self._is_stale(sequence, page_number):
                return
            self._apply_failure(TransportError("Unexpected error while loading"), page_number)
        else:
            if self._is_stale(sequence, page_number):
                return
            self._apply_page(page, raw_count, upstream_total, filtered=bool(query.genre))

    def _is_stale(self, sequence: int, page_number: int) -> bool:
        if sequence == self._sequence:
            return False
        logger.debug(
            "Discarding stale result",
            extra={"sequence": sequence, "current": self._sequence, "page": page_number},
        )
        return True

    def _apply_page(
        self, page: Page, raw_count: int, upstream_total: int, filtered: bool
    ) -> None:
        self._aggregate = self._aggregator.merge(self._aggregate, page)

        if filtered:
            self._upstream_total = upstream_total
            self._raw_seen += raw_count
            self._has_more = raw_count > 0 and self._raw_seen < self._upstream_total
            self._total_available = len(self._aggregate)
        else:
            self._total_available = page.total_available
            self._has_more = raw_count > 0 and len(self._aggregate) < page.total_available

        logger.debug(
            "Page merged",
            extra={
                "page": page.page_number,
                "records": len(page.records),
                "aggregate": len(self._aggregate),
                "has_more": self._has_more,
            },
        )
        self._transition(LoadState.ready() if self._has_more else LoadState.exhausted())

    def _apply_no_matches(self, page_number: int) -> None:
        if page_number == 1:
            self._aggregate = ()
            self._total_available = 0
        self._has_more = False
        self._transition(LoadState.exhausted())

    def _apply_failure(self, error: UpstreamError, page_number: int) -> None:
        logger.info(
            "Page load failed",
            extra={
                "page": page_number,
                "error_code": error.error_code,
                "error_message": error.message,
            },
        )
        self._has_more = False
        self._transition(LoadState.failed(error))

    def _transition(self, state: LoadState) -> None:
        self._load_state = state
        snapshot = self.snapshot
        for listener in list(self._listeners):
            listener(snapshot)
