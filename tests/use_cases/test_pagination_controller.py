"""
Test suite for PaginationController.

Covers the load-state machine, reset on query change, near-end paging,
exhaustion, error handling and retry, genre filtering, and discarding of
results that arrive for a superseded query.
"""

from __future__ import annotations

import asyncio
import logging

import pytest

from catalog_browser.adapters.in_memory_title_catalog import InMemoryTitleCatalog
from catalog_browser.domain.browse_state import (
    TRANSPORT_ERROR_MESSAGE,
    BrowseSnapshot,
    LoadStatus,
)
from catalog_browser.domain.errors import NoMatchesError, TransportError, UpstreamDomainError
from catalog_browser.domain.title import Page, Query, ResultRecord, TitleDetail
from catalog_browser.ports.title_catalog import TitleCatalog
from catalog_browser.use_cases.enrich_genres import GenreEnricher
from catalog_browser.use_cases.fetch_page import PageFetcher
from catalog_browser.use_cases.pagination_controller import PaginationController

from tests.conftest import make_titles


def _controller(catalog: TitleCatalog, timeout_seconds: float = 5.0) -> PaginationController:
    return PaginationController(
        page_fetcher=PageFetcher(catalog, timeout_seconds=timeout_seconds),
        genre_enricher=GenreEnricher(catalog),
    )


def _ids(snapshot: BrowseSnapshot) -> list[str]:
    return [r.id for r in snapshot.aggregate]


def _record(record_id: str) -> ResultRecord:
    return ResultRecord(id=record_id, title=record_id, year="2000", poster_url="p", kind="movie")


class GatedCatalog(TitleCatalog):
    """Catalog whose searches block until the test releases them, per term."""

    def __init__(self, results: dict[str, list[str]]) -> None:
        self._results = results
        self._gates = {term: asyncio.Event() for term in results}
        self._errors: dict[str, Exception] = {}

    def release(self, term: str, error: Exception | None = None) -> None:
        if error is not None:
            self._errors[term] = error
        self._gates[term].set()

    async def search(self, query: Query, page_number: int) -> Page:
        await self._gates[query.text].wait()
        if query.text in self._errors:
            raise self._errors[query.text]
        ids = self._results[query.text]
        return Page(page_number, tuple(_record(i) for i in ids), len(ids))

    async def get_detail(self, title_id: str) -> TitleDetail:
        raise AssertionError("not used")


class OverlappingCatalog(TitleCatalog):
    """Upstream that repeats records across pages yet reports a fixed total."""

    def __init__(self, pages: dict[int, list[str]], total: int) -> None:
        self._pages = pages
        self._total = total

    async def search(self, query: Query, page_number: int) -> Page:
        if page_number not in self._pages:
            raise NoMatchesError("Movie not found!")
        ids = self._pages[page_number]
        return Page(page_number, tuple(_record(i) for i in ids), self._total)

    async def get_detail(self, title_id: str) -> TitleDetail:
        raise AssertionError("not used")


class FlakyCatalog(InMemoryTitleCatalog):
    """Fails the first ``failures`` searches with the given error."""

    def __init__(self, titles: list[TitleDetail], error: Exception, failures: int = 1) -> None:
        super().__init__(titles)
        self._error = error
        self._failures = failures

    async def search(self, query: Query, page_number: int) -> Page:
        if self._failures:
            self._failures -= 1
            raise self._error
        return await super().search(query, page_number)


# ==============================================================================
# Scenarios
# ==============================================================================


def test_first_page_with_more_available() -> None:
    """Query "batman": 10 of 45 loaded, more to come."""
    controller = _controller(InMemoryTitleCatalog(make_titles(45)))

    async def run() -> BrowseSnapshot:
        controller.submit_query(Query(text="batman"))
        await controller.wait_idle()
        return controller.snapshot

    snapshot = asyncio.run(run())

    assert snapshot.load_state.status is LoadStatus.READY
    assert snapshot.has_more is True
    assert len(snapshot.aggregate) == 10
    assert snapshot.total_available == 45
    assert snapshot.page == 1
    assert snapshot.summary == 'Found 45 results for "batman"'


def test_scrolling_to_the_end_exhausts_results() -> None:
    """Four near-end signals load the remaining 35 records."""
    catalog = InMemoryTitleCatalog(make_titles(45))
    controller = _controller(catalog)

    async def run() -> BrowseSnapshot:
        controller.submit_query(Query(text="batman"))
        await controller.wait_idle()
        for _ in range(4):
            assert controller.notify_near_end() is True
            await controller.wait_idle()
        return controller.snapshot

    snapshot = asyncio.run(run())

    assert len(snapshot.aggregate) == 45
    assert len(set(_ids(snapshot))) == 45
    assert snapshot.load_state.status is LoadStatus.EXHAUSTED
    assert snapshot.has_more is False
    assert [page for _, page in catalog.search_calls] == [1, 2, 3, 4, 5]


def test_overlapping_upstream_pages_are_absorbed_by_dedup() -> None:
    catalog = OverlappingCatalog(
        pages={1: ["a", "b", "c"], 2: ["c", "d", "e"], 3: ["e", "f"]},
        total=8,
    )
    controller = _controller(catalog)

    async def run() -> list[BrowseSnapshot]:
        seen = []
        controller.submit_query(Query(text="x"))
        await controller.wait_idle()
        while controller.notify_near_end():
            await controller.wait_idle()
            seen.append(controller.snapshot)
        return seen

    snapshots = asyncio.run(run())

    final = snapshots[-1]
    assert _ids(final) == ["a", "b", "c", "d", "e", "f"]
    assert final.load_state.status is LoadStatus.EXHAUSTED
    assert final.load_state.status is not LoadStatus.ERROR


def test_no_matches_is_exhausted_not_error() -> None:
    """Query "zzqqnonexistent": empty and exhausted, never an error."""
    controller = _controller(InMemoryTitleCatalog(make_titles(45)))

    async def run() -> BrowseSnapshot:
        controller.submit_query(Query(text="zzqqnonexistent"))
        await controller.wait_idle()
        return controller.snapshot

    snapshot = asyncio.run(run())

    assert snapshot.load_state.status is LoadStatus.EXHAUSTED
    assert snapshot.aggregate == ()
    assert snapshot.has_more is False
    assert snapshot.load_state.reason is None


def test_genre_filter_drops_record_whose_lookup_failed() -> None:
    """Query "drama" + genre "horror": one failing lookup only shrinks the page."""
    titles = make_titles(10, title="Drama", genre="Drama, Horror")
    catalog = InMemoryTitleCatalog(titles, failing_ids={titles[3].id})
    controller = _controller(catalog)

    async def run() -> BrowseSnapshot:
        controller.submit_query(Query(text="drama", genre="horror"))
        await controller.wait_idle()
        return controller.snapshot

    snapshot = asyncio.run(run())

    assert len(snapshot.aggregate) <= 9
    assert titles[3].id not in _ids(snapshot)
    assert snapshot.load_state.status is not LoadStatus.ERROR


# ==============================================================================
# Reset and staleness
# ==============================================================================


def test_query_change_clears_results_and_resets_cursor() -> None:
    catalog = InMemoryTitleCatalog(make_titles(30) + make_titles(5, title="Alien", prefix="al"))
    controller = _controller(catalog)
    snapshots: list[BrowseSnapshot] = []
    controller.subscribe(snapshots.append)

    async def run() -> None:
        controller.submit_query(Query(text="batman"))
        await controller.wait_idle()
        controller.notify_near_end()
        await controller.wait_idle()
        snapshots.clear()
        controller.submit_query(Query(text="alien"))
        await controller.wait_idle()

    asyncio.run(run())

    reset = snapshots[0]
    assert reset.load_state.status is LoadStatus.LOADING_FIRST_PAGE
    assert reset.aggregate == ()
    assert reset.page == 1
    assert _ids(snapshots[-1]) == [f"al{i:07d}" for i in range(1, 6)]
    assert snapshots[-1].load_state.status is LoadStatus.EXHAUSTED


def test_resubmitting_same_query_is_a_no_op() -> None:
    catalog = InMemoryTitleCatalog(make_titles(30))
    controller = _controller(catalog)

    async def run() -> bool:
        controller.submit_query(Query(text="batman"))
        await controller.wait_idle()
        controller.notify_near_end()
        await controller.wait_idle()
        changed = controller.submit_query(Query(text="batman"))
        await controller.wait_idle()
        return changed

    assert asyncio.run(run()) is False
    assert len(controller.snapshot.aggregate) == 20
    assert len(catalog.search_calls) == 2


def test_stale_success_is_discarded() -> None:
    async def run() -> BrowseSnapshot:
        catalog = GatedCatalog({"slow": ["s1", "s2", "s3"], "fast": ["f1", "f2"]})
        controller = _controller(catalog)

        controller.submit_query(Query(text="slow"))
        await asyncio.sleep(0)
        controller.submit_query(Query(text="fast"))
        catalog.release("fast")
        await asyncio.sleep(0.01)
        catalog.release("slow")
        await controller.wait_idle()
        return controller.snapshot

    snapshot = asyncio.run(run())

    assert _ids(snapshot) == ["f1", "f2"]
    assert snapshot.query == Query(text="fast")
    assert snapshot.load_state.status is LoadStatus.EXHAUSTED


def test_stale_failure_is_discarded() -> None:
    async def run() -> BrowseSnapshot:
        catalog = GatedCatalog({"slow": ["s1"], "fast": ["f1", "f2"]})
        controller = _controller(catalog)

        controller.submit_query(Query(text="slow"))
        await asyncio.sleep(0)
        controller.submit_query(Query(text="fast"))
        catalog.release("fast")
        await asyncio.sleep(0.01)
        catalog.release("slow", error=TransportError("late failure"))
        await controller.wait_idle()
        return controller.snapshot

    snapshot = asyncio.run(run())

    assert snapshot.load_state.status is LoadStatus.EXHAUSTED
    assert _ids(snapshot) == ["f1", "f2"]


def test_stale_result_does_not_notify_listeners() -> None:
    async def run() -> list[BrowseSnapshot]:
        catalog = GatedCatalog({"slow": ["s1"], "fast": ["f1"]})
        controller = _controller(catalog)
        controller.submit_query(Query(text="slow"))
        controller.submit_query(Query(text="fast"))
        catalog.release("fast")
        await asyncio.sleep(0.01)

        seen: list[BrowseSnapshot] = []
        controller.subscribe(seen.append)
        catalog.release("slow")
        await controller.wait_idle()
        return seen

    assert asyncio.run(run()) == []


# ==============================================================================
# Near-end signal
# ==============================================================================


def test_near_end_ignored_while_loading() -> None:
    async def run() -> bool:
        catalog = GatedCatalog({"x": ["a"]})
        controller = _controller(catalog)
        controller.submit_query(Query(text="x"))
        ignored = controller.notify_near_end()
        catalog.release("x")
        await controller.wait_idle()
        return ignored

    assert asyncio.run(run()) is False


def test_near_end_ignored_when_exhausted() -> None:
    catalog = InMemoryTitleCatalog(make_titles(4))
    controller = _controller(catalog)

    async def run() -> bool:
        controller.submit_query(Query(text="batman"))
        await controller.wait_idle()
        return controller.notify_near_end()

    assert asyncio.run(run()) is False
    assert len(catalog.search_calls) == 1


def test_near_end_before_any_query_is_ignored() -> None:
    controller = _controller(InMemoryTitleCatalog([]))

    assert controller.notify_near_end() is False
    assert controller.snapshot.load_state.status is LoadStatus.IDLE


def test_next_page_transitions_through_loading_next_page() -> None:
    controller = _controller(InMemoryTitleCatalog(make_titles(25)))
    statuses: list[LoadStatus] = []
    controller.subscribe(lambda s: statuses.append(s.load_state.status))

    async def run() -> None:
        controller.submit_query(Query(text="batman"))
        await controller.wait_idle()
        controller.notify_near_end()
        await controller.wait_idle()

    asyncio.run(run())

    assert statuses == [
        LoadStatus.LOADING_FIRST_PAGE,
        LoadStatus.READY,
        LoadStatus.LOADING_NEXT_PAGE,
        LoadStatus.READY,
    ]


# ==============================================================================
# Errors and retry
# ==============================================================================


def test_transport_failure_sets_retryable_error() -> None:
    catalog = FlakyCatalog(make_titles(15), TransportError("connection refused"))
    controller = _controller(catalog)

    async def run() -> BrowseSnapshot:
        controller.submit_query(Query(text="batman"))
        await controller.wait_idle()
        return controller.snapshot

    snapshot = asyncio.run(run())

    state = snapshot.load_state
    assert state.status is LoadStatus.ERROR
    assert state.reason == TRANSPORT_ERROR_MESSAGE
    assert state.error_kind == "transport"
    assert state.retryable is True
    assert snapshot.has_more is False
    assert snapshot.summary == ""


def test_domain_failure_is_not_retryable() -> None:
    catalog = FlakyCatalog(make_titles(15), UpstreamDomainError("Too many results."))
    controller = _controller(catalog)

    async def run() -> BrowseSnapshot:
        controller.submit_query(Query(text="batman"))
        await controller.wait_idle()
        return controller.snapshot

    state = asyncio.run(run()).load_state

    assert state.reason == "Too many results."
    assert state.error_kind == "domain"
    assert state.retryable is False


def test_error_is_stable_without_user_action() -> None:
    catalog = FlakyCatalog(make_titles(15), TransportError("down"))
    controller = _controller(catalog)

    async def run() -> bool:
        controller.submit_query(Query(text="batman"))
        await controller.wait_idle()
        ignored = controller.notify_near_end()
        await asyncio.sleep(0.01)
        return ignored

    assert asyncio.run(run()) is False
    assert controller.snapshot.load_state.status is LoadStatus.ERROR
    assert len(catalog.search_calls) == 0


def test_retry_reloads_failed_first_page() -> None:
    catalog = FlakyCatalog(make_titles(15), TransportError("down"))
    controller = _controller(catalog)

    async def run() -> BrowseSnapshot:
        controller.submit_query(Query(text="batman"))
        await controller.wait_idle()
        assert controller.retry() is True
        await controller.wait_idle()
        return controller.snapshot

    snapshot = asyncio.run(run())

    assert snapshot.load_state.status is LoadStatus.READY
    assert len(snapshot.aggregate) == 10


def test_failed_next_page_keeps_loaded_records_and_retries_same_page() -> None:
    titles = make_titles(25)

    class FailSecondPage(InMemoryTitleCatalog):
        failed = False

        async def search(self, query: Query, page_number: int) -> Page:
            if page_number == 2 and not self.failed:
                self.failed = True
                raise TransportError("blip")
            return await super().search(query, page_number)

    catalog = FailSecondPage(titles)
    controller = _controller(catalog)

    async def run() -> tuple[BrowseSnapshot, BrowseSnapshot]:
        controller.submit_query(Query(text="batman"))
        await controller.wait_idle()
        controller.notify_near_end()
        await controller.wait_idle()
        failed = controller.snapshot
        controller.retry()
        await controller.wait_idle()
        return failed, controller.snapshot

    failed, recovered = asyncio.run(run())

    assert failed.load_state.status is LoadStatus.ERROR
    assert len(failed.aggregate) == 10
    assert recovered.page == 2
    assert len(recovered.aggregate) == 20
    assert recovered.load_state.status is LoadStatus.READY


def test_retry_outside_error_is_ignored() -> None:
    controller = _controller(InMemoryTitleCatalog(make_titles(5)))

    async def run() -> bool:
        controller.submit_query(Query(text="batman"))
        await controller.wait_idle()
        return controller.retry()

    assert asyncio.run(run()) is False


def test_hung_request_ends_in_error_after_timeout() -> None:
    controller = _controller(InMemoryTitleCatalog(make_titles(5), latency=1.0), timeout_seconds=0.01)

    async def run() -> BrowseSnapshot:
        controller.submit_query(Query(text="batman"))
        await controller.wait_idle()
        return controller.snapshot

    state = asyncio.run(run()).load_state

    assert state.status is LoadStatus.ERROR
    assert state.error_kind == "transport"


def test_new_query_recovers_from_error() -> None:
    catalog = FlakyCatalog(make_titles(5), TransportError("down"))
    controller = _controller(catalog)

    async def run() -> BrowseSnapshot:
        controller.submit_query(Query(text="batman"))
        await controller.wait_idle()
        controller.submit_query(Query(text="batman 1"))
        await controller.wait_idle()
        return controller.snapshot

    snapshot = asyncio.run(run())

    assert snapshot.load_state.status is LoadStatus.EXHAUSTED
    assert _ids(snapshot) == ["tt0000001"]


# ==============================================================================
# Genre filtering and exhaustion
# ==============================================================================


def test_genre_browsing_continues_while_upstream_has_pages() -> None:
    """A page with no genre matches still leaves more upstream pages to scan."""
    titles = make_titles(10, title="Drama", genre="Drama") + make_titles(
        5, title="Drama", genre="Horror", prefix="hh"
    )
    controller = _controller(InMemoryTitleCatalog(titles))

    async def run() -> tuple[BrowseSnapshot, BrowseSnapshot]:
        controller.submit_query(Query(text="drama", genre="horror"))
        await controller.wait_idle()
        first = controller.snapshot
        controller.notify_near_end()
        await controller.wait_idle()
        return first, controller.snapshot

    first, second = asyncio.run(run())

    assert first.aggregate == ()
    assert first.has_more is True
    assert first.load_state.status is LoadStatus.READY
    assert len(second.aggregate) == 5
    assert second.total_available == 5
    assert second.load_state.status is LoadStatus.EXHAUSTED


def test_has_more_false_implies_everything_loaded() -> None:
    controller = _controller(InMemoryTitleCatalog(make_titles(33)))

    async def run() -> BrowseSnapshot:
        controller.submit_query(Query(text="batman"))
        await controller.wait_idle()
        while controller.notify_near_end():
            await controller.wait_idle()
        return controller.snapshot

    snapshot = asyncio.run(run())

    assert snapshot.has_more is False
    assert len(snapshot.aggregate) >= snapshot.total_available


def test_empty_query_browses_baseline_results() -> None:
    titles = make_titles(3, title="A movie")
    catalog = InMemoryTitleCatalog(titles)
    controller = _controller(catalog)

    async def run() -> BrowseSnapshot:
        controller.submit_query(Query())
        await controller.wait_idle()
        return controller.snapshot

    snapshot = asyncio.run(run())

    assert catalog.search_calls[0][0].text == "movie"
    assert len(snapshot.aggregate) == 3
    assert snapshot.query == Query()
    assert snapshot.summary == "Showing popular movies (3 available)"


def test_aclose_abandons_in_flight_request() -> None:
    async def run() -> BrowseSnapshot:
        catalog = GatedCatalog({"x": ["a"]})
        controller = _controller(catalog)
        controller.submit_query(Query(text="x"))
        await asyncio.sleep(0)
        await controller.aclose()
        return controller.snapshot

    snapshot = asyncio.run(run())

    assert snapshot.load_state.status is LoadStatus.LOADING_FIRST_PAGE
    assert snapshot.aggregate == ()


# ==============================================================================
# Robustness
# ==============================================================================


def test_failure_reaches_error_state_with_info_logging(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)
    controller = _controller(FlakyCatalog(make_titles(5), TransportError("connection refused")))

    async def run() -> BrowseSnapshot:
        controller.submit_query(Query(text="batman"))
        await controller.wait_idle()
        return controller.snapshot

    snapshot = asyncio.run(run())

    assert snapshot.load_state.status is LoadStatus.ERROR
    assert "Page load failed" in caplog.text


def test_genre_lookup_crash_only_drops_that_record() -> None:
    titles = make_titles(10, title="Drama", genre="Drama, Horror")

    class CrashingDetailCatalog(InMemoryTitleCatalog):
        async def get_detail(self, title_id: str) -> TitleDetail:
            if title_id == titles[2].id:
                raise RuntimeError("malformed detail payload")
            return await super().get_detail(title_id)

    controller = _controller(CrashingDetailCatalog(titles))

    async def run() -> BrowseSnapshot:
        controller.submit_query(Query(text="drama", genre="horror"))
        await controller.wait_idle()
        return controller.snapshot

    snapshot = asyncio.run(run())

    assert len(snapshot.aggregate) == 9
    assert titles[2].id not in _ids(snapshot)
    assert snapshot.load_state.status is LoadStatus.EXHAUSTED


def test_wait_idle_returns_when_requests_are_abandoned() -> None:
    async def run() -> bool:
        catalog = GatedCatalog({"x": ["a"]})
        controller = _controller(catalog)
        controller.submit_query(Query(text="x"))
        waiter = asyncio.ensure_future(controller.wait_idle())
        await asyncio.sleep(0)
        await controller.aclose()
        await waiter
        return waiter.cancelled()

    assert asyncio.run(run()) is False


def test_submit_without_event_loop_commits_nothing() -> None:
    catalog = InMemoryTitleCatalog(make_titles(5))
    controller = _controller(catalog)

    with pytest.raises(RuntimeError):
        controller.submit_query(Query(text="batman"))

    assert controller.snapshot.load_state.status is LoadStatus.IDLE
    assert controller.snapshot.query == Query()

    async def run() -> bool:
        changed = controller.submit_query(Query(text="batman"))
        await controller.wait_idle()
        return changed

    assert asyncio.run(run()) is True
    assert len(controller.snapshot.aggregate) == 5
