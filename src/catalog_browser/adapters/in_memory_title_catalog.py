from __future__ import annotations

import asyncio

from catalog_browser.domain.errors import NoMatchesError, NotFoundError, TransportError
from catalog_browser.domain.title import Page, Query, ResultRecord, TitleDetail, TitleKind
from catalog_browser.ports.title_catalog import TitleCatalog


class InMemoryTitleCatalog(TitleCatalog):
    """
    Canonical contract implementation for tests.

    - Stores titles in insertion order
    - Matches the search term as a case-insensitive substring of the title
    - Applies kind and exact-year filters with AND semantics
    - Serves fixed-size pages and reports the total before paging
    - Raises NoMatchesError when a search matches nothing (or the page is
      past the end), like the real upstream does
    - ``failing_ids`` makes get_detail raise TransportError for those ids
    - ``latency`` delays every call to let tests interleave requests
    """

    def __init__(
        self,
        titles: list[TitleDetail],
        page_size: int = 10,
        failing_ids: set[str] | None = None,
        latency: float = 0.0,
    ) -> None:
        self._titles = titles
        self._page_size = page_size
        self._failing_ids = failing_ids or set()
        self._latency = latency
        self.search_calls: list[tuple[Query, int]] = []
        self.detail_calls: list[str] = []

    async def search(self, query: Query, page_number: int) -> Page:
        self.search_calls.append((query, page_number))
        if self._latency:
            await asyncio.sleep(self._latency)

        matches = [title for title in self._titles if self._matches(title, query)]
        total_available = len(matches)  # Count BEFORE paging

        start = (page_number - 1) * self._page_size
        end = start + self._page_size
        page_titles = matches[start:end]

        if not page_titles:
            raise NoMatchesError("Movie not found!", term=query.text, page=page_number)

        return Page(
            page_number=page_number,
            records=tuple(title_summary(title) for title in page_titles),
            total_available=total_available,
        )

    async def get_detail(self, title_id: str) -> TitleDetail:
        self.detail_calls.append(title_id)
        if self._latency:
            await asyncio.sleep(self._latency)

        if title_id in self._failing_ids:
            raise TransportError("Simulated detail failure", title_id=title_id)
        for title in self._titles:
            if title.id == title_id:
                return title
        raise NotFoundError(resource="Title", identifier=title_id)

    def _matches(self, title: TitleDetail, query: Query) -> bool:
        if query.text.strip().lower() not in title.title.lower():
            return False
        if query.kind is not TitleKind.ANY and title.kind != query.kind.value:
            return False
        if query.year and title.year != query.year:
            return False
        return True


def title_summary(title: TitleDetail) -> ResultRecord:
    """Project a detail record onto the summary shape search returns."""
    return ResultRecord(
        id=title.id,
        title=title.title,
        year=title.year,
        poster_url=title.poster_url,
        kind=title.kind,
    )
