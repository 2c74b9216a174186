from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from catalog_browser.domain.errors import UpstreamError
from catalog_browser.domain.title import Query, ResultRecord, TitleKind


TRANSPORT_ERROR_MESSAGE = "Unable to load titles. Please check your connection."
NO_MATCHES_MESSAGE = "No titles found"


class LoadStatus(str, Enum):
    IDLE = "idle"
    LOADING_FIRST_PAGE = "loading_first_page"
    LOADING_NEXT_PAGE = "loading_next_page"
    READY = "ready"  # idle with data, more pages may follow
    ERROR = "error"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True, slots=True)
class LoadState:
    status: LoadStatus = LoadStatus.IDLE
    reason: str | None = None
    error_kind: str | None = None
    retryable: bool = False

    @classmethod
    def idle(cls) -> LoadState:
        return cls(LoadStatus.IDLE)

    @classmethod
    def loading(cls, page_number: int) -> LoadState:
        if page_number == 1:
            return cls(LoadStatus.LOADING_FIRST_PAGE)
        return cls(LoadStatus.LOADING_NEXT_PAGE)

    @classmethod
    def ready(cls) -> LoadState:
        return cls(LoadStatus.READY)

    @classmethod
    def exhausted(cls) -> LoadState:
        return cls(LoadStatus.EXHAUSTED)

    @classmethod
    def failed(cls, error: UpstreamError) -> LoadState:
        """Build an error state with a message fit for the user."""
        if error.retryable:
            reason = TRANSPORT_ERROR_MESSAGE
        else:
            reason = error.message or NO_MATCHES_MESSAGE
        return cls(
            LoadStatus.ERROR,
            reason=reason,
            error_kind=error.kind,
            retryable=error.retryable,
        )

    @property
    def is_loading(self) -> bool:
        return self.status in (LoadStatus.LOADING_FIRST_PAGE, LoadStatus.LOADING_NEXT_PAGE)

    @property
    def is_terminal(self) -> bool:
        return self.status in (LoadStatus.ERROR, LoadStatus.EXHAUSTED)


@dataclass(frozen=True, slots=True)
class BrowseSnapshot:
    """Read-only, point-in-time view handed to the presentation layer."""

    query: Query
    aggregate: tuple[ResultRecord, ...]
    load_state: LoadState
    has_more: bool
    page: int
    total_available: int

    @property
    def summary(self) -> str:
        if self.load_state.status is LoadStatus.ERROR or not self.aggregate:
            return ""
        return describe_results(self.query, self.total_available)


def describe_results(query: Query, total_available: int) -> str:
    """
    Human summary of the current result set.

    Examples:
        Found 45 results for "batman"
        Found 3 movies for "alien" from 1979
        Showing tv series from 2019 (120 available)
        Showing popular movies (120 available)
    """
    text = query.text.strip()
    total = f"{total_available:,}"
    if query.kind is TitleKind.MOVIE:
        kind_label = "movies"
    elif query.kind is TitleKind.SERIES:
        kind_label = "tv series"
    else:
        kind_label = None
    year_text = f" from {query.year}" if query.year else ""

    if text:
        return f'Found {total} {kind_label or "results"} for "{text}"{year_text}'
    if kind_label or query.year:
        return f"Showing {kind_label or 'movies'}{year_text} ({total} available)"
    return f"Showing popular movies ({total} available)"
