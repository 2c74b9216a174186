from __future__ import annotations

from typing import Callable

from catalog_browser.domain.title import Query

FingerprintListener = Callable[[Query], None]


class QueryState:
    """
    Owns the current committed query.

    ``set_query`` compares the new query to the current one by value and,
    when they differ, notifies every listener synchronously before
    returning. Resubmitting an equal query is a no-op. Nothing is
    committed until the first call, so even the empty baseline query
    counts as a change the first time.
    """

    def __init__(self) -> None:
        self._current: Query | None = None
        self._listeners: list[FingerprintListener] = []

    @property
    def current(self) -> Query | None:
        return self._current

    def subscribe(self, listener: FingerprintListener) -> None:
        self._listeners.append(listener)

    def set_query(self, query: Query) -> bool:
        """
        Commit a query.

        Raises:
            FilterValidationError: If the query's filters are invalid

        Returns:
            True if the fingerprint changed and listeners were notified
        """
        query.validate()

        if query == self._current:
            return False

        self._current = query
        for listener in list(self._listeners):
            listener(query)
        return True
