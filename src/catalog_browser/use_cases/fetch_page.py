from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace

from catalog_browser.domain.errors import TransportError
from catalog_browser.domain.title import Page, PagingValidationError, Query
from catalog_browser.infra.config import DEFAULT_BASELINE_TERM, DEFAULT_TIMEOUT_SECONDS
from catalog_browser.ports.title_catalog import TitleCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FetchPageRequest:
    query: Query
    page_number: int


class PageFetcher:
    """
    Fetch one page of results for a query.

    Responsibilities:
    - Substitute the baseline term for an empty search text
    - Bound each upstream call with a timeout (timeout -> TransportError)
    - Delegate the call itself to the catalog port

    Idempotent: the same request always asks the upstream for the same
    logical page.
    """

    def __init__(
        self,
        title_catalog: TitleCatalog,
        baseline_term: str = DEFAULT_BASELINE_TERM,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._catalog = title_catalog
        self._baseline_term = baseline_term
        self._timeout_seconds = timeout_seconds

    def upstream_query(self, query: Query) -> Query:
        """Return the query as it is sent upstream."""
        text = query.text.strip()
        return replace(query, text=text or self._baseline_term)

    async def execute(self, request: FetchPageRequest) -> Page:
        """
        Execute page fetch.

        Args:
            request: Query and 1-based page number

        Returns:
            The fetched page

        Raises:
            PagingValidationError: If page_number < 1
            TransportError: On network failure or timeout
            UpstreamDomainError: If the upstream reports a failure
        """
        if request.page_number < 1:
            raise PagingValidationError("page_number must be >= 1")

        upstream_query = self.upstream_query(request.query)
        logger.debug(
            "Fetching page",
            extra={"term": upstream_query.text, "page": request.page_number},
        )

        try:
            return await asyncio.wait_for(
                self._catalog.search(upstream_query, request.page_number),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise TransportError(
                "Upstream request timed out",
                page=request.page_number,
                timeout_seconds=self._timeout_seconds,
            ) from exc
