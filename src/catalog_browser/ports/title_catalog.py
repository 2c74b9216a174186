from __future__ import annotations

from abc import ABC, abstractmethod

from catalog_browser.domain.title import Page, Query, TitleDetail


class TitleCatalog(ABC):
    """
    Port for the upstream title catalog.

    Implementations perform exactly one upstream call per method invocation
    and translate every failure into the domain error taxonomy.

    Contract (Preconditions):
        - query.text has already been substituted with the baseline term
          when empty (PageFetcher responsibility)
        - page_number is >= 1
        - title_id is non-empty (GetTitleDetail / GenreEnricher responsibility)

    Contract (Postconditions):
        - search() never returns a page whose page_number differs from the request
        - transport failures raise TransportError
        - upstream-reported failures raise UpstreamDomainError (NoMatchesError
          when the upstream says nothing matched)
    """

    @abstractmethod
    async def search(self, query: Query, page_number: int) -> Page:
        """
        Fetch one page of summary records.

        Only ``text``, ``kind`` and ``year`` are sent upstream; genre is not
        a search parameter.

        Args:
            query: Pre-validated query with a non-empty search term
            page_number: 1-based page number

        Returns:
            Page of records plus the upstream total-count hint
        """
        ...

    @abstractmethod
    async def get_detail(self, title_id: str) -> TitleDetail:
        """
        Fetch full metadata for one title.

        Raises:
            NotFoundError: If the upstream does not know the id
            TransportError: On network failure
            UpstreamDomainError: On any other upstream-reported failure
        """
        ...
