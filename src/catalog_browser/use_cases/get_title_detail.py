"""Get title detail use case."""

from __future__ import annotations

from dataclasses import dataclass

from catalog_browser.domain.errors import InvalidIdentifier
from catalog_browser.domain.title import TitleDetail
from catalog_browser.ports.title_catalog import TitleCatalog


@dataclass(frozen=True, slots=True)
class GetTitleDetailRequest:
    """Request to get a title by ID."""

    title_id: str


@dataclass(frozen=True, slots=True)
class GetTitleDetailResponse:
    """Response containing the requested title."""

    title: TitleDetail


class GetTitleDetail:
    """
    Use case for retrieving full metadata of a single title.

    Responsibilities:
    - Reject blank ids before any network call
    - Delegate to the catalog port for the lookup
    - Let NotFoundError / upstream errors propagate to the caller
    """

    def __init__(self, title_catalog: TitleCatalog) -> None:
        """
        Initialize use case with dependencies.

        Args:
            title_catalog: Port for upstream title data
        """
        self._catalog = title_catalog

    async def execute(self, request: GetTitleDetailRequest) -> GetTitleDetailResponse:
        """
        Execute the get title detail use case.

        Args:
            request: Request containing title_id

        Returns:
            GetTitleDetailResponse with the title

        Raises:
            InvalidIdentifier: If title_id is empty or whitespace
            NotFoundError: If the upstream does not know the title
            TransportError: On network failure
        """
        title_id = (request.title_id or "").strip()
        if not title_id:
            raise InvalidIdentifier(request.title_id)

        title = await self._catalog.get_detail(title_id)

        return GetTitleDetailResponse(title=title)
