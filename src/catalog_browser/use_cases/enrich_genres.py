from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from catalog_browser.domain.errors import InvalidIdentifier, PartialEnrichmentLoss
from catalog_browser.domain.title import Page, ResultRecord, TitleDetail
from catalog_browser.infra.config import DEFAULT_ENRICH_CONCURRENCY, DEFAULT_TIMEOUT_SECONDS
from catalog_browser.ports.title_catalog import TitleCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EnrichmentResult:
    page: Page
    raw_count: int  # records on the page before filtering
    losses: tuple[PartialEnrichmentLoss, ...] = ()


class GenreEnricher:
    """
    Filter a fetched page by genre using one detail lookup per record.

    Lookups run concurrently and are joined before returning. Each lookup
    is isolated: a failed lookup drops that record from the page instead
    of failing the page (availability over completeness). Every dropped
    record is logged and reported as a PartialEnrichmentLoss.

    The returned page carries the post-filter record count as its
    total_available.
    """

    def __init__(
        self,
        title_catalog: TitleCatalog,
        max_concurrency: int = DEFAULT_ENRICH_CONCURRENCY,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._catalog = title_catalog
        self._max_concurrency = max_concurrency
        self._timeout_seconds = timeout_seconds

    async def execute(self, page: Page, genre: str) -> EnrichmentResult:
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _lookup(record: ResultRecord) -> TitleDetail | PartialEnrichmentLoss:
            async with semaphore:
                try:
                    if not record.id.strip():
                        raise InvalidIdentifier(record.id)
                    return await asyncio.wait_for(
                        self._catalog.get_detail(record.id),
                        timeout=self._timeout_seconds,
                    )
                except Exception as exc:
                    loss = PartialEnrichmentLoss(record.id, exc)
                    logger.warning(
                        "Genre lookup failed; dropping record",
                        extra={
                            "title_id": record.id,
                            "error_type": type(exc).__name__,
                            "error": str(exc),
                        },
                    )
                    return loss

        outcomes = await asyncio.gather(*(_lookup(record) for record in page.records))

        kept: list[ResultRecord] = []
        losses: list[PartialEnrichmentLoss] = []
        for record, outcome in zip(page.records, outcomes):
            if isinstance(outcome, PartialEnrichmentLoss):
                losses.append(outcome)
            elif outcome.matches_genre(genre):
                kept.append(record)

        return EnrichmentResult(
            page=Page(
                page_number=page.page_number,
                records=tuple(kept),
                total_available=len(kept),
            ),
            raw_count=len(page.records),
            losses=tuple(losses),
        )
