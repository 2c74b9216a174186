"""
Dependency injection for FastAPI routes.

Key principle: the upstream client and the session registry are
process-wide singletons (cached); use cases are cheap and built per request.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from catalog_browser.adapters.omdb_title_catalog import OmdbTitleCatalog
from catalog_browser.infra.config import Settings, load_settings
from catalog_browser.ports.title_catalog import TitleCatalog
from catalog_browser.use_cases.browse_sessions import BrowseSessionRegistry
from catalog_browser.use_cases.enrich_genres import GenreEnricher
from catalog_browser.use_cases.fetch_page import PageFetcher
from catalog_browser.use_cases.get_title_detail import GetTitleDetail
from catalog_browser.use_cases.pagination_controller import PaginationController


@lru_cache
def get_settings() -> Settings:
    """Settings are read from the environment once per process."""
    return load_settings()


@lru_cache
def get_title_catalog() -> TitleCatalog:
    """
    Shared upstream client.

    A single httpx AsyncClient is reused across requests for connection
    pooling; it is closed in the application lifespan.
    """
    return OmdbTitleCatalog.from_settings(get_settings())


def build_controller(title_catalog: TitleCatalog, settings: Settings) -> PaginationController:
    """Wire a fresh controller for one browse session."""
    return PaginationController(
        page_fetcher=PageFetcher(
            title_catalog,
            baseline_term=settings.baseline_term,
            timeout_seconds=settings.timeout_seconds,
        ),
        genre_enricher=GenreEnricher(
            title_catalog,
            max_concurrency=settings.enrich_concurrency,
            timeout_seconds=settings.timeout_seconds,
        ),
    )


@lru_cache
def get_session_registry() -> BrowseSessionRegistry:
    settings = get_settings()
    return BrowseSessionRegistry(
        controller_factory=lambda: build_controller(get_title_catalog(), settings),
        quiet_ms=settings.quiet_ms,
        max_sessions=settings.max_sessions,
        idle_ttl_seconds=settings.session_ttl_seconds,
    )


def get_title_detail_use_case(
    title_catalog: TitleCatalog = Depends(get_title_catalog),
) -> GetTitleDetail:
    """
    Factory function that returns a configured GetTitleDetail use case.

    Args:
        title_catalog: Upstream catalog (injected by FastAPI via Depends)

    Returns:
        GetTitleDetail: Configured use case instance
    """
    return GetTitleDetail(title_catalog=title_catalog)
