import os
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI

from catalog_browser.adapters.omdb_title_catalog import OmdbTitleCatalog
from catalog_browser.entrypoints.http.dependencies import get_session_registry, get_title_catalog
from catalog_browser.entrypoints.http.exception_handlers import register_exception_handlers
from catalog_browser.entrypoints.http.routes.health import router as health_router
from catalog_browser.entrypoints.http.routes.sessions import router as sessions_router
from catalog_browser.entrypoints.http.routes.titles import router as titles_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    # Only tear down singletons that were actually created
    if get_session_registry.cache_info().currsize:
        await get_session_registry().close_all()
    if get_title_catalog.cache_info().currsize:
        catalog = get_title_catalog()
        if isinstance(catalog, OmdbTitleCatalog):
            await catalog.aclose()


def build_app() -> FastAPI:
    app = FastAPI(
        title="Catalog Browser API",
        description="""
        Incremental browsing of a remote title catalog.

        ## Features
        - Free-text search with type, year and genre filters
        - Scroll-driven pagination through browse sessions
        - Title details

        ## Sessions
        Open a session, submit a query, then signal near-end to load more.
        Every response is a snapshot of records plus load state.

        ## Error Handling
        All errors return structured JSON responses with error codes.
        See the error response schemas in the API documentation.
        """,
        version="0.1.0",
        docs_url="/docs",  # Swagger UI
        redoc_url="/redoc",  # ReDoc alternative
        openapi_url="/openapi.json",  # OpenAPI schema
        lifespan=lifespan,
    )

    # Register global exception handlers
    register_exception_handlers(app)

    # Register routers
    app.include_router(health_router)
    app.include_router(sessions_router, prefix="/v1")
    app.include_router(titles_router, prefix="/v1")

    return app


app = build_app()


def run() -> None:
    """Serve the API with uvicorn (``catalog-browser-api`` console script)."""
    uvicorn.run(
        "catalog_browser.entrypoints.http.app:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )
