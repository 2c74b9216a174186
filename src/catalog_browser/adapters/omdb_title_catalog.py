"""OMDb implementation of TitleCatalog."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from catalog_browser.domain.errors import (
    NoMatchesError,
    NotFoundError,
    TransportError,
    UpstreamDomainError,
)
from catalog_browser.domain.title import (
    POSTER_UNAVAILABLE,
    Page,
    Query,
    ResultRecord,
    TitleDetail,
    TitleKind,
)
from catalog_browser.infra.config import Settings
from catalog_browser.ports.title_catalog import TitleCatalog

logger = logging.getLogger(__name__)

PAGE_SIZE = 10
MISSING_VALUE = "N/A"

# Upstream messages meaning "the request was fine, nothing matched"
_NO_MATCH_MARKERS = ("not found", "no results")
_UNKNOWN_ID_MARKERS = ("incorrect imdb id", "not found")


class OmdbTitleCatalog(TitleCatalog):
    """
    OMDb implementation of TitleCatalog.

    - One GET per search page (``s``/``page``/``type``/``y``)
    - One GET per detail lookup (``i``/``plot=full``)
    - ``Response: "False"`` payloads become UpstreamDomainError subclasses
    - Every httpx failure becomes TransportError

    The adapter owns its AsyncClient unless one is injected.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://www.omdbapi.com/",
        timeout_seconds: float = 8.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    @classmethod
    def from_settings(cls, settings: Settings) -> OmdbTitleCatalog:
        return cls(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout_seconds=settings.timeout_seconds,
        )

    async def __aenter__(self) -> OmdbTitleCatalog:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def search(self, query: Query, page_number: int) -> Page:
        params: dict[str, Any] = {"s": query.text.strip(), "page": page_number}
        if query.kind is not TitleKind.ANY:
            params["type"] = query.kind.value
        if query.year:
            params["y"] = query.year

        payload = await self._get(params)

        if payload.get("Response") != "True":
            message = str(payload.get("Error") or "No titles found")
            if any(marker in message.lower() for marker in _NO_MATCH_MARKERS):
                raise NoMatchesError(message, term=params["s"], page=page_number)
            raise UpstreamDomainError(message, term=params["s"], page=page_number)

        records = tuple(self._to_record(raw) for raw in payload.get("Search") or [])
        return Page(
            page_number=page_number,
            records=records,
            total_available=self._parse_total(payload.get("totalResults"), len(records)),
        )

    async def get_detail(self, title_id: str) -> TitleDetail:
        payload = await self._get({"i": title_id, "plot": "full"})

        if payload.get("Response") != "True":
            message = str(payload.get("Error") or "")
            if not message or any(m in message.lower() for m in _UNKNOWN_ID_MARKERS):
                raise NotFoundError(resource="Title", identifier=title_id)
            raise UpstreamDomainError(message, title_id=title_id)

        return TitleDetail(
            id=str(payload.get("imdbID") or title_id),
            title=str(payload.get("Title") or ""),
            year=str(payload.get("Year") or ""),
            kind=str(payload.get("Type") or ""),
            poster_url=self._poster(payload.get("Poster")),
            genre=self._text(payload.get("Genre")),
            plot=self._text(payload.get("Plot")),
            director=self._text(payload.get("Director")),
            actors=self._text(payload.get("Actors")),
            runtime=self._text(payload.get("Runtime")),
            rated=self._text(payload.get("Rated")),
            rating=self._text(payload.get("imdbRating")),
        )

    async def _get(self, params: dict[str, Any]) -> dict[str, Any]:
        """Perform one GET and return the decoded JSON object."""
        request_params = {"apikey": self._api_key, **params}
        try:
            response = await self._client.get(self._base_url, params=request_params)
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as exc:
            raise TransportError("Upstream request timed out", params=params) from exc
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"Upstream returned HTTP {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Upstream request failed: {exc}") from exc
        except ValueError as exc:
            raise TransportError("Upstream returned invalid JSON") from exc

        if not isinstance(payload, dict):
            raise TransportError("Upstream returned an unexpected payload")

        logger.debug(
            "Upstream call completed",
            extra={"params": params, "response": payload.get("Response")},
        )
        return payload

    @classmethod
    def _to_record(cls, raw: dict[str, Any]) -> ResultRecord:
        return ResultRecord(
            id=str(raw.get("imdbID") or ""),
            title=str(raw.get("Title") or ""),
            year=str(raw.get("Year") or ""),
            poster_url=cls._poster(raw.get("Poster")),
            kind=str(raw.get("Type") or ""),
        )

    @staticmethod
    def _poster(value: Any) -> str:
        if not value or value == MISSING_VALUE:
            return POSTER_UNAVAILABLE
        return str(value)

    @staticmethod
    def _text(value: Any) -> str:
        if not value or value == MISSING_VALUE:
            return ""
        return str(value)

    @staticmethod
    def _parse_total(value: Any, fallback: int) -> int:
        try:
            return max(int(str(value)), 0)
        except (TypeError, ValueError):
            return fallback
