from __future__ import annotations

from catalog_browser.domain.title import POSTER_UNAVAILABLE, TitleDetail
from catalog_browser.entrypoints.http.dtos.title import TitleDetailResponseDTO


def _split(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class TitleMapper:
    """Maps domain title detail to REST DTOs."""

    @staticmethod
    def to_response(title: TitleDetail) -> TitleDetailResponseDTO:
        """
        Converts domain TitleDetail to REST response DTO.

        Comma-separated upstream lists (genre, actors) become arrays and the
        poster sentinel becomes null.
        """
        return TitleDetailResponseDTO(
            id=title.id,
            title=title.title,
            year=title.year,
            kind=title.kind,
            poster_url=None if title.poster_url == POSTER_UNAVAILABLE else title.poster_url,
            genres=_split(title.genre),
            plot=title.plot,
            director=title.director,
            actors=_split(title.actors),
            runtime=title.runtime,
            rated=title.rated,
            rating=title.rating,
        )
