from __future__ import annotations

from catalog_browser.domain.title import TitleDetail


def make_titles(
    count: int,
    title: str = "Batman",
    genre: str = "Action",
    kind: str = "movie",
    year: str = "2005",
    prefix: str = "tt",
) -> list[TitleDetail]:
    """Build ``count`` distinct titles sharing one search-matching name."""
    return [
        TitleDetail(
            id=f"{prefix}{i:07d}",
            title=f"{title} {i}",
            year=year,
            kind=kind,
            poster_url=f"https://img.example/{prefix}{i}.jpg",
            genre=genre,
        )
        for i in range(1, count + 1)
    ]
