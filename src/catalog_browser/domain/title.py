from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum

from catalog_browser.domain.errors import ValidationError


# ==============================================================================
# Domain Exceptions
# ==============================================================================


class PagingValidationError(ValidationError):
    """Raised when paging parameters are invalid."""

    pass


class FilterValidationError(ValidationError):
    """Raised when filter parameters are invalid."""

    pass


POSTER_UNAVAILABLE = "unavailable"
EARLIEST_YEAR = 1888

_YEAR_PATTERN = re.compile(r"^\d{4}$")


class TitleKind(str, Enum):
    ANY = "any"
    MOVIE = "movie"
    SERIES = "series"


@dataclass(frozen=True, slots=True)
class Query:
    """
    Committed search text plus filter selections.

    Two queries are equivalent iff every field matches exactly; the query
    itself is the fingerprint used to decide whether results must reset.
    """

    text: str = ""
    kind: TitleKind = TitleKind.ANY
    year: str | None = None
    genre: str | None = None

    def validate(self) -> None:
        """
        Validate filter parameters.

        Raises:
            FilterValidationError: If filter parameters are invalid
        """
        if self.year is not None:
            if not _YEAR_PATTERN.match(self.year):
                raise FilterValidationError(
                    errors=[
                        {
                            "field": "year",
                            "message": "Must be a four-digit year",
                            "code": "INVALID_YEAR",
                        }
                    ]
                )
            latest = date.today().year + 1
            if not EARLIEST_YEAR <= int(self.year) <= latest:
                raise FilterValidationError(
                    errors=[
                        {
                            "field": "year",
                            "message": f"Must be between {EARLIEST_YEAR} and {latest}",
                            "code": "YEAR_OUT_OF_RANGE",
                        }
                    ]
                )
        if self.genre is not None and not self.genre.strip():
            raise FilterValidationError("genre must be non-empty when provided")

    @property
    def fingerprint(self) -> tuple[str, TitleKind, str | None, str | None]:
        return (self.text, self.kind, self.year, self.genre)


@dataclass(frozen=True, slots=True)
class ResultRecord:
    id: str
    title: str
    year: str
    poster_url: str
    kind: str

    @property
    def has_poster(self) -> bool:
        return self.poster_url != POSTER_UNAVAILABLE


@dataclass(frozen=True, slots=True)
class Page:
    page_number: int
    records: tuple[ResultRecord, ...]
    total_available: int

    def validate(self) -> None:
        """
        Validate page invariants.

        Raises:
            PagingValidationError: If page metadata is invalid
        """
        if self.page_number < 1:
            raise PagingValidationError("page_number must be >= 1")
        if self.total_available < 0:
            raise PagingValidationError("total_available must be >= 0")


@dataclass(frozen=True, slots=True)
class TitleDetail:
    id: str
    title: str
    year: str
    kind: str
    poster_url: str = POSTER_UNAVAILABLE
    genre: str = ""
    plot: str = ""
    director: str = ""
    actors: str = ""
    runtime: str = ""
    rated: str = ""
    rating: str = ""

    def matches_genre(self, genre: str) -> bool:
        return genre.strip().lower() in self.genre.lower()
