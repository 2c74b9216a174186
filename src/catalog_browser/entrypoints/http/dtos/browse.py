from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class QueryRequestDTO(BaseModel):
    """Committed search text plus filters for a browse session."""

    text: str = Field(
        default="",
        description="Free-text search. Empty means popular/baseline results",
        examples=["batman"],
        max_length=200,
    )
    type: Literal["any", "movie", "series"] = Field(
        default="any",
        description="Content kind filter",
        examples=["movie"],
    )
    year: str | None = Field(
        default=None,
        description="Exact release year",
        examples=["2008"],
        pattern=r"^\d{4}$",
    )
    genre: str | None = Field(
        default=None,
        description="Genre filter (case-insensitive substring of the title's genres)",
        examples=["Action"],
        min_length=1,
        max_length=50,
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "text": "batman",
                "type": "movie",
                "year": "2008",
                "genre": None,
            }
        }
    )


class RawInputDTO(BaseModel):
    """A keystroke-level text update, committed after the quiet period."""

    text: str = Field(description="Current contents of the search box", max_length=200)


class ResultRecordDTO(BaseModel):
    id: str
    title: str
    year: str
    poster_url: str | None = Field(
        description="Poster URL, or null when the upstream has none",
    )
    kind: str


class BrowseSnapshotDTO(BaseModel):
    """Point-in-time view of a browse session."""

    session_id: str
    query: QueryRequestDTO
    records: list[ResultRecordDTO]
    status: Literal[
        "idle",
        "loading_first_page",
        "loading_next_page",
        "ready",
        "exhausted",
        "error",
    ]
    reason: str | None = None
    error_kind: str | None = None
    retryable: bool = False
    has_more: bool
    page: int
    total_available: int
    summary: str
