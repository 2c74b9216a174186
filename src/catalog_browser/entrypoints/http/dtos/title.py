from pydantic import BaseModel, ConfigDict, Field


class TitleDetailResponseDTO(BaseModel):
    """Full metadata for a single title."""

    id: str
    title: str
    year: str
    kind: str
    poster_url: str | None = Field(description="Poster URL, or null when unavailable")
    genres: list[str] = Field(description="Genres split from the upstream list")
    plot: str
    director: str
    actors: list[str]
    runtime: str
    rated: str
    rating: str

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "tt0468569",
                "title": "The Dark Knight",
                "year": "2008",
                "kind": "movie",
                "poster_url": "https://m.media-amazon.com/images/M/poster.jpg",
                "genres": ["Action", "Crime", "Drama"],
                "plot": "When the menace known as the Joker wreaks havoc...",
                "director": "Christopher Nolan",
                "actors": ["Christian Bale", "Heath Ledger", "Aaron Eckhart"],
                "runtime": "152 min",
                "rated": "PG-13",
                "rating": "9.0",
            }
        }
    )
