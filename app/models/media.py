"""Media models normalized from TMDB data."""

from datetime import date
from enum import Enum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MediaKind(str, Enum):
    """Endpoint family a record came from."""

    MOVIE = "movie"
    TV = "tv"


class VideoType(str, Enum):
    TRAILER = "Trailer"
    TEASER = "Teaser"
    CLIP = "Clip"
    OTHER = "Other"


class Genre(BaseModel):
    """A TMDB genre (reference data)."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str


class MediaItem(BaseModel):
    """A movie or TV show in summary form (grids, search results, banners)."""

    id: int
    kind: MediaKind
    title: str
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    poster_url: Optional[str] = None
    backdrop_url: Optional[str] = None
    release_date: Optional[date] = None
    release_year: Optional[str] = None
    vote_average: float = Field(default=0.0, ge=0.0, le=10.0)
    vote_count: int = Field(default=0, ge=0)
    genre_ids: set[int] = set()


class MediaDetails(MediaItem):
    """A movie or TV show with its detail-only fields.

    ``runtime`` is only set for movies, ``season_count`` and
    ``episode_count`` only for TV shows.
    """

    genres: List[Genre] = []
    tagline: Optional[str] = None
    status: Optional[str] = None
    runtime: Optional[int] = None
    runtime_label: Optional[str] = None
    season_count: Optional[int] = None
    episode_count: Optional[int] = None

    @model_validator(mode="after")
    def check_kind_fields(self) -> "MediaDetails":
        if self.kind == MediaKind.MOVIE and (
            self.season_count is not None or self.episode_count is not None
        ):
            raise ValueError("season/episode counts are only valid for TV shows")
        if self.kind == MediaKind.TV and self.runtime is not None:
            raise ValueError("runtime is only valid for movies")
        return self


class CastMember(BaseModel):
    id: int
    name: str
    character: str = ""
    profile_path: Optional[str] = None
    order: int = 0


class Video(BaseModel):
    id: str
    key: str
    site: str
    type: VideoType = VideoType.OTHER
    name: str = ""


T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of a paginated TMDB listing."""

    items: List[T] = []
    page_number: int = Field(default=1, ge=1)
    total_pages: int = Field(default=1, ge=1)
    total_results: int = 0

    @model_validator(mode="after")
    def check_page_bounds(self) -> "Page[T]":
        if self.page_number > self.total_pages:
            raise ValueError("page_number must not exceed total_pages")
        return self


class WatchlistEntry(BaseModel):
    """A watchlist record, unique by id."""

    id: int
    title: str
    poster_path: Optional[str] = None
    vote_average: float = 0.0
    release_date: Optional[str] = None
