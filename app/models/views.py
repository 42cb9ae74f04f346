"""Composed view models built by the aggregator."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.media import (
    CastMember,
    Genre,
    MediaDetails,
    MediaItem,
    MediaKind,
    Page,
    Video,
)


class HomeTabs(BaseModel):
    trending: List[MediaItem] = []
    popular: List[MediaItem] = []
    now_playing: List[MediaItem] = []
    top_rated: List[MediaItem] = []


class HomeView(BaseModel):
    """Homepage: banner candidates plus the four tabbed lists."""

    banner_candidates: List[MediaItem] = []
    tabs: HomeTabs = Field(default_factory=HomeTabs)


class GenreView(BaseModel):
    kind: MediaKind
    genre: Optional[Genre] = None
    page: Page[MediaItem]


class PreviewStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"


class GenrePreview(BaseModel):
    """Preview row for a single genre; failures still produce an entry."""

    genre: Genre
    status: PreviewStatus = PreviewStatus.OK
    items: List[MediaItem] = []


class DetailView(BaseModel):
    details: MediaDetails
    cast: List[CastMember] = []
    similar: List[MediaItem] = []
    videos: List[Video] = []
