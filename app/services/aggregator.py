"""Composed views built from several concurrent TMDB calls.

Each composition issues all of its fetches before awaiting any of them and
joins on every branch. An optional branch that fails degrades to an empty
result; when a required branch fails the unfinished siblings are cancelled.
"""

import asyncio
import logging
import random
from typing import Any, Awaitable, List, Optional, TypeVar

from app.models.media import Genre, MediaItem, MediaKind, Page
from app.models.views import (
    DetailView,
    GenrePreview,
    GenreView,
    HomeTabs,
    HomeView,
    PreviewStatus,
)
from app.services.handlers import (
    fetch_credits,
    fetch_discover,
    fetch_genres,
    fetch_item,
    fetch_movie_list,
    fetch_similar,
    fetch_trending,
    fetch_videos,
)
from app.services.tmdb import TMDBClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

BANNER_POPULAR_COUNT = 10
BANNER_TRENDING_COUNT = 5
BANNER_ROTATION_SIZE = 5
HOME_TRENDING = ("movie", "week")
PREVIEW_LIMIT = 10
DETAIL_CAST_LIMIT = 10
DETAIL_SIMILAR_LIMIT = 12


async def _or_default(label: str, coro: Awaitable[T], default: T) -> T:
    """Await one branch, logging and substituting ``default`` on failure."""
    try:
        return await coro
    except Exception as e:
        logger.warning(f"Branch '{label}' failed, using empty result: {e}")
        return default


async def _items(label: str, coro: Awaitable[Page[MediaItem]]) -> List[MediaItem]:
    async def unwrap() -> List[MediaItem]:
        return (await coro).items

    return await _or_default(label, unwrap(), [])


async def _gather_or_cancel(*coros: Awaitable[Any]) -> List[Any]:
    """Like ``asyncio.gather`` but cancels unfinished siblings on failure."""
    tasks = [asyncio.ensure_future(c) for c in coros]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def banner_candidates(
    popular: List[MediaItem], trending: List[MediaItem]
) -> List[MediaItem]:
    """Top popular plus top trending, deduplicated by id (first wins)."""
    seen: set[int] = set()
    candidates = []
    for media in popular[:BANNER_POPULAR_COUNT] + trending[:BANNER_TRENDING_COUNT]:
        if media.id in seen:
            continue
        seen.add(media.id)
        candidates.append(media)
    return candidates


def choose_banner_rotation(
    candidates: List[MediaItem],
    count: int = BANNER_ROTATION_SIZE,
    rng: Optional[random.Random] = None,
) -> List[MediaItem]:
    """Pick a random subset of banner candidates for rotation."""
    rng = rng or random.Random()
    return rng.sample(candidates, min(count, len(candidates)))


async def compose_home_view(client: TMDBClient, page: int = 1) -> HomeView:
    """Fetch the four homepage lists concurrently and build the banner set."""
    trending_kind, trending_window = HOME_TRENDING
    trending, popular, now_playing, top_rated = await asyncio.gather(
        _items(
            "trending", fetch_trending(client, trending_kind, trending_window, page)
        ),
        _items("popular", fetch_movie_list(client, "popular", page)),
        _items("now_playing", fetch_movie_list(client, "now_playing", page)),
        _items("top_rated", fetch_movie_list(client, "top_rated", page)),
    )
    return HomeView(
        banner_candidates=banner_candidates(popular, trending),
        tabs=HomeTabs(
            trending=trending,
            popular=popular,
            now_playing=now_playing,
            top_rated=top_rated,
        ),
    )


async def _find_genre(
    client: TMDBClient, kind: str, genre_id: int
) -> Optional[Genre]:
    genres = await fetch_genres(client, kind)
    return next((g for g in genres if g.id == genre_id), None)


async def compose_genre_view(
    client: TMDBClient, kind: str, genre_id: int, page: int = 1
) -> GenreView:
    """One discover page for a genre, with the genre's name when available.

    Discover failures propagate; a failed name lookup only drops the name.
    """
    genre, results = await _gather_or_cancel(
        _or_default("genre_lookup", _find_genre(client, kind, genre_id), None),
        fetch_discover(client, kind, genre_id, page),
    )
    return GenreView(kind=MediaKind(kind), genre=genre, page=results)


async def compose_all_genres_preview(
    client: TMDBClient, kind: str, limit: int = PREVIEW_LIMIT
) -> List[GenrePreview]:
    """First discover page for every genre of ``kind``.

    Every genre gets an entry; failed genres report ``status=failed`` with
    no items.
    """
    try:
        genres = await fetch_genres(client, kind)
    except Exception as e:
        logger.warning(f"Could not load {kind} genres for preview: {e}")
        return []

    async def preview(genre: Genre) -> GenrePreview:
        try:
            results = await fetch_discover(client, kind, genre.id, 1)
        except Exception as e:
            logger.warning(f"Preview for genre {genre.id} ({genre.name}) failed: {e}")
            return GenrePreview(genre=genre, status=PreviewStatus.FAILED)
        return GenrePreview(genre=genre, items=results.items[:limit])

    return list(await asyncio.gather(*[preview(g) for g in genres]))


async def compose_detail_view(
    client: TMDBClient, kind: str, item_id: int
) -> DetailView:
    """Details, cast, similar titles and videos for one title.

    Only the details call is required; the rest degrade to empty lists.
    """
    details, cast, similar, videos = await _gather_or_cancel(
        fetch_item(client, kind, item_id),
        _or_default("credits", fetch_credits(client, kind, item_id), []),
        _items("similar", fetch_similar(client, kind, item_id)),
        _or_default("videos", fetch_videos(client, kind, item_id), []),
    )
    return DetailView(
        details=details,
        cast=cast[:DETAIL_CAST_LIMIT],
        similar=similar[:DETAIL_SIMILAR_LIMIT],
        videos=videos,
    )
