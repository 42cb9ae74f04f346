"""Route handlers: validate, call TMDB, normalize, wrap in an envelope.

The ``fetch_*`` coroutines raise on failure and are shared with the
aggregator. The public handlers (``popular``, ``search``, ...) take raw
request parameters and always return an Envelope.
"""

import logging
from typing import Any, Awaitable, Callable, List, Mapping

from app.core.config import get_settings
from app.core.errors import UpstreamError, ValidationError
from app.models.envelope import Envelope
from app.models.media import (
    CastMember,
    Genre,
    MediaDetails,
    MediaItem,
    MediaKind,
    Page,
    Video,
)
from app.services.normalize import (
    normalize_cast,
    normalize_details,
    normalize_genres,
    normalize_page,
    playable_videos,
)
from app.services.tmdb import TMDBClient
from app.services.validation import ValidatedParams, validate

logger = logging.getLogger(__name__)

MOVIE_LISTS = ("popular", "now_playing", "top_rated")
DISCOVER_SORT = "popularity.desc"


def clamp_page(page: int) -> int:
    """Clamp a requested page to the range TMDB will serve."""
    return min(max(page, 1), get_settings().max_total_pages)


# --- Upstream fetches (raise UpstreamError) ---


async def fetch_movie_list(
    client: TMDBClient, category: str, page: int = 1
) -> Page[MediaItem]:
    if category not in MOVIE_LISTS:
        raise ValueError(f"Unknown movie list '{category}'")
    data = await client.fetch_resource(
        f"/movie/{category}", {"page": clamp_page(page)}
    )
    return normalize_page(data, MediaKind.MOVIE)


async def fetch_trending(
    client: TMDBClient, kind: str, time_window: str, page: int = 1
) -> Page[MediaItem]:
    data = await client.fetch_resource(
        f"/trending/{kind}/{time_window}", {"page": clamp_page(page)}
    )
    # "all" mixes movies, shows and people; each record carries media_type
    return normalize_page(data, None if kind == "all" else MediaKind(kind))


async def fetch_search(
    client: TMDBClient, query: str, page: int = 1
) -> Page[MediaItem]:
    data = await client.fetch_resource(
        "/search/movie", {"query": query, "page": clamp_page(page)}
    )
    return normalize_page(data, MediaKind.MOVIE)


async def fetch_discover(
    client: TMDBClient, kind: str, genre_id: int, page: int = 1
) -> Page[MediaItem]:
    data = await client.fetch_resource(
        f"/discover/{kind}",
        {"with_genres": genre_id, "page": clamp_page(page), "sort_by": DISCOVER_SORT},
    )
    return normalize_page(data, MediaKind(kind))


async def fetch_genres(client: TMDBClient, kind: str) -> List[Genre]:
    data = await client.fetch_resource(f"/genre/{kind}/list")
    return normalize_genres(data.get("genres") or [])


async def fetch_item(client: TMDBClient, kind: str, item_id: int) -> MediaDetails:
    data = await client.fetch_resource(f"/{kind}/{item_id}")
    return normalize_details(MediaKind(kind), data)


async def fetch_credits(
    client: TMDBClient, kind: str, item_id: int
) -> List[CastMember]:
    data = await client.fetch_resource(f"/{kind}/{item_id}/credits")
    return normalize_cast(data.get("cast") or [])


async def fetch_similar(
    client: TMDBClient, kind: str, item_id: int, page: int = 1
) -> Page[MediaItem]:
    data = await client.fetch_resource(
        f"/{kind}/{item_id}/similar", {"page": clamp_page(page)}
    )
    return normalize_page(data, MediaKind(kind))


async def fetch_videos(client: TMDBClient, kind: str, item_id: int) -> List[Video]:
    """Playable (YouTube) videos, trailers first."""
    data = await client.fetch_resource(
        f"/{kind}/{item_id}/videos",
        {"include_video_language": get_settings().video_languages},
    )
    return playable_videos(data.get("results") or [])


# --- Handlers (never raise) ---

FAILURE_MESSAGES = {
    "popular": "Failed to fetch popular movies",
    "now_playing": "Failed to fetch now playing movies",
    "top_rated": "Failed to fetch top rated movies",
    "trending": "Failed to fetch trending",
    "search": "Failed to search movies",
    "discover": "Failed to discover titles",
    "genres": "Failed to fetch genres",
    "item": "Failed to fetch details",
    "credits": "Failed to fetch credits",
    "similar": "Failed to fetch similar titles",
    "videos": "Failed to fetch videos",
}


async def handle(
    route_name: str,
    raw_params: Mapping[str, Any],
    action: Callable[[ValidatedParams], Awaitable[Any]],
) -> Envelope:
    """Run ``action`` on validated params and wrap the outcome.

    Validation errors become 400 envelopes and never reach TMDB. Upstream
    failures become 500 envelopes with a generic message.
    """
    try:
        params = validate(route_name, raw_params)
    except ValidationError as exc:
        logger.info("Rejected %s request: %s", route_name, exc.message)
        return Envelope.failure(exc.code, exc.message, 400)

    message = FAILURE_MESSAGES.get(route_name, "Upstream request failed")
    try:
        data = await action(params)
    except UpstreamError as exc:
        logger.error("Error handling %s: %s", route_name, exc)
        return Envelope.failure(exc.code, message, 500)
    except Exception as exc:
        logger.exception("Unexpected error handling %s: %s", route_name, exc)
        return Envelope.failure("internal_error", message, 500)
    return Envelope.success(data)


async def popular(client: TMDBClient, raw_params: Mapping[str, Any]) -> Envelope:
    return await handle(
        "popular", raw_params, lambda p: fetch_movie_list(client, "popular", p["page"])
    )


async def now_playing(client: TMDBClient, raw_params: Mapping[str, Any]) -> Envelope:
    return await handle(
        "now_playing",
        raw_params,
        lambda p: fetch_movie_list(client, "now_playing", p["page"]),
    )


async def top_rated(client: TMDBClient, raw_params: Mapping[str, Any]) -> Envelope:
    return await handle(
        "top_rated",
        raw_params,
        lambda p: fetch_movie_list(client, "top_rated", p["page"]),
    )


async def trending(client: TMDBClient, raw_params: Mapping[str, Any]) -> Envelope:
    return await handle(
        "trending",
        raw_params,
        lambda p: fetch_trending(client, p["kind"], p["time_window"], p["page"]),
    )


async def search(client: TMDBClient, raw_params: Mapping[str, Any]) -> Envelope:
    return await handle(
        "search", raw_params, lambda p: fetch_search(client, p["query"], p["page"])
    )


async def discover(client: TMDBClient, raw_params: Mapping[str, Any]) -> Envelope:
    return await handle(
        "discover",
        raw_params,
        lambda p: fetch_discover(client, p["kind"], p["genre"], p["page"]),
    )


async def genres(client: TMDBClient, raw_params: Mapping[str, Any]) -> Envelope:
    return await handle("genres", raw_params, lambda p: fetch_genres(client, p["kind"]))


async def item(client: TMDBClient, raw_params: Mapping[str, Any]) -> Envelope:
    return await handle(
        "item", raw_params, lambda p: fetch_item(client, p["kind"], p["id"])
    )


async def credits(client: TMDBClient, raw_params: Mapping[str, Any]) -> Envelope:
    return await handle(
        "credits", raw_params, lambda p: fetch_credits(client, p["kind"], p["id"])
    )


async def similar(client: TMDBClient, raw_params: Mapping[str, Any]) -> Envelope:
    return await handle(
        "similar",
        raw_params,
        lambda p: fetch_similar(client, p["kind"], p["id"], p["page"]),
    )


async def videos(client: TMDBClient, raw_params: Mapping[str, Any]) -> Envelope:
    return await handle(
        "videos", raw_params, lambda p: fetch_videos(client, p["kind"], p["id"])
    )
