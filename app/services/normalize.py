"""Map TMDB records onto the internal display models.

Movies and TV shows use different field names upstream (``title`` vs
``name``, ``release_date`` vs ``first_air_date``). Everything here is pure:
the same raw record always yields an equal model.
"""

import logging
from datetime import date
from typing import Any, Iterable, List, Optional

from app.core.config import get_settings
from app.models.media import (
    CastMember,
    Genre,
    MediaDetails,
    MediaItem,
    MediaKind,
    Page,
    Video,
    VideoType,
)

logger = logging.getLogger(__name__)

POSTER_SIZE = "w500"
BACKDROP_SIZE = "w780"

# Lower ranks are shown first; unknown types sort last.
VIDEO_TYPE_PRIORITY = {"Trailer": 1, "Teaser": 2, "Clip": 3}
VIDEO_DEFAULT_PRIORITY = 999
PLAYABLE_SITE = "YouTube"


def _text(value: Any) -> Optional[str]:
    """Return a stripped string, or None for missing/empty values."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_date(value: Any) -> Optional[date]:
    text = _text(value)
    if text is None:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def _clamp_vote(value: Any) -> float:
    try:
        vote = float(value)
    except (TypeError, ValueError):
        return 0.0
    return min(max(vote, 0.0), 10.0)


def image_url(path: Optional[str], size: str = POSTER_SIZE) -> Optional[str]:
    """Build a TMDB image CDN URL, or None when there is no image."""
    if not path:
        return None
    base = get_settings().tmdb_image_base_url.rstrip("/")
    return f"{base}/{size}{path}"


def year(date_string: Optional[str]) -> str:
    """Four digit year of an ISO date string, or "" when unknown."""
    parsed = _parse_date(date_string)
    return str(parsed.year) if parsed else ""


def format_runtime(minutes: Optional[int]) -> str:
    """Format a runtime the way the UI shows it, e.g. 135 -> "2s 15dk"."""
    if not minutes or minutes < 0:
        return ""
    hours, mins = divmod(int(minutes), 60)
    return f"{hours}s {mins}dk"


def _item_fields(kind: MediaKind, raw: dict) -> dict:
    if kind == MediaKind.MOVIE:
        title = raw.get("title") or raw.get("original_title")
        raw_date = raw.get("release_date")
    else:
        title = raw.get("name") or raw.get("original_name")
        raw_date = raw.get("first_air_date")

    poster_path = _text(raw.get("poster_path"))
    backdrop_path = _text(raw.get("backdrop_path"))
    release_date = _parse_date(raw_date)
    genre_ids = raw.get("genre_ids")
    if genre_ids is None:
        genre_ids = [g["id"] for g in raw.get("genres") or [] if "id" in g]

    return {
        "id": int(raw["id"]),
        "kind": kind,
        "title": _text(title) or "Unknown",
        "overview": _text(raw.get("overview")),
        "poster_path": poster_path,
        "backdrop_path": backdrop_path,
        "poster_url": image_url(poster_path, POSTER_SIZE),
        "backdrop_url": image_url(backdrop_path, BACKDROP_SIZE),
        "release_date": release_date,
        "release_year": str(release_date.year) if release_date else None,
        "vote_average": _clamp_vote(raw.get("vote_average")),
        "vote_count": max(int(raw.get("vote_count") or 0), 0),
        "genre_ids": set(genre_ids),
    }


def normalize_item(kind: MediaKind, raw: dict) -> MediaItem:
    return MediaItem(**_item_fields(MediaKind(kind), raw))


def normalize_details(kind: MediaKind, raw: dict) -> MediaDetails:
    kind = MediaKind(kind)
    fields = _item_fields(kind, raw)
    fields["genres"] = normalize_genres(raw.get("genres") or [])
    fields["tagline"] = _text(raw.get("tagline"))
    fields["status"] = _text(raw.get("status"))
    if kind == MediaKind.MOVIE:
        runtime = raw.get("runtime")
        fields["runtime"] = runtime
        fields["runtime_label"] = format_runtime(runtime) or None
    else:
        fields["season_count"] = raw.get("number_of_seasons")
        fields["episode_count"] = raw.get("number_of_episodes")
        episode_runtimes = raw.get("episode_run_time") or []
        if episode_runtimes:
            fields["runtime_label"] = format_runtime(episode_runtimes[0]) or None
    return MediaDetails(**fields)


def normalize(kind: MediaKind, raw: dict) -> MediaItem | MediaDetails:
    """Normalize a TMDB record; detail payloads carry a ``genres`` list."""
    if isinstance(raw.get("genres"), list):
        return normalize_details(kind, raw)
    return normalize_item(kind, raw)


def normalize_results(
    results: Iterable[dict], kind: MediaKind | None = None
) -> List[MediaItem]:
    """Normalize a list of summary records.

    When ``kind`` is None (mixed trending results) each record's own
    ``media_type`` decides; people and unknown types are skipped.
    """
    items = []
    for raw in results:
        record_kind = kind or raw.get("media_type")
        if record_kind not in (MediaKind.MOVIE, MediaKind.TV, "movie", "tv"):
            continue
        try:
            items.append(normalize_item(MediaKind(record_kind), raw))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping malformed TMDB record %r: %s", raw.get("id"), exc)
    return items


def normalize_page(
    payload: dict, kind: MediaKind | None = None, max_total_pages: int | None = None
) -> Page[MediaItem]:
    """Normalize a paginated listing, keeping page_number <= total_pages."""
    ceiling = max_total_pages or get_settings().max_total_pages
    total_pages = max(int(payload.get("total_pages") or 1), 1)
    total_pages = min(total_pages, ceiling)
    page_number = max(int(payload.get("page") or 1), 1)
    return Page[MediaItem](
        items=normalize_results(payload.get("results") or [], kind),
        page_number=min(page_number, total_pages),
        total_pages=total_pages,
        total_results=int(payload.get("total_results") or 0),
    )


def normalize_genres(raw_genres: Iterable[dict]) -> List[Genre]:
    return [Genre(id=g["id"], name=g.get("name", "")) for g in raw_genres]


def normalize_cast(raw_cast: Iterable[dict]) -> List[CastMember]:
    """Cast members in canonical display order (``order`` ascending)."""
    cast = []
    for c in raw_cast:
        try:
            cast.append(
                CastMember(
                    id=c["id"],
                    name=c.get("name", ""),
                    character=c.get("character") or "",
                    profile_path=_text(c.get("profile_path")),
                    order=c.get("order", 0),
                )
            )
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping malformed cast record %r: %s", c.get("id"), exc)
    return sorted(cast, key=lambda c: c.order)


def _video_type(value: Any) -> VideoType:
    try:
        return VideoType(value)
    except ValueError:
        return VideoType.OTHER


def normalize_videos(raw_videos: Iterable[dict]) -> List[Video]:
    videos = []
    for v in raw_videos:
        try:
            videos.append(
                Video(
                    id=str(v.get("id", "")),
                    key=v.get("key", ""),
                    site=v.get("site", ""),
                    type=_video_type(v.get("type")),
                    name=v.get("name", ""),
                )
            )
        except (TypeError, ValueError) as exc:
            logger.warning("Skipping malformed video record %r: %s", v.get("id"), exc)
    return videos


def playable_videos(raw_videos: Iterable[dict]) -> List[Video]:
    """YouTube videos only, trailers first.

    The sort is stable, so videos of equal priority keep upstream order.
    Priority is read from the raw upstream type so "Featurette" and friends
    share the lowest rank.
    """
    youtube = [v for v in raw_videos if v.get("site") == PLAYABLE_SITE]
    ranked = sorted(
        youtube,
        key=lambda v: VIDEO_TYPE_PRIORITY.get(v.get("type"), VIDEO_DEFAULT_PRIORITY),
    )
    return normalize_videos(ranked)
