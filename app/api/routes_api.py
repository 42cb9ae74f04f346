"""API routes returning JSON envelopes for the UI layer."""

import asyncio
from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.api.deps import get_tmdb_client, get_watchlist
from app.models.envelope import Envelope
from app.models.media import WatchlistEntry
from app.services import aggregator, handlers
from app.services.handlers import handle
from app.services.tmdb import TMDBClient
from app.services.watchlist import WatchlistStore

router = APIRouter()

Client = Annotated[TMDBClient, Depends(get_tmdb_client)]
Watchlist = Annotated[WatchlistStore, Depends(get_watchlist)]
# Raw strings so the request validator, not FastAPI, decides what is valid.
PageParam = Annotated[str | None, Query(description="Page number (default 1)")]


def respond(envelope: Envelope) -> JSONResponse:
    """Map an envelope to ``{"data": ...}`` or ``{"error": ...}``."""
    if envelope.ok:
        return JSONResponse({"data": jsonable_encoder(envelope.data)})
    return JSONResponse(
        {"error": envelope.message, "error_code": envelope.error_code},
        status_code=envelope.status_code,
    )


# --- Listings ---


@router.get("/popular")
async def popular(client: Client, page: PageParam = None):
    """Popular movies."""
    return respond(await handlers.popular(client, {"page": page}))


@router.get("/now-playing")
async def now_playing(client: Client, page: PageParam = None):
    """Movies currently in theatres."""
    return respond(await handlers.now_playing(client, {"page": page}))


@router.get("/top-rated")
async def top_rated(client: Client, page: PageParam = None):
    """Top rated movies."""
    return respond(await handlers.top_rated(client, {"page": page}))


@router.get("/trending/{kind}/{time_window}")
async def trending(client: Client, kind: str, time_window: str, page: PageParam = None):
    """Trending movies, shows or both, by day or week."""
    params = {"kind": kind, "time_window": time_window, "page": page}
    return respond(await handlers.trending(client, params))


@router.get("/search")
async def search(
    client: Client,
    query: Annotated[str | None, Query(description="Search query")] = None,
    page: PageParam = None,
):
    """Search movies by title."""
    return respond(await handlers.search(client, {"query": query, "page": page}))


@router.get("/discover/{kind}")
async def discover(
    client: Client,
    kind: str,
    genre: Annotated[str | None, Query(description="Genre id")] = None,
    page: PageParam = None,
):
    """Titles of a genre, most popular first."""
    params = {"kind": kind, "genre": genre, "page": page}
    return respond(await handlers.discover(client, params))


@router.get("/genres")
async def movie_genres(client: Client):
    """Movie genres."""
    return respond(await handlers.genres(client, {"kind": "movie"}))


@router.get("/tv/genres")
async def tv_genres(client: Client):
    """TV genres."""
    return respond(await handlers.genres(client, {"kind": "tv"}))


# --- Composed views ---


@router.get("/home")
async def home(client: Client, page: PageParam = None):
    """Homepage tabs plus banner candidates and a random rotation of them."""

    async def compose(params):
        view = await aggregator.compose_home_view(client, params["page"])
        return {
            **view.model_dump(mode="json"),
            "banner": aggregator.choose_banner_rotation(view.banner_candidates),
        }

    return respond(await handle("home", {"page": page}, compose))


@router.get("/categories/{kind}")
async def categories_preview(client: Client, kind: str):
    """First page of every genre of ``kind``."""
    return respond(
        await handle(
            "genre_preview",
            {"kind": kind},
            lambda p: aggregator.compose_all_genres_preview(client, p["kind"]),
        )
    )


@router.get("/categories/{kind}/{genre_id}")
async def category_detail(
    client: Client, kind: str, genre_id: str, page: PageParam = None
):
    """One page of a genre plus the genre's name."""
    return respond(
        await handle(
            "discover",
            {"kind": kind, "genre": genre_id, "page": page},
            lambda p: aggregator.compose_genre_view(
                client, p["kind"], p["genre"], p["page"]
            ),
        )
    )


@router.get("/view/{kind}/{item_id}")
async def detail_view(client: Client, kind: str, item_id: str):
    """Everything a detail page shows, fetched concurrently."""
    return respond(
        await handle(
            "detail",
            {"kind": kind, "id": item_id},
            lambda p: aggregator.compose_detail_view(client, p["kind"], p["id"]),
        )
    )


# --- Watchlist ---


@router.get("/watchlist", response_model=List[WatchlistEntry])
async def list_watchlist(store: Watchlist):
    """All watchlist entries in insertion order."""
    return await asyncio.to_thread(store.list)


@router.post("/watchlist", status_code=201)
async def add_to_watchlist(entry: WatchlistEntry, store: Watchlist, response: Response):
    """Add a title; adding an existing id is a no-op answered with 200."""
    added = await asyncio.to_thread(store.add, entry)
    if not added:
        response.status_code = 200
    return {"id": entry.id, "added": added}


@router.get("/watchlist/{entry_id}")
async def in_watchlist(entry_id: int, store: Watchlist):
    """Whether a title is on the watchlist."""
    contains = await asyncio.to_thread(store.contains, entry_id)
    return {"id": entry_id, "in_watchlist": contains}


@router.delete("/watchlist/{entry_id}")
async def remove_from_watchlist(entry_id: int, store: Watchlist):
    """Remove a title from the watchlist."""
    if not await asyncio.to_thread(store.remove, entry_id):
        raise HTTPException(status_code=404, detail="Not in watchlist")
    return {"id": entry_id, "removed": True}


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "service": "cinescope"}


# --- Single titles (catch-all paths, must stay last) ---


@router.get("/{kind}/{item_id}")
async def get_item(client: Client, kind: str, item_id: str):
    """Movie or TV show details."""
    return respond(await handlers.item(client, {"kind": kind, "id": item_id}))


@router.get("/{kind}/{item_id}/credits")
async def get_credits(client: Client, kind: str, item_id: str):
    """Cast of a movie or TV show, in billing order."""
    return respond(await handlers.credits(client, {"kind": kind, "id": item_id}))


@router.get("/{kind}/{item_id}/similar")
async def get_similar(client: Client, kind: str, item_id: str, page: PageParam = None):
    """Titles similar to a movie or TV show."""
    params = {"kind": kind, "id": item_id, "page": page}
    return respond(await handlers.similar(client, params))


@router.get("/{kind}/{item_id}/videos")
async def get_videos(client: Client, kind: str, item_id: str):
    """Playable YouTube videos, trailers first."""
    return respond(await handlers.videos(client, {"kind": kind, "id": item_id}))
