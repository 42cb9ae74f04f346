"""FastAPI dependencies for shared services."""

from fastapi import Request

from app.core.config import get_settings
from app.core.storage import MemoryStorage, SQLStorage, StoragePort
from app.services.tmdb import TMDBClient
from app.services.watchlist import WatchlistStore


def build_storage() -> StoragePort:
    """Storage backend selected by the ``watchlist_backend`` setting."""
    if get_settings().watchlist_backend == "sql":
        return SQLStorage()
    return MemoryStorage()


def get_tmdb_client(request: Request) -> TMDBClient:
    """Client created by the app lifespan (or lazily, outside of it)."""
    client = getattr(request.app.state, "tmdb", None)
    if client is None:
        client = TMDBClient()
        request.app.state.tmdb = client
    return client


def get_watchlist(request: Request) -> WatchlistStore:
    store = getattr(request.app.state, "watchlist", None)
    if store is None:
        store = WatchlistStore(build_storage())
        request.app.state.watchlist = store
    return store
