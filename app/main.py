import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from app.api.deps import build_storage
from app.api.routes_api import router as api_router
from app.core.config import get_settings
from app.services.tmdb import TMDBClient
from app.services.watchlist import WatchlistStore

load_dotenv()

settings = get_settings()
logging.basicConfig(
    level=logging.DEBUG if settings.debug else settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    """Application lifespan context manager."""
    if settings.tmdb_api_key is None:
        logger.warning("TMDB_API_KEY is not set; every TMDB request will fail")

    app.state.tmdb = TMDBClient(settings)
    app.state.watchlist = WatchlistStore(build_storage())
    try:
        yield
    finally:
        try:
            await app.state.tmdb.aclose()
        except Exception as e:
            logger.error(f"Error closing TMDB client: {e}")


app = FastAPI(
    title="Cinescope",
    description="Movie and TV browsing API on top of TMDB",
    version="0.1.0",
    lifespan=app_lifespan,
)

app.include_router(api_router, prefix="/api")
