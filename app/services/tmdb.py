"""TMDB upstream client: one GET per call, no retries."""

import logging
from typing import Any, Mapping, Optional

import niquests
from aiolimiter import AsyncLimiter
from cachetools import TTLCache

from app.core.config import Settings, get_settings
from app.core.errors import (
    UpstreamAuthError,
    UpstreamHTTPError,
    UpstreamTransportError,
)

logger = logging.getLogger(__name__)

# Parameters the client always sends; callers cannot override them.
RESERVED_PARAMS = frozenset({"api_key", "language", "region"})

ParamValue = str | int


class TMDBClient:
    """Thin async wrapper around the TMDB v3 REST API.

    Every call injects the API key, locale and region, makes exactly one
    request and returns the decoded JSON body. Failures are raised as
    ``UpstreamError`` subclasses for the caller to translate.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        session: niquests.AsyncSession | None = None,
    ):
        self._settings = settings or get_settings()
        self.base_url = self._settings.tmdb_base_url.rstrip("/")
        self.timeout = self._settings.request_timeout
        self.session = session or niquests.AsyncSession(retries=0)
        if self._settings.proxy:
            self.session.proxies = {
                "http": self._settings.proxy,
                "https": self._settings.proxy,
            }
        self.rate_limiter = AsyncLimiter(self._settings.upstream_rate_limit, 1.0)
        self._cache: Optional[TTLCache] = None
        if self._settings.upstream_cache_ttl > 0:
            self._cache = TTLCache(maxsize=256, ttl=self._settings.upstream_cache_ttl)

    async def aclose(self) -> None:
        """Properly close the internal HTTP session."""
        if self.session:
            await self.session.close()

    def build_params(
        self, params: Mapping[str, ParamValue] | None = None
    ) -> dict[str, str]:
        """Return the fixed parameters followed by the caller's.

        Raises UpstreamAuthError when no API key is configured.
        """
        api_key = self._settings.tmdb_api_key
        if api_key is None or not api_key.get_secret_value():
            raise UpstreamAuthError("TMDB_API_KEY is not configured")

        merged = {
            "api_key": api_key.get_secret_value(),
            "language": self._settings.tmdb_language,
            "region": self._settings.tmdb_region,
        }
        for key, value in (params or {}).items():
            if key in RESERVED_PARAMS:
                logger.debug("Ignoring caller override of reserved param '%s'", key)
                continue
            merged[key] = str(value)
        return merged

    async def fetch_resource(
        self, endpoint: str, params: Mapping[str, ParamValue] | None = None
    ) -> Any:
        """GET ``endpoint`` (relative to the TMDB base URL) and decode JSON."""
        query = self.build_params(params)
        cache_key = (endpoint, tuple(sorted((params or {}).items())))
        if self._cache is not None and cache_key in self._cache:
            logger.debug("TMDB cache hit for %s", endpoint)
            return self._cache[cache_key]

        logger.debug("TMDB GET %s params=%s", endpoint, dict(params or {}))
        url = f"{self.base_url}{endpoint}"
        try:
            async with self.rate_limiter:
                response = await self.session.get(
                    url, params=query, timeout=self.timeout
                )
        except niquests.exceptions.RequestException as exc:
            raise UpstreamTransportError(
                f"Network error calling TMDB {endpoint}: {type(exc).__name__}", exc
            ) from exc

        status = response.status_code or 0
        if not 200 <= status < 300:
            raise UpstreamHTTPError(status, endpoint)

        try:
            data = response.json()
        except (niquests.exceptions.RequestException, ValueError) as exc:
            raise UpstreamTransportError(
                f"Invalid JSON body from TMDB {endpoint}", exc
            ) from exc

        if self._cache is not None:
            self._cache[cache_key] = data
        return data
