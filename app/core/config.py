"""Configuration management for Cinescope."""

from pydantic import PositiveFloat, PositiveInt, SecretStr, field_validator
from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from urllib.parse import urlparse


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # TMDB
    tmdb_api_key: SecretStr | None = None
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    tmdb_image_base_url: str = "https://image.tmdb.org/t/p"
    tmdb_language: str = "tr-TR"
    tmdb_region: str = "TR"
    # Languages accepted by the videos endpoints ("null" = no language tag)
    video_languages: str = "en,tr,null"

    # Upstream behaviour
    request_timeout: PositiveFloat = 10.0  # Per-call timeout in seconds
    upstream_rate_limit: PositiveInt = 40  # Requests per second
    upstream_cache_ttl: int = 0  # Seconds, 0 disables the response cache
    max_total_pages: PositiveInt = 500  # TMDB refuses pages beyond this

    # Watchlist
    watchlist_backend: Literal["memory", "sql"] = "memory"
    database_url: str = "sqlite:///./cinescope.db"

    # Network settings
    # Proxy configuration in the format http://host:port or socks5://host:port
    proxy: str | None = None

    @field_validator("proxy")
    @classmethod
    def validate_proxy(cls, v: str | None) -> str | None:
        if v is None:
            return v

        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https", "socks4", "socks5", "socks5h"):
            raise ValueError(
                "Proxy must be a valid URL with scheme http/https/socks4/socks5/socks5h"
            )
        if not parsed.netloc:
            raise ValueError("Proxy must have a host and port")
        return v

    @field_validator("upstream_cache_ttl")
    @classmethod
    def validate_cache_ttl(cls, v: int) -> int:
        if v < 0:
            raise ValueError("upstream_cache_ttl must be >= 0")
        return v

    # App settings
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
