"""Database setup for Cinescope using SQLModel."""

from typing import Optional

from sqlmodel import Field, SQLModel, create_engine
from sqlalchemy.engine import Engine

from app.core.config import get_settings


class KeyValueRecord(SQLModel, table=True):
    """A single JSON document stored under a key."""

    __tablename__ = "kv_store"

    key: str = Field(primary_key=True)
    value: Optional[str] = None


def make_engine(database_url: Optional[str] = None) -> Engine:
    """Create an engine; SQLite needs cross-thread access for FastAPI."""
    settings = get_settings()
    url = database_url or settings.database_url
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=settings.debug, connect_args=connect_args)


def create_db_and_tables(engine: Engine) -> None:
    """Create all database tables."""
    SQLModel.metadata.create_all(engine)
