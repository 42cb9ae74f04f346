"""Key-value storage port and its implementations."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from app.core.database import KeyValueRecord, create_db_and_tables, make_engine


class StoragePort(ABC):
    """Minimal string key-value store used by the watchlist."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is unset."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        pass


class MemoryStorage(StoragePort):
    """Process-local storage, lost on restart."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def keys(self) -> List[str]:
        return list(self._data.keys())


class SQLStorage(StoragePort):
    """Storage backed by the ``kv_store`` table."""

    def __init__(self, engine: Engine | None = None) -> None:
        self.engine = engine or make_engine()
        create_db_and_tables(self.engine)

    def get(self, key: str) -> Optional[str]:
        with Session(self.engine) as session:
            record = session.get(KeyValueRecord, key)
            return record.value if record else None

    def set(self, key: str, value: str) -> None:
        with Session(self.engine) as session:
            record = session.get(KeyValueRecord, key)
            if record is None:
                record = KeyValueRecord(key=key, value=value)
            else:
                record.value = value
            session.add(record)
            session.commit()

    def keys(self) -> List[str]:
        with Session(self.engine) as session:
            return list(session.exec(select(KeyValueRecord.key)).all())
