"""SQLAlchemy-backed key-value store."""

import json
import logging
from typing import Any, Optional
from sqlalchemy.orm import Session

from billtrack.database.base import KeyValueStore
from billtrack.database.models import StoreEntry, create_session_factory

logger = logging.getLogger(__name__)


class SQLAlchemyStore(KeyValueStore):
    """SQLAlchemy-based implementation of KeyValueStore interface."""

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy store.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db')
        """
        self.database_url = database_url
        self.session_factory = create_session_factory(database_url)
        self._session: Optional[Session] = None

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    def connect(self) -> None:
        """Connect to the store."""
        # Connection is lazy, so this is a no-op
        pass

    def disconnect(self) -> None:
        """Disconnect from the store."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def initialize_schema(self) -> None:
        """Initialize schema (create tables)."""
        # Schema is created automatically by create_session_factory
        pass

    def get(self, key: str) -> Optional[Any]:
        """Get the decoded value stored under key."""
        session = self._get_session()
        entry = session.get(StoreEntry, key)
        if entry is None:
            return None
        return json.loads(entry.value)

    def set(self, key: str, value: Any) -> None:
        """Store value under key."""
        self.set_many({key: value})

    def set_many(self, values: dict[str, Any]) -> None:
        """Store several values in a single transaction."""
        session = self._get_session()
        # Encode everything first so a bad value aborts before any write
        encoded = {key: json.dumps(value) for key, value in values.items()}
        try:
            for key, text in encoded.items():
                entry = session.get(StoreEntry, key)
                if entry is None:
                    session.add(StoreEntry(key=key, value=text))
                else:
                    entry.value = text
            session.commit()
        except Exception:
            session.rollback()
            logger.error("Rolled back write of keys: %s", ", ".join(sorted(encoded)))
            raise

    def delete(self, key: str) -> None:
        """Remove key."""
        session = self._get_session()
        entry = session.get(StoreEntry, key)
        if entry is not None:
            session.delete(entry)
            session.commit()

    def keys(self) -> list[str]:
        """List all stored keys."""
        session = self._get_session()
        return [entry.key for entry in session.query(StoreEntry).order_by(StoreEntry.key).all()]
