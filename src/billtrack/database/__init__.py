"""Persistence layer for billtrack application."""

from billtrack.database.base import KeyValueStore
from billtrack.database.factories import create_sqlite_store
from billtrack.database.memory import InMemoryStore
from billtrack.database.repository import Keys, Repository

__all__ = ["KeyValueStore", "InMemoryStore", "Keys", "Repository", "create_sqlite_store"]
