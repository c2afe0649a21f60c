"""In-memory key-value store."""

import json
from typing import Any, Optional

from billtrack.database.base import KeyValueStore


class InMemoryStore(KeyValueStore):
    """Dictionary-backed store.

    Values are kept JSON-encoded so callers never share mutable state with
    the store, mirroring the SQLAlchemy implementation.
    """

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, str] = {}
        if initial:
            self.set_many(initial)

    def connect(self) -> None:
        pass

    def disconnect(self) -> None:
        pass

    def initialize_schema(self) -> None:
        pass

    def get(self, key: str) -> Optional[Any]:
        text = self._data.get(key)
        if text is None:
            return None
        return json.loads(text)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def set_many(self, values: dict[str, Any]) -> None:
        encoded = {key: json.dumps(value) for key, value in values.items()}
        self._data.update(encoded)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)
