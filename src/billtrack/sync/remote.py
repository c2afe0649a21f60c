"""Remote object stores holding the sync backup.

A remote store keeps a single object named ``bills-sync.json``. Stores only
move opaque strings; encryption happens before content reaches them.
"""

import asyncio
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, UTC
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from billtrack.domain.errors import TransportError
from billtrack.sync.snapshot import Clock, utc_now

logger = logging.getLogger(__name__)

BACKUP_FILENAME = "bills-sync.json"
APPDATA_DIRNAME = ".billtrack"


class RemoteScope(str, Enum):
    """Where the backup object lives in the remote store."""

    APPDATA = "appdata"
    VISIBLE = "visible"


@dataclass(frozen=True)
class RemoteObject:
    id: str
    name: str
    modified_time: datetime


class RemoteStore(ABC):
    """Abstract interface for the remote holding the sync object."""

    @abstractmethod
    async def find(self) -> Optional[RemoteObject]:
        """Look up the sync object.

        Returns:
            The object, or None if it does not exist
        """
        pass

    @abstractmethod
    async def create(self, content: str) -> str:
        """Create the sync object.

        Returns:
            ID of the new object
        """
        pass

    @abstractmethod
    async def update(self, object_id: str, content: str) -> str:
        """Replace the content of an existing object.

        Returns:
            ID of the updated object
        """
        pass

    @abstractmethod
    async def read_content(self, object_id: str) -> str:
        """Read the content of an object.

        Raises:
            TransportError: If the object cannot be read
        """
        pass


class InMemoryRemoteStore(RemoteStore):
    """Remote store kept in memory. Every call is recorded in ``calls``."""

    def __init__(self, clock: Clock = utc_now, name: str = BACKUP_FILENAME):
        self.clock = clock
        self.name = name
        self.calls: list[str] = []
        self._objects: dict[str, tuple[str, datetime]] = {}
        self._next_id = 1

    def put(self, content: str, modified_time: datetime) -> RemoteObject:
        """Seed the store with an object at a given modification time."""
        object_id = f"remote-{self._next_id}"
        self._next_id += 1
        self._objects[object_id] = (content, modified_time)
        return RemoteObject(id=object_id, name=self.name, modified_time=modified_time)

    async def find(self) -> Optional[RemoteObject]:
        self.calls.append("find")
        if not self._objects:
            return None
        object_id, (_, modified) = max(self._objects.items(), key=lambda item: item[1][1])
        return RemoteObject(id=object_id, name=self.name, modified_time=modified)

    async def create(self, content: str) -> str:
        self.calls.append("create")
        return self.put(content, self.clock()).id

    async def update(self, object_id: str, content: str) -> str:
        self.calls.append("update")
        if object_id not in self._objects:
            raise TransportError(f"Remote object {object_id} not found")
        self._objects[object_id] = (content, self.clock())
        return object_id

    async def read_content(self, object_id: str) -> str:
        self.calls.append("read_content")
        if object_id not in self._objects:
            raise TransportError(f"Remote object {object_id} not found")
        return self._objects[object_id][0]


class DirectoryRemoteStore(RemoteStore):
    """Remote store backed by a directory, such as one mirrored by a
    file-sync client.

    With the ``appdata`` scope the object is kept in a hidden subdirectory;
    with ``visible`` it sits directly in the root. The object ID is its
    path relative to the root.
    """

    def __init__(self, root: Union[str, Path], scope: Union[RemoteScope, str] = RemoteScope.APPDATA):
        """Initialize directory store.

        Args:
            root: Directory standing in for the remote
            scope: ``appdata`` or ``visible``
        """
        self.root = Path(root).expanduser()
        self.scope = RemoteScope(scope)

    @property
    def folder(self) -> Path:
        if self.scope is RemoteScope.APPDATA:
            return self.root / APPDATA_DIRNAME
        return self.root

    def _path(self, object_id: str) -> Path:
        path = (self.root / object_id).resolve()
        if self.root.resolve() not in path.parents:
            raise TransportError(f"Remote object {object_id} is outside {self.root}")
        return path

    def _object_id(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()

    def _find(self) -> Optional[RemoteObject]:
        path = self.folder / BACKUP_FILENAME
        try:
            stat = path.stat()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise TransportError(f"Could not access {path}: {e}") from e
        return RemoteObject(
            id=self._object_id(path),
            name=BACKUP_FILENAME,
            modified_time=datetime.fromtimestamp(stat.st_mtime, UTC),
        )

    def _write(self, path: Path, content: str) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(content)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise TransportError(f"Could not write {path}: {e}") from e
        logger.debug("Wrote remote object %s", path)

    def _read(self, object_id: str) -> str:
        path = self._path(object_id)
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise TransportError(f"Could not read remote object {object_id}: {e}") from e

    async def find(self) -> Optional[RemoteObject]:
        return await asyncio.to_thread(self._find)

    async def create(self, content: str) -> str:
        path = self.folder / BACKUP_FILENAME
        await asyncio.to_thread(self._write, path, content)
        return self._object_id(path)

    async def update(self, object_id: str, content: str) -> str:
        path = self._path(object_id)
        if not path.exists():
            raise TransportError(f"Remote object {object_id} not found")
        await asyncio.to_thread(self._write, path, content)
        return object_id

    async def read_content(self, object_id: str) -> str:
        return await asyncio.to_thread(self._read, object_id)
