"""Tests for remote object stores."""

import asyncio
import os
from datetime import datetime, UTC

import pytest

from billtrack.domain.errors import TransportError
from billtrack.sync.remote import (
    APPDATA_DIRNAME,
    BACKUP_FILENAME,
    DirectoryRemoteStore,
    InMemoryRemoteStore,
    RemoteScope,
)


class TestDirectoryRemoteStore:
    """Tests for the directory-backed remote."""

    def test_find_when_empty(self, tmp_path):
        """Test that an empty directory has no sync object."""
        store = DirectoryRemoteStore(tmp_path)

        assert asyncio.run(store.find()) is None

    def test_create_and_read_appdata(self, tmp_path):
        """Test that the appdata scope writes into the hidden folder."""
        store = DirectoryRemoteStore(tmp_path, RemoteScope.APPDATA)

        object_id = asyncio.run(store.create('{"a": 1}'))

        assert (tmp_path / APPDATA_DIRNAME / BACKUP_FILENAME).exists()
        assert asyncio.run(store.read_content(object_id)) == '{"a": 1}'

    def test_visible_scope(self, tmp_path):
        """Test that the visible scope writes into the root."""
        store = DirectoryRemoteStore(tmp_path, "visible")

        asyncio.run(store.create("content"))

        assert (tmp_path / BACKUP_FILENAME).read_text() == "content"
        assert not (tmp_path / APPDATA_DIRNAME).exists()

    def test_find_reports_modification_time(self, tmp_path):
        """Test that find returns the file's modification time in UTC."""
        store = DirectoryRemoteStore(tmp_path)
        object_id = asyncio.run(store.create("content"))
        stamp = datetime(2024, 5, 1, 8, 30, tzinfo=UTC).timestamp()
        os.utime(tmp_path / object_id, (stamp, stamp))

        found = asyncio.run(store.find())

        assert found.id == object_id
        assert found.name == BACKUP_FILENAME
        assert found.modified_time == datetime(2024, 5, 1, 8, 30, tzinfo=UTC)

    def test_update_replaces_content(self, tmp_path):
        """Test updating an existing object."""
        store = DirectoryRemoteStore(tmp_path)
        object_id = asyncio.run(store.create("old"))

        assert asyncio.run(store.update(object_id, "new")) == object_id
        assert asyncio.run(store.read_content(object_id)) == "new"
        assert [p.name for p in (tmp_path / APPDATA_DIRNAME).iterdir()] == [BACKUP_FILENAME]

    def test_update_missing_object(self, tmp_path):
        """Test that updating a missing object is a transport error."""
        store = DirectoryRemoteStore(tmp_path)

        with pytest.raises(TransportError):
            asyncio.run(store.update(f"{APPDATA_DIRNAME}/{BACKUP_FILENAME}", "x"))

    def test_read_outside_root_rejected(self, tmp_path):
        """Test that object IDs cannot escape the root directory."""
        store = DirectoryRemoteStore(tmp_path / "remote")

        with pytest.raises(TransportError):
            asyncio.run(store.read_content("../secret.txt"))

    def test_invalid_scope(self, tmp_path):
        """Test that an unknown scope is refused."""
        with pytest.raises(ValueError):
            DirectoryRemoteStore(tmp_path, "shared")


class TestInMemoryRemoteStore:
    """Tests for the in-memory remote."""

    def test_records_calls(self):
        """Test that every call is recorded in order."""
        store = InMemoryRemoteStore(clock=lambda: datetime(2024, 1, 1, tzinfo=UTC))

        async def scenario():
            assert await store.find() is None
            object_id = await store.create("one")
            await store.update(object_id, "two")
            return await store.read_content(object_id)

        assert asyncio.run(scenario()) == "two"
        assert store.calls == ["find", "create", "update", "read_content"]

    def test_put_seeds_object(self):
        """Test seeding an object at a given time."""
        store = InMemoryRemoteStore()
        when = datetime(2024, 2, 2, tzinfo=UTC)
        seeded = store.put("content", when)

        found = asyncio.run(store.find())

        assert found == seeded
        assert found.modified_time == when

    def test_read_unknown_object(self):
        """Test that reading an unknown object is a transport error."""
        with pytest.raises(TransportError):
            asyncio.run(InMemoryRemoteStore().read_content("nope"))
