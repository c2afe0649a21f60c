"""Last-writer-wins cloud sync.

The local side of the comparison is the ``bt_last_sync`` cursor. After every
upload or download it is set to the remote object's modification time, so
the next comparison finds both sides equal until one of them changes. Local
edits move it forward (see ``Repository``), which makes them upload.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from billtrack.database.repository import Repository
from billtrack.domain.errors import NotFoundError, TransportError
from billtrack.sync.envelope import SyncService
from billtrack.sync.remote import RemoteObject, RemoteStore
from billtrack.sync.snapshot import Clock, utc_now

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 300.0


class SyncAction(Enum):
    UPLOAD = "upload"
    DOWNLOAD = "download"
    NONE = "none"


class SyncResult(str, Enum):
    """Outcome of an automatic sync."""

    UPLOADED = "uploaded"
    DOWNLOADED = "downloaded"
    SYNCED = "synced"


_RESULTS = {
    SyncAction.UPLOAD: SyncResult.UPLOADED,
    SyncAction.DOWNLOAD: SyncResult.DOWNLOADED,
    SyncAction.NONE: SyncResult.SYNCED,
}


def decide_sync_action(remote: Optional[RemoteObject], local_modified_at: datetime) -> SyncAction:
    """Pick the sync direction for a remote object and local timestamp.

    Args:
        remote: Remote sync object, or None if there is none
        local_modified_at: Local modification timestamp

    Returns:
        UPLOAD when there is no remote object or local is newer, DOWNLOAD
        when remote is newer, NONE when both are equal
    """
    if remote is None:
        return SyncAction.UPLOAD
    if remote.modified_time > local_modified_at:
        return SyncAction.DOWNLOAD
    if local_modified_at > remote.modified_time:
        return SyncAction.UPLOAD
    return SyncAction.NONE


class CloudSyncService:
    """Moves encrypted exports between the repository and a remote store.

    Errors from the remote or from decryption propagate unchanged and leave
    local data as it was. Nothing is retried.
    """

    def __init__(
        self,
        sync_service: SyncService,
        remote: RemoteStore,
        repo: Repository,
        clock: Clock = utc_now,
    ):
        """Initialize cloud sync service.

        Args:
            sync_service: Export and import of snapshots
            remote: Store holding the sync object
            repo: Repository holding the last-sync cursor
            clock: Time source used when no last-sync cursor exists
        """
        self.sync_service = sync_service
        self.remote = remote
        self.repo = repo
        self.clock = clock

    async def _record_remote_time(self) -> None:
        remote = await self.remote.find()
        if remote is None:
            raise TransportError("Remote object disappeared after upload")
        self.repo.save_last_sync(remote.modified_time)

    async def upload(self, password: str, existing: Optional[RemoteObject] = None) -> str:
        """Upload an encrypted export, creating or replacing the remote object.

        Args:
            password: Encryption password
            existing: Remote object already looked up by the caller

        Returns:
            ID of the remote object
        """
        content = self.sync_service.export_encrypted(password)
        if existing is None:
            existing = await self.remote.find()
        if existing is None:
            object_id = await self.remote.create(content)
        else:
            object_id = await self.remote.update(existing.id, content)
        await self._record_remote_time()
        logger.info("Uploaded backup to remote object %s", object_id)
        return object_id

    async def download(self, password: str, existing: Optional[RemoteObject] = None) -> None:
        """Replace local data with the remote backup.

        Raises:
            NotFoundError: If there is no remote backup
            PasswordRequiredError: If password is empty
            ImportFailedError: If the backup cannot be decrypted or parsed
        """
        if existing is None:
            existing = await self.remote.find()
        if existing is None:
            raise NotFoundError("No backup found in the remote store")
        content = await self.remote.read_content(existing.id)
        self.sync_service.import_from_string(content, password)
        self.repo.save_last_sync(existing.modified_time)
        logger.info("Restored backup from remote object %s", existing.id)

    async def auto_sync(self, password: str) -> SyncResult:
        """Sync in whichever direction is newer.

        When no sync has happened yet the current time is recorded as the
        local timestamp, so an existing remote backup is only downloaded if
        it is newer than that.
        """
        local_modified_at = self.repo.get_last_sync()
        if local_modified_at is None:
            local_modified_at = self.clock()
            self.repo.save_last_sync(local_modified_at)

        remote = await self.remote.find()
        action = decide_sync_action(remote, local_modified_at)
        logger.info("Auto-sync decided %s", action.value)

        if action is SyncAction.UPLOAD:
            await self.upload(password, existing=remote)
        elif action is SyncAction.DOWNLOAD:
            await self.download(password, existing=remote)
        return _RESULTS[action]


class AutoSyncScheduler:
    """Runs auto-sync on a fixed interval, never two at a time.

    A tick that starts while another sync is still running is skipped.
    """

    def __init__(self, cloud: CloudSyncService, password: str, interval: float = DEFAULT_INTERVAL):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.cloud = cloud
        self.password = password
        self.interval = interval
        self.in_flight = False
        self.last_result: Optional[SyncResult] = None
        self.last_error: Optional[Exception] = None

    async def tick(self) -> Optional[SyncResult]:
        """Run one auto-sync unless one is already running.

        Returns:
            The sync result, or None if the tick was skipped
        """
        if self.in_flight:
            logger.debug("Auto-sync already in flight, skipping tick")
            return None
        self.in_flight = True
        try:
            self.last_result = await self.cloud.auto_sync(self.password)
            self.last_error = None
            return self.last_result
        finally:
            self.in_flight = False

    async def run(self, stop_event: asyncio.Event) -> None:
        """Tick until stop_event is set. Failed ticks are logged and kept
        on ``last_error``."""
        while not stop_event.is_set():
            try:
                await self.tick()
            except Exception as e:
                self.last_error = e
                logger.error("Auto-sync failed: %s", e)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass
