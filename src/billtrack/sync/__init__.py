"""Backup, encryption and cloud sync for billtrack."""

from billtrack.sync.crypto import EncryptedBlob, EncryptionCodec
from billtrack.sync.envelope import SyncService
from billtrack.sync.merge import MergeImporter, MergeResult
from billtrack.sync.policy import (
    AutoSyncScheduler,
    CloudSyncService,
    SyncAction,
    SyncResult,
    decide_sync_action,
)
from billtrack.sync.profile_backup import ProfileBackupService, ProfileImportResult
from billtrack.sync.remote import (
    DirectoryRemoteStore,
    InMemoryRemoteStore,
    RemoteObject,
    RemoteScope,
    RemoteStore,
)
from billtrack.sync.snapshot import Snapshot, SnapshotService

__all__ = [
    "AutoSyncScheduler",
    "CloudSyncService",
    "DirectoryRemoteStore",
    "EncryptedBlob",
    "EncryptionCodec",
    "InMemoryRemoteStore",
    "MergeImporter",
    "MergeResult",
    "ProfileBackupService",
    "ProfileImportResult",
    "RemoteObject",
    "RemoteScope",
    "RemoteStore",
    "Snapshot",
    "SnapshotService",
    "SyncAction",
    "SyncResult",
    "SyncService",
    "decide_sync_action",
]
