"""Export and import of snapshots as plain or encrypted JSON."""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from billtrack.database.repository import Repository
from billtrack.domain.errors import ImportFailedError, PasswordRequiredError, SyncError
from billtrack.sync.crypto import EncryptedBlob, EncryptionCodec
from billtrack.sync.merge import MergeImporter, MergeResult
from billtrack.sync.snapshot import SNAPSHOT_VERSION, Clock, Snapshot, SnapshotService, utc_now

logger = logging.getLogger(__name__)


class SyncService:
    """Serializes local state for backup and restores it again.

    Encrypted exports wrap the encrypted snapshot in an envelope:
    ``{"encrypted": true, "version", "timestamp", "data": <blob>}``.
    """

    def __init__(self, repo: Repository, codec: Optional[EncryptionCodec] = None, clock: Clock = utc_now):
        """Initialize sync service.

        Args:
            repo: Repository instance
            codec: Encryption codec; defaults to one with standard parameters
            clock: Source of export timestamps
        """
        self.repo = repo
        self.codec = codec or EncryptionCodec()
        self.clock = clock
        self.snapshots = SnapshotService(repo, clock=clock)
        self.merger = MergeImporter(repo)

    def export_plain(self) -> str:
        """Export a fresh snapshot as indented JSON."""
        return json.dumps(self.snapshots.build_snapshot().to_dict(), indent=2)

    def export_encrypted(self, password: str) -> str:
        """Export a fresh snapshot encrypted under password.

        Raises:
            PasswordRequiredError: If password is empty
        """
        snapshot = self.snapshots.build_snapshot()
        blob = self.codec.encrypt(json.dumps(snapshot.to_dict()), password)
        envelope = {
            "encrypted": True,
            "version": SNAPSHOT_VERSION,
            "timestamp": snapshot.timestamp,
            "data": blob.to_dict(),
        }
        return json.dumps(envelope, indent=2)

    def decode(self, json_str: str, password: Optional[str] = None) -> Snapshot:
        """Parse an export, decrypting it when needed.

        Args:
            json_str: Plain or encrypted export
            password: Password for encrypted exports

        Returns:
            Parsed snapshot

        Raises:
            PasswordRequiredError: If the export is encrypted and no password
                was given
            ImportFailedError: If the export cannot be parsed or decrypted
        """
        try:
            parsed = json.loads(json_str)
        except json.JSONDecodeError as exc:
            raise ImportFailedError(exc) from exc
        if not isinstance(parsed, dict):
            cause = SyncError("Backup must be a JSON object")
            raise ImportFailedError(cause) from cause

        if parsed.get("encrypted") is True:
            if not password:
                raise PasswordRequiredError()
            try:
                plaintext = self.codec.decrypt(EncryptedBlob.from_dict(parsed.get("data")), password)
                raw = json.loads(plaintext)
            except (SyncError, ValueError) as exc:
                raise ImportFailedError(exc) from exc
        else:
            raw = parsed

        try:
            snapshot = Snapshot.from_dict(raw)
        except ValueError as exc:
            raise ImportFailedError(exc) from exc

        if snapshot.version != SNAPSHOT_VERSION:
            logger.warning(
                "Importing backup version %r into version %s", snapshot.version, SNAPSHOT_VERSION
            )
        return snapshot

    def import_from_string(self, json_str: str, password: Optional[str] = None) -> Snapshot:
        """Replace local state with an export.

        Local state is unchanged when parsing or decryption fails.

        Raises:
            PasswordRequiredError: If the export is encrypted and no password
                was given
            ImportFailedError: If the export cannot be parsed or decrypted
        """
        snapshot = self.decode(json_str, password)
        self.snapshots.apply_snapshot(snapshot)
        logger.info("Restored backup from %s", snapshot.timestamp or "unknown time")
        return snapshot

    def merge_from_string(self, json_str: str, password: Optional[str] = None) -> MergeResult:
        """Add entities from an export that are missing locally."""
        return self.merger.merge(self.decode(json_str, password))

    def backup_filename(self, encrypted: bool) -> str:
        """Return the default file name for a backup written now."""
        millis = int(self.clock().timestamp() * 1000)
        kind = "bills-backup-encrypted" if encrypted else "bills-backup"
        return f"{kind}-{millis}.json"

    def export_to_file(self, path: Union[str, Path], password: Optional[str] = None) -> Path:
        """Write an export to path, encrypted when a password is given.

        When path is a directory the default backup file name is used.
        """
        target = Path(path)
        if target.is_dir():
            target = target / self.backup_filename(bool(password))
        content = self.export_encrypted(password) if password else self.export_plain()
        target.write_text(content, encoding="utf-8")
        logger.info("Wrote %s backup to %s", "encrypted" if password else "plain", target)
        return target

    def import_from_file(
        self, path: Union[str, Path], password: Optional[str] = None, merge: bool = False
    ) -> Union[Snapshot, MergeResult]:
        """Restore or merge a backup file.

        Raises:
            ImportFailedError: If the file cannot be read or parsed
        """
        try:
            content = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ImportFailedError(exc, f"Could not read backup file {path}: {exc}") from exc
        if merge:
            return self.merge_from_string(content, password)
        return self.import_from_string(content, password)

    def is_encrypted(self, json_str: str) -> bool:
        """Return True when an export is an encrypted envelope."""
        try:
            parsed: Any = json.loads(json_str)
        except json.JSONDecodeError:
            return False
        return isinstance(parsed, dict) and parsed.get("encrypted") is True
