"""Snapshot of the complete local dataset."""

from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Any, Callable, Optional

from billtrack.database import mappers
from billtrack.database.repository import Keys, Repository
from billtrack.domain.entities import (
    BankBalance,
    CashInstallment,
    CreditCard,
    Installment,
    OneTimeBill,
    Profile,
    Statement,
)
from billtrack.domain.errors import MalformedBlobError

SNAPSHOT_VERSION = "1.0.0"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def isoformat(moment: datetime) -> str:
    """ISO-8601 with millisecond precision and a Z suffix."""
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# (attribute, wire key, record reader, record writer)
_COLLECTIONS: list[tuple[str, str, Callable[[Any], Any], Callable[[Any], dict]]] = [
    ("profiles", "profiles", mappers.profile_from_record, mappers.profile_to_record),
    ("cards", "cards", mappers.card_from_record, mappers.card_to_record),
    ("statements", "statements", mappers.statement_from_record, mappers.statement_to_record),
    ("installments", "installments", mappers.installment_from_record, mappers.installment_to_record),
    (
        "cash_installments",
        "cashInstallments",
        mappers.cash_installment_from_record,
        mappers.cash_installment_to_record,
    ),
    ("one_time_bills", "oneTimeBills", mappers.one_time_bill_from_record, mappers.one_time_bill_to_record),
    ("bank_balances", "bankBalances", mappers.bank_balance_from_record, mappers.bank_balance_to_record),
]


@dataclass(frozen=True)
class Snapshot:
    """Exportable state of the application at a point in time.

    A collection set to None was absent from the source (an older export)
    and is left alone when the snapshot is applied.
    """

    version: str
    timestamp: str
    profiles: Optional[list[Profile]] = None
    cards: Optional[list[CreditCard]] = None
    statements: Optional[list[Statement]] = None
    installments: Optional[list[Installment]] = None
    cash_installments: Optional[list[CashInstallment]] = None
    one_time_bills: Optional[list[OneTimeBill]] = None
    bank_balances: Optional[list[BankBalance]] = None
    active_profile_id: Optional[str] = None
    active_month: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"version": self.version, "timestamp": self.timestamp}
        for attribute, key, _, to_record in _COLLECTIONS:
            items = getattr(self, attribute)
            if items is not None:
                data[key] = [to_record(item) for item in items]
        data["activeProfileId"] = self.active_profile_id
        data["activeMonth"] = self.active_month
        return data

    @staticmethod
    def from_dict(raw: Any) -> "Snapshot":
        """Parse a snapshot from its JSON form.

        Raises:
            MalformedBlobError: If raw is not an object, holds no known
                collection, or a collection is not a list
            ValidationError: If an entity record is invalid
        """
        if not isinstance(raw, dict):
            raise MalformedBlobError("Snapshot must be a JSON object")
        if not any(key in raw for _, key, _, _ in _COLLECTIONS):
            raise MalformedBlobError("Data does not contain any billtrack collections")

        collections: dict[str, Any] = {}
        for attribute, key, from_record, _ in _COLLECTIONS:
            records = raw.get(key)
            if records is None:
                continue
            if not isinstance(records, list):
                raise MalformedBlobError(f"Snapshot field '{key}' must be a list")
            collections[attribute] = [from_record(record) for record in records]

        return Snapshot(
            version=str(raw.get("version") or ""),
            timestamp=str(raw.get("timestamp") or ""),
            active_profile_id=raw.get("activeProfileId") or None,
            active_month=raw.get("activeMonth") or None,
            **collections,
        )


class SnapshotService:
    """Builds snapshots from, and applies them to, the local repository."""

    def __init__(self, repo: Repository, clock: Clock = utc_now):
        """Initialize snapshot service.

        Args:
            repo: Repository instance
            clock: Source of the snapshot timestamp
        """
        self.repo = repo
        self.clock = clock

    def build_snapshot(self) -> Snapshot:
        """Read every collection and cursor into a new snapshot."""
        return Snapshot(
            version=SNAPSHOT_VERSION,
            timestamp=isoformat(self.clock()),
            profiles=self.repo.get_profiles(),
            cards=self.repo.get_cards(),
            statements=self.repo.get_statements(),
            installments=self.repo.get_installments(),
            cash_installments=self.repo.get_cash_installments(),
            one_time_bills=self.repo.get_one_time_bills(),
            bank_balances=self.repo.get_bank_balances(),
            active_profile_id=self.repo.get_active_profile_id(),
            active_month=self.repo.get_active_month(),
        )

    def apply_snapshot(self, snapshot: Snapshot) -> None:
        """Replace local state with the snapshot's collections and cursors.

        Everything is written in a single store call, so either all
        collections are replaced or none are. No referential checks are made.
        """
        cursors: dict[str, Any] = {}
        if snapshot.active_profile_id:
            cursors[Keys.ACTIVE_PROFILE_ID] = snapshot.active_profile_id
        if snapshot.active_month:
            cursors[Keys.ACTIVE_MONTH] = snapshot.active_month

        self.repo.save_all(
            profiles=snapshot.profiles,
            cards=snapshot.cards,
            statements=snapshot.statements,
            installments=snapshot.installments,
            cash_installments=snapshot.cash_installments,
            one_time_bills=snapshot.one_time_bills,
            bank_balances=snapshot.bank_balances,
            cursors=cursors,
        )
