"""Typed access to entity collections held in a key-value store."""

from datetime import datetime, timedelta, UTC
from typing import Any, Callable, Optional, Sequence, TypeVar

from billtrack.database.base import KeyValueStore
from billtrack.database import mappers
from billtrack.domain.entities import (
    BankBalance,
    CashInstallment,
    CreditCard,
    Installment,
    OneTimeBill,
    Profile,
    Statement,
)

T = TypeVar("T")


class Keys:
    """Store keys, one per collection and per scalar cursor."""

    PROFILES = "bt_profiles"
    CARDS = "bt_cards"
    STATEMENTS = "bt_statements"
    INSTALLMENTS = "bt_installments"
    CASH_INSTALLMENTS = "bt_cash_installments"
    ONE_TIME_BILLS = "bt_one_time_bills"
    BANK_BALANCES = "bt_bank_balances"
    ACTIVE_PROFILE_ID = "bt_active_profile_id"
    ACTIVE_MONTH = "bt_active_month"
    MULTI_PROFILE_MODE = "bt_multi_profile_mode"
    SELECTED_PROFILE_IDS = "bt_selected_profile_ids"
    BANK_BALANCE_TRACKING = "bt_bank_balance_tracking"
    LAST_SYNC = "bt_last_sync"


_COLLECTIONS: dict[str, tuple[Callable[[Any], Any], Callable[[Any], dict]]] = {
    Keys.PROFILES: (mappers.profile_from_record, mappers.profile_to_record),
    Keys.CARDS: (mappers.card_from_record, mappers.card_to_record),
    Keys.STATEMENTS: (mappers.statement_from_record, mappers.statement_to_record),
    Keys.INSTALLMENTS: (mappers.installment_from_record, mappers.installment_to_record),
    Keys.CASH_INSTALLMENTS: (
        mappers.cash_installment_from_record,
        mappers.cash_installment_to_record,
    ),
    Keys.ONE_TIME_BILLS: (mappers.one_time_bill_from_record, mappers.one_time_bill_to_record),
    Keys.BANK_BALANCES: (mappers.bank_balance_from_record, mappers.bank_balance_to_record),
}


class Repository:
    """Explicit store object shared by every service.

    Collections are read and written whole: a save replaces the entire list
    stored under the collection's key.

    Once cloud sync has recorded a ``bt_last_sync`` cursor, every write of
    exported data (collections, active profile, active month) moves the
    cursor forward in the same store call. It always ends up strictly later
    than before, so an edit made after a sync compares newer than the remote
    object even when the local clock lags behind it.
    """

    def __init__(self, store: KeyValueStore, clock: Optional[Callable[[], datetime]] = None):
        """Initialize repository.

        Args:
            store: Key-value store instance
            clock: Time source for the modification cursor (default: now, UTC)
        """
        self.store = store
        self.clock = clock or (lambda: datetime.now(UTC))

    def _touch(self, values: dict[str, Any]) -> dict[str, Any]:
        """Add an advanced modification cursor to values, if one is kept."""
        if Keys.LAST_SYNC in values:
            return values
        previous = self.get_last_sync()
        if previous is not None:
            stamp = max(self.clock(), previous + timedelta(microseconds=1))
            values[Keys.LAST_SYNC] = stamp.isoformat()
        return values

    def _load(self, key: str) -> list:
        from_record, _ = _COLLECTIONS[key]
        records = self.store.get(key)
        if not records:
            return []
        return [from_record(record) for record in records]

    def _encode(self, key: str, items: Sequence[Any]) -> list[dict]:
        _, to_record = _COLLECTIONS[key]
        return [to_record(item) for item in items]

    def _save(self, key: str, items: Sequence[Any]) -> None:
        self.store.set_many(self._touch({key: self._encode(key, items)}))

    # Collections
    def get_profiles(self) -> list[Profile]:
        return self._load(Keys.PROFILES)

    def save_profiles(self, profiles: Sequence[Profile]) -> None:
        self._save(Keys.PROFILES, profiles)

    def get_cards(self) -> list[CreditCard]:
        return self._load(Keys.CARDS)

    def save_cards(self, cards: Sequence[CreditCard]) -> None:
        self._save(Keys.CARDS, cards)

    def get_statements(self) -> list[Statement]:
        return self._load(Keys.STATEMENTS)

    def save_statements(self, statements: Sequence[Statement]) -> None:
        self._save(Keys.STATEMENTS, statements)

    def get_installments(self) -> list[Installment]:
        return self._load(Keys.INSTALLMENTS)

    def save_installments(self, installments: Sequence[Installment]) -> None:
        self._save(Keys.INSTALLMENTS, installments)

    def get_cash_installments(self) -> list[CashInstallment]:
        return self._load(Keys.CASH_INSTALLMENTS)

    def save_cash_installments(self, cash_installments: Sequence[CashInstallment]) -> None:
        self._save(Keys.CASH_INSTALLMENTS, cash_installments)

    def get_one_time_bills(self) -> list[OneTimeBill]:
        return self._load(Keys.ONE_TIME_BILLS)

    def save_one_time_bills(self, bills: Sequence[OneTimeBill]) -> None:
        self._save(Keys.ONE_TIME_BILLS, bills)

    def get_bank_balances(self) -> list[BankBalance]:
        return self._load(Keys.BANK_BALANCES)

    def save_bank_balances(self, balances: Sequence[BankBalance]) -> None:
        self._save(Keys.BANK_BALANCES, balances)

    def save_all(
        self,
        profiles: Optional[Sequence[Profile]] = None,
        cards: Optional[Sequence[CreditCard]] = None,
        statements: Optional[Sequence[Statement]] = None,
        installments: Optional[Sequence[Installment]] = None,
        cash_installments: Optional[Sequence[CashInstallment]] = None,
        one_time_bills: Optional[Sequence[OneTimeBill]] = None,
        bank_balances: Optional[Sequence[BankBalance]] = None,
        cursors: Optional[dict[str, Any]] = None,
    ) -> None:
        """Write several collections and cursors in one atomic store call.

        Collections passed as None are left untouched. ``cursors`` maps
        cursor keys (see Keys) to their raw values. Any write advances the
        modification cursor unless ``cursors`` sets it explicitly.
        """
        values: dict[str, Any] = {}
        for key, items in (
            (Keys.PROFILES, profiles),
            (Keys.CARDS, cards),
            (Keys.STATEMENTS, statements),
            (Keys.INSTALLMENTS, installments),
            (Keys.CASH_INSTALLMENTS, cash_installments),
            (Keys.ONE_TIME_BILLS, one_time_bills),
            (Keys.BANK_BALANCES, bank_balances),
        ):
            if items is not None:
                values[key] = self._encode(key, items)
        if cursors:
            values.update(cursors)
        if values:
            self.store.set_many(self._touch(values))

    # Scalar cursors
    def get_active_profile_id(self) -> Optional[str]:
        return self.store.get(Keys.ACTIVE_PROFILE_ID)

    def save_active_profile_id(self, profile_id: Optional[str]) -> None:
        if profile_id is None:
            self.store.delete(Keys.ACTIVE_PROFILE_ID)
            values = self._touch({})
            if values:
                self.store.set_many(values)
        else:
            self.store.set_many(self._touch({Keys.ACTIVE_PROFILE_ID: profile_id}))

    def get_active_month(self) -> Optional[str]:
        return self.store.get(Keys.ACTIVE_MONTH)

    def save_active_month(self, month_str: str) -> None:
        self.store.set_many(self._touch({Keys.ACTIVE_MONTH: month_str}))

    def get_multi_profile_mode(self) -> bool:
        return bool(self.store.get(Keys.MULTI_PROFILE_MODE))

    def save_multi_profile_mode(self, enabled: bool) -> None:
        self.store.set(Keys.MULTI_PROFILE_MODE, enabled)

    def get_selected_profile_ids(self) -> list[str]:
        return list(self.store.get(Keys.SELECTED_PROFILE_IDS) or [])

    def save_selected_profile_ids(self, profile_ids: Sequence[str]) -> None:
        self.store.set(Keys.SELECTED_PROFILE_IDS, list(profile_ids))

    def get_bank_balance_tracking(self) -> bool:
        return bool(self.store.get(Keys.BANK_BALANCE_TRACKING))

    def save_bank_balance_tracking(self, enabled: bool) -> None:
        self.store.set(Keys.BANK_BALANCE_TRACKING, enabled)

    def get_last_sync(self) -> Optional[datetime]:
        """Return the local modification cursor used by cloud sync."""
        value = self.store.get(Keys.LAST_SYNC)
        if not value:
            return None
        stamp = datetime.fromisoformat(value)
        if stamp.tzinfo is None:
            stamp = stamp.replace(tzinfo=UTC)
        return stamp

    def save_last_sync(self, timestamp: datetime) -> None:
        self.store.set(Keys.LAST_SYNC, timestamp.isoformat())

    def clear_last_sync(self) -> None:
        self.store.delete(Keys.LAST_SYNC)
