"""Tests for the typed repository over a key-value store."""

from datetime import datetime, timezone, timedelta, UTC
from decimal import Decimal

import pytest

from billtrack.database.memory import InMemoryStore
from billtrack.database.repository import Keys, Repository
from billtrack.domain.entities import BankBalance, CreditCard, Profile, Statement
from billtrack.domain.errors import ValidationError


@pytest.fixture
def memory_repo():
    return Repository(InMemoryStore())


def test_empty_collections(repo):
    """Test that collections read as empty lists before any write."""
    assert repo.get_profiles() == []
    assert repo.get_cards() == []
    assert repo.get_statements() == []
    assert repo.get_bank_balances() == []


def test_collections_round_trip(repo):
    """Test saving and loading entities through the SQLite store."""
    profile = Profile("p1", "Me")
    card = CreditCard("c1", "p1", "BPI", "Gold", 15, 25, "#3b82f6")
    statement = Statement("s1", "c1", "2024-03", Decimal("12500.50"), False, is_unbilled=True)

    repo.save_profiles([profile])
    repo.save_cards([card])
    repo.save_statements([statement])

    assert repo.get_profiles() == [profile]
    assert repo.get_cards() == [card]
    assert repo.get_statements() == [statement]


def test_records_use_wire_keys(memory_repo):
    """Test that stored records use the camelCase export format."""
    memory_repo.save_bank_balances([BankBalance("b1", "p1", "2024-03", Decimal("1000"))])

    assert memory_repo.store.get(Keys.BANK_BALANCES) == [
        {"id": "b1", "profileId": "p1", "monthStr": "2024-03", "balance": 1000}
    ]


def test_invalid_stored_record(memory_repo):
    """Test that a corrupt stored record is reported."""
    memory_repo.store.set(Keys.CARDS, [{"id": "c1"}])

    with pytest.raises(ValidationError):
        memory_repo.get_cards()


class TestSaveAll:
    """Tests for multi-collection writes."""

    def test_writes_given_collections_and_cursors(self, memory_repo):
        """Test that collections and cursors are written together."""
        memory_repo.save_all(
            profiles=[Profile("p1", "Me")],
            cards=[],
            cursors={Keys.ACTIVE_PROFILE_ID: "p1"},
        )

        assert memory_repo.get_profiles() == [Profile("p1", "Me")]
        assert memory_repo.store.get(Keys.CARDS) == []
        assert memory_repo.get_active_profile_id() == "p1"

    def test_none_leaves_collection_untouched(self, memory_repo):
        """Test that omitted collections keep their values."""
        memory_repo.save_profiles([Profile("p1", "Me")])

        memory_repo.save_all(cards=[])

        assert memory_repo.get_profiles() == [Profile("p1", "Me")]

    def test_nothing_to_write(self, memory_repo):
        """Test that an empty call writes nothing."""
        memory_repo.save_all()

        assert memory_repo.store.keys() == []


class TestCursors:
    """Tests for scalar cursors."""

    def test_defaults(self, repo):
        """Test cursor values before anything is stored."""
        assert repo.get_active_profile_id() is None
        assert repo.get_active_month() is None
        assert repo.get_multi_profile_mode() is False
        assert repo.get_selected_profile_ids() == []
        assert repo.get_bank_balance_tracking() is False
        assert repo.get_last_sync() is None

    def test_clear_active_profile(self, repo):
        """Test that saving None removes the active profile."""
        repo.save_active_profile_id("p1")
        repo.save_active_profile_id(None)

        assert repo.get_active_profile_id() is None

    def test_last_sync_round_trip(self, repo):
        """Test that the last-sync time keeps its instant and precision."""
        stamp = datetime(2024, 3, 1, 12, 0, 0, 123456, tzinfo=UTC)
        repo.save_last_sync(stamp)

        assert repo.get_last_sync() == stamp

        repo.clear_last_sync()
        assert repo.get_last_sync() is None

    def test_last_sync_other_timezone(self, repo):
        """Test that an offset timestamp compares equal to its UTC instant."""
        stamp = datetime(2024, 3, 1, 20, 0, tzinfo=timezone(timedelta(hours=8)))
        repo.save_last_sync(stamp)

        assert repo.get_last_sync() == datetime(2024, 3, 1, 12, 0, tzinfo=UTC)

    def test_naive_last_sync_read_as_utc(self, repo):
        """Test that a stored timestamp without offset is treated as UTC."""
        repo.store.set(Keys.LAST_SYNC, "2024-03-01T12:00:00")

        assert repo.get_last_sync() == datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


class TestModificationCursor:
    """Tests for the last-sync cursor moving on local writes."""

    def test_writes_without_cursor_leave_it_unset(self, repo):
        """Test that nothing is stamped before the first sync."""
        repo.save_profiles([Profile("p1", "Me")])
        repo.save_active_month("2024-03")

        assert repo.get_last_sync() is None

    def test_collection_write_advances_cursor(self, repo, clock):
        """Test that a write after a sync stamps the current time."""
        repo.save_last_sync(clock.now)
        clock.now = clock.now + timedelta(minutes=10)

        repo.save_profiles([Profile("p1", "Me")])

        assert repo.get_last_sync() == clock.now

    @pytest.mark.parametrize(
        "write",
        [
            lambda r: r.save_cards([]),
            lambda r: r.save_active_profile_id("p1"),
            lambda r: r.save_active_profile_id(None),
            lambda r: r.save_active_month("2024-04"),
            lambda r: r.save_all(statements=[]),
        ],
    )
    def test_cursor_strictly_increases(self, repo, clock, write):
        """Test that a write stamps later than the cursor even if the clock lags."""
        synced = clock.now + timedelta(hours=1)
        repo.save_last_sync(synced)

        write(repo)

        assert repo.get_last_sync() == synced + timedelta(microseconds=1)

    def test_explicit_cursor_in_save_all(self, repo, clock):
        """Test that save_all keeps a cursor value passed by the caller."""
        repo.save_last_sync(clock.now)
        stamp = datetime(2023, 1, 1, tzinfo=UTC)

        repo.save_all(profiles=[], cursors={Keys.LAST_SYNC: stamp.isoformat()})

        assert repo.get_last_sync() == stamp

    def test_preferences_do_not_advance_cursor(self, repo, clock):
        """Test that view settings, which are not exported, leave the cursor."""
        repo.save_last_sync(clock.now)
        clock.now = clock.now + timedelta(minutes=10)

        repo.save_multi_profile_mode(True)
        repo.save_selected_profile_ids(["p1"])

        assert repo.get_last_sync() == clock.now - timedelta(minutes=10)
