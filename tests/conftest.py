"""Shared pytest fixtures for billtrack tests."""

import tempfile
import os
from datetime import date, datetime, UTC
from decimal import Decimal
import pytest
from click.testing import CliRunner

from billtrack.database.factories import create_sqlite_store
from billtrack.database.repository import Repository
from billtrack.domain.bank_balance import BankBalanceService
from billtrack.domain.bills import BillService
from billtrack.domain.card import CardService
from billtrack.domain.installment import InstallmentService
from billtrack.domain.profile import ProfileService
from billtrack.domain.statement import StatementService
from billtrack.domain.summary import SummaryService
from billtrack.sync.crypto import EncryptionCodec
from billtrack.sync.envelope import SyncService

# Low iteration count keeps key derivation fast in tests
TEST_ITERATIONS = 1000


class FakeClock:
    """Clock returning a fixed time that tests can move forward."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def temp_store():
    """Create a temporary SQLite store for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    store = create_sqlite_store(database_path=db_path)
    # Store the path for tests that need it
    store.database_path = db_path
    store.connect()
    store.initialize_schema()

    yield store

    # Cleanup
    store.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def repo(temp_store, clock):
    """Create a Repository over the temporary store."""
    return Repository(temp_store, clock=clock)


@pytest.fixture
def profile_service(repo):
    return ProfileService(repo)


@pytest.fixture
def card_service(repo):
    return CardService(repo)


@pytest.fixture
def statement_service(repo):
    return StatementService(repo)


@pytest.fixture
def installment_service(repo):
    return InstallmentService(repo)


@pytest.fixture
def bill_service(repo):
    return BillService(repo)


@pytest.fixture
def bank_balance_service(repo):
    return BankBalanceService(repo)


@pytest.fixture
def summary_service(repo):
    return SummaryService(repo)


@pytest.fixture
def sample_profile(profile_service):
    """The default profile, seeded as on first run."""
    return profile_service.ensure_default_profile()


@pytest.fixture
def sample_card(card_service, sample_profile):
    """Create a sample card on the default profile."""
    return card_service.add_card(sample_profile.id, "BPI", "Gold", due_day=15, cutoff_day=25)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def codec():
    """Encryption codec with a low iteration count."""
    return EncryptionCodec(iterations=TEST_ITERATIONS)


@pytest.fixture
def sync_service(repo, codec, clock):
    return SyncService(repo, codec=codec, clock=clock)


@pytest.fixture
def populated(repo, sample_profile, sample_card, statement_service, installment_service, bill_service):
    """Repository with one card carrying a statement, an installment and bills."""
    statement_service.update_statement(sample_card.id, "2024-03", amount=Decimal("12500.50"))
    installment_service.add_installment(
        sample_card.id, "Laptop", Decimal("60000"), 12, date(2024, 1, 10)
    )
    bill_service.add_one_time_bill(sample_card.id, "Annual fee", Decimal("2500"), "2024-03-20")
    bill_service.add_cash_installment(sample_card.id, "Appliance", Decimal("1500"), "2024-03-05", term="1/6")
    return repo


@pytest.fixture
def cli_runner():
    """Create a CliRunner for testing CLI commands."""
    return CliRunner()
