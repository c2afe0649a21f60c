"""Tests for single-profile backup and replace-import."""

import json
from decimal import Decimal

import pytest

from billtrack.domain.errors import NotFoundError, ProfileNameCollisionError, ValidationError
from billtrack.sync.profile_backup import ProfileBackupService, profile_backup_filename


@pytest.fixture
def backup_service(repo):
    return ProfileBackupService(repo)


def _exported_renamed(backup_service, profile_id: str, name: str) -> str:
    data = json.loads(backup_service.export_profile(profile_id))
    data["profile"]["name"] = name
    return json.dumps(data)


class TestExportProfile:
    """Tests for exporting a profile."""

    def test_export_contains_only_profile_data(self, backup_service, populated, sample_profile, card_service, profile_service):
        """Test that only the profile's cards and their entities are exported."""
        other = profile_service.create_profile("Other")
        card_service.add_card(other.id, "Chase", "Sapphire", due_day=3, cutoff_day=10)

        data = json.loads(backup_service.export_profile(sample_profile.id))

        assert data["version"] == 1
        assert data["type"] == "profile-backup"
        assert data["profile"] == {"id": sample_profile.id, "name": "My Profile"}
        assert [c["cardName"] for c in data["cards"]] == ["Gold"]
        assert len(data["statements"]) == 1
        assert len(data["installments"]) == 1

    def test_export_unknown_profile(self, backup_service):
        """Test exporting a profile that does not exist."""
        with pytest.raises(NotFoundError):
            backup_service.export_profile("missing")

    def test_backup_filename(self, sample_profile):
        """Test file names derived from profile names."""
        assert profile_backup_filename(sample_profile) == "bill-tracker-my-profile.json"


class TestImportProfile:
    """Tests for importing a profile backup."""

    def test_import_creates_new_profile_with_fresh_ids(self, backup_service, populated, sample_profile, sample_card):
        """Test that importing creates a new profile with new card IDs."""
        content = _exported_renamed(backup_service, sample_profile.id, "Copy")

        result = backup_service.import_profile(content)

        assert result.profile.name == "Copy"
        assert result.profile.id != sample_profile.id
        assert result.card_count == 1
        assert result.statement_count == 1
        assert result.installment_count == 1

        new_cards = [c for c in populated.get_cards() if c.profile_id == result.profile.id]
        assert len(new_cards) == 1
        assert new_cards[0].id != sample_card.id
        assert new_cards[0].card_name == "Gold"

        statements = [s for s in populated.get_statements() if s.card_id == new_cards[0].id]
        assert statements[0].month_str == "2024-03"
        assert statements[0].amount == Decimal("12500.50")
        installments = [i for i in populated.get_installments() if i.card_id == new_cards[0].id]
        assert installments[0].name == "Laptop"

    def test_import_makes_profile_active(self, backup_service, populated, sample_profile):
        """Test that the imported profile becomes active."""
        result = backup_service.import_profile(_exported_renamed(backup_service, sample_profile.id, "Copy"))

        assert populated.get_active_profile_id() == result.profile.id

    def test_original_data_untouched(self, backup_service, populated, sample_profile, sample_card):
        """Test that importing leaves the source profile's data alone."""
        before = [s for s in populated.get_statements() if s.card_id == sample_card.id]

        backup_service.import_profile(_exported_renamed(backup_service, sample_profile.id, "Copy"))

        assert [s for s in populated.get_statements() if s.card_id == sample_card.id] == before

    def test_name_collision_leaves_state_unchanged(self, backup_service, populated, sample_profile):
        """Test that a profile name already in use is rejected without writes."""
        content = backup_service.export_profile(sample_profile.id)
        profiles = populated.get_profiles()
        cards = populated.get_cards()
        statements = populated.get_statements()

        with pytest.raises(ProfileNameCollisionError) as exc_info:
            backup_service.import_profile(content)

        assert 'Profile "My Profile" already exists' in str(exc_info.value)
        assert populated.get_profiles() == profiles
        assert populated.get_cards() == cards
        assert populated.get_statements() == statements

    def test_references_to_unknown_cards_dropped(self, backup_service, populated, sample_profile):
        """Test that statements and installments of cards not in the backup are dropped."""
        data = json.loads(_exported_renamed(backup_service, sample_profile.id, "Copy"))
        data["statements"].append(
            {"id": "s-x", "cardId": "not-in-backup", "monthStr": "2024-04", "amount": 5, "isPaid": False}
        )

        result = backup_service.import_profile(json.dumps(data))

        assert result.statement_count == 1
        assert all(s.card_id != "not-in-backup" for s in populated.get_statements())

    def test_duplicate_statements_upserted(self, backup_service, populated, sample_profile, sample_card):
        """Test that two backup statements for one card and month become one."""
        data = json.loads(_exported_renamed(backup_service, sample_profile.id, "Copy"))
        data["statements"].append(
            {"id": "s-x", "cardId": sample_card.id, "monthStr": "2024-03", "amount": 42, "isPaid": True}
        )

        result = backup_service.import_profile(json.dumps(data))

        new_card = next(c for c in populated.get_cards() if c.profile_id == result.profile.id)
        statements = [s for s in populated.get_statements() if s.card_id == new_card.id]
        assert len(statements) == 1
        assert statements[0].amount == Decimal("42")
        assert statements[0].is_paid is True

    @pytest.mark.parametrize(
        "content",
        [
            "{}",
            '{"profile": {"id": "p", "name": "X"}}',
            '{"cards": []}',
            '{"profile": {"id": "p", "name": "X"}, "cards": "nope"}',
            "not json",
        ],
    )
    def test_invalid_format(self, backup_service, populated, content):
        """Test that documents without profile and cards are rejected."""
        profiles = populated.get_profiles()

        with pytest.raises(ValidationError):
            backup_service.import_profile(content)
        assert populated.get_profiles() == profiles
