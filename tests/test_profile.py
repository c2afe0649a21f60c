"""Tests for profile management."""

from decimal import Decimal

import pytest

from billtrack.domain.errors import ConflictError, DependencyError, NotFoundError, ValidationError
from billtrack.domain.profile import DEFAULT_PROFILE_NAME


class TestDefaultProfile:
    """Tests for first-run profile seeding."""

    def test_seeds_default_profile(self, profile_service, repo):
        """Test that an empty store gets one active default profile."""
        profile = profile_service.ensure_default_profile()

        assert profile.name == DEFAULT_PROFILE_NAME
        assert repo.get_profiles() == [profile]
        assert repo.get_active_profile_id() == profile.id

    def test_idempotent(self, profile_service):
        """Test that seeding twice keeps the same profile."""
        first = profile_service.ensure_default_profile()
        second = profile_service.ensure_default_profile()

        assert first == second
        assert len(profile_service.list_profiles()) == 1

    def test_repairs_dangling_active_profile(self, profile_service, repo, sample_profile):
        """Test that an active ID pointing nowhere falls back to the first profile."""
        repo.save_active_profile_id("gone")

        assert profile_service.ensure_default_profile() == sample_profile
        assert repo.get_active_profile_id() == sample_profile.id


class TestCreateRename:
    """Tests for creating and renaming profiles."""

    def test_create_makes_active(self, profile_service, sample_profile):
        """Test that a new profile becomes the active one."""
        profile = profile_service.create_profile("  Business  ")

        assert profile.name == "Business"
        assert profile_service.get_active_profile() == profile

    def test_create_duplicate_name(self, profile_service, sample_profile):
        """Test that profile names are unique."""
        with pytest.raises(ConflictError) as exc_info:
            profile_service.create_profile(DEFAULT_PROFILE_NAME)
        assert "already exists" in str(exc_info.value)

    def test_create_empty_name(self, profile_service):
        """Test that a blank name is rejected."""
        with pytest.raises(ValidationError):
            profile_service.create_profile("   ")

    def test_rename(self, profile_service, sample_profile):
        """Test renaming a profile."""
        renamed = profile_service.rename_profile(sample_profile.id, "Personal")

        assert renamed.id == sample_profile.id
        assert profile_service.get_profile(sample_profile.id).name == "Personal"

    def test_rename_to_own_name(self, profile_service, sample_profile):
        """Test that keeping the same name is not a conflict."""
        assert profile_service.rename_profile(sample_profile.id, DEFAULT_PROFILE_NAME).name == DEFAULT_PROFILE_NAME

    def test_rename_conflict(self, profile_service, sample_profile):
        """Test that renaming onto another profile's name fails."""
        other = profile_service.create_profile("Other")

        with pytest.raises(ConflictError):
            profile_service.rename_profile(other.id, DEFAULT_PROFILE_NAME)

    def test_set_active_unknown(self, profile_service, sample_profile):
        """Test that only existing profiles can be made active."""
        with pytest.raises(NotFoundError):
            profile_service.set_active_profile("missing")


class TestDeleteProfile:
    """Tests for deleting profiles."""

    def test_delete_empty_profile(self, profile_service, repo, sample_profile):
        """Test deleting a profile without cards."""
        other = profile_service.create_profile("Other")

        removed = profile_service.delete_profile(other.id)

        assert removed["cards"] == 0
        assert [p.id for p in repo.get_profiles()] == [sample_profile.id]
        assert repo.get_active_profile_id() == sample_profile.id

    def test_delete_only_profile(self, profile_service, sample_profile):
        """Test that the last profile cannot be deleted."""
        with pytest.raises(DependencyError):
            profile_service.delete_profile(sample_profile.id)

    def test_delete_with_cards_blocked(self, profile_service, card_service, repo, sample_profile):
        """Test that a profile owning cards needs cascade."""
        other = profile_service.create_profile("Other")
        card_service.add_card(other.id, "Chase", "Sapphire", due_day=3, cutoff_day=10)

        with pytest.raises(DependencyError) as exc_info:
            profile_service.delete_profile(other.id)

        assert "1 card." in str(exc_info.value)
        assert len(repo.get_profiles()) == 2

    def test_cascade_removes_owned_data(
        self, profile_service, card_service, statement_service, bank_balance_service, repo, populated, sample_profile, sample_card
    ):
        """Test that cascade removes the profile's cards and everything under them."""
        other = profile_service.create_profile("Other")
        other_card = card_service.add_card(other.id, "Chase", "Sapphire", due_day=3, cutoff_day=10)
        statement_service.update_statement(other_card.id, "2024-03", amount=Decimal("10"))
        bank_balance_service.set_balance(sample_profile.id, "2024-03", Decimal("5000"))
        profile_service.toggle_profile_selection(sample_profile.id)

        removed = profile_service.delete_profile(sample_profile.id, cascade=True)

        assert removed == {
            "cards": 1,
            "statements": 1,
            "installments": 1,
            "cash_installments": 1,
            "one_time_bills": 1,
            "bank_balances": 1,
        }
        assert [c.id for c in repo.get_cards()] == [other_card.id]
        assert [s.card_id for s in repo.get_statements()] == [other_card.id]
        assert repo.get_installments() == []
        assert repo.get_selected_profile_ids() == []
        assert repo.get_active_profile_id() == other.id

    def test_delete_active_moves_cursor(self, profile_service, repo, sample_profile):
        """Test that deleting the active profile activates a remaining one."""
        other = profile_service.create_profile("Other")
        assert repo.get_active_profile_id() == other.id

        profile_service.delete_profile(other.id)

        assert repo.get_active_profile_id() == sample_profile.id

    def test_delete_unknown(self, profile_service, sample_profile):
        """Test deleting a profile that does not exist."""
        with pytest.raises(NotFoundError):
            profile_service.delete_profile("missing")


class TestMultiProfile:
    """Tests for viewing several profiles at once."""

    def test_visible_is_active_by_default(self, profile_service, sample_profile):
        """Test that only the active profile is visible in single mode."""
        profile_service.create_profile("Other")
        profile_service.set_active_profile(sample_profile.id)

        assert profile_service.visible_profile_ids() == [sample_profile.id]

    def test_selection_in_multi_mode(self, profile_service, sample_profile):
        """Test that multi-profile mode shows the selection."""
        other = profile_service.create_profile("Other")
        profile_service.set_multi_profile_mode(True)
        profile_service.toggle_profile_selection(sample_profile.id)
        selected = profile_service.toggle_profile_selection(other.id)

        assert selected == [sample_profile.id, other.id]
        assert profile_service.visible_profile_ids() == [sample_profile.id, other.id]

    def test_toggle_removes(self, profile_service, sample_profile):
        """Test that toggling twice deselects."""
        profile_service.toggle_profile_selection(sample_profile.id)

        assert profile_service.toggle_profile_selection(sample_profile.id) == []

    def test_empty_selection_falls_back_to_active(self, profile_service, sample_profile):
        """Test that multi mode with nothing selected shows the active profile."""
        profile_service.set_multi_profile_mode(True)

        assert profile_service.visible_profile_ids() == [sample_profile.id]
