"""Tests for card management."""

from decimal import Decimal

import pytest

from billtrack.domain.errors import NotFoundError, ValidationError


class TestAddCard:
    """Tests for adding cards."""

    def test_add_card(self, card_service, sample_profile):
        """Test adding a card with the default color."""
        card = card_service.add_card(sample_profile.id, " BPI ", "Gold", due_day=15, cutoff_day=25)

        assert card.bank_name == "BPI"
        assert card.profile_id == sample_profile.id
        assert card.color == "#3b82f6"
        assert card_service.get_card(card.id) == card

    @pytest.mark.parametrize("due_day,cutoff_day", [(0, 10), (32, 10), (10, 0), (10, 32)])
    def test_day_out_of_range(self, card_service, sample_profile, due_day, cutoff_day):
        """Test that days must fall within 1-31."""
        with pytest.raises(ValidationError):
            card_service.add_card(sample_profile.id, "BPI", "Gold", due_day=due_day, cutoff_day=cutoff_day)

    def test_unknown_profile(self, card_service, sample_profile):
        """Test that cards need an existing profile."""
        with pytest.raises(NotFoundError):
            card_service.add_card("missing", "BPI", "Gold", due_day=15, cutoff_day=25)

    def test_list_by_profile(self, card_service, profile_service, sample_card):
        """Test filtering cards by profile."""
        other = profile_service.create_profile("Other")
        other_card = card_service.add_card(other.id, "Chase", "Sapphire", due_day=3, cutoff_day=10)

        assert card_service.list_cards([other.id]) == [other_card]
        assert len(card_service.list_cards()) == 2


class TestUpdateCard:
    """Tests for updating cards."""

    def test_update_fields(self, card_service, sample_card):
        """Test updating several fields."""
        updated = card_service.update_card(sample_card.id, card_name="Platinum", due_day=20)

        assert updated.card_name == "Platinum"
        assert updated.due_day == 20
        assert updated.bank_name == "BPI"

    def test_update_profile_refused(self, card_service, sample_card):
        """Test that ownership changes go through transfer."""
        with pytest.raises(ValidationError):
            card_service.update_card(sample_card.id, profile_id="other")

    def test_update_unknown(self, card_service, sample_profile):
        """Test updating a missing card."""
        with pytest.raises(NotFoundError):
            card_service.update_card("missing", card_name="x")


class TestTransferCard:
    """Tests for moving cards between profiles."""

    def test_transfer_keeps_history(self, card_service, profile_service, statement_service, populated, sample_card):
        """Test that statements follow a transferred card."""
        other = profile_service.create_profile("Other")

        moved = card_service.transfer_card(sample_card.id, other.id)

        assert moved.id == sample_card.id
        assert moved.profile_id == other.id
        assert statement_service.get_statement(sample_card.id, "2024-03").amount == Decimal("12500.50")

    def test_transfer_to_unknown_profile(self, card_service, sample_card):
        """Test that the target profile must exist."""
        with pytest.raises(NotFoundError):
            card_service.transfer_card(sample_card.id, "missing")


class TestDeleteCard:
    """Tests for the two-step card deletion."""

    def test_plan_counts_dependents(self, card_service, populated, sample_card):
        """Test that the plan reports what would be removed."""
        plan = card_service.plan_card_deletion(sample_card.id)

        assert plan.card == sample_card
        assert plan.statement_count == 1
        assert plan.installment_count == 1
        assert plan.cash_installment_count == 1
        assert plan.one_time_bill_count == 1

    def test_planning_changes_nothing(self, card_service, populated, sample_card):
        """Test that making a plan does not delete anything."""
        card_service.plan_card_deletion(sample_card.id)

        assert card_service.get_card(sample_card.id) == sample_card
        assert len(populated.get_statements()) == 1

    def test_delete_cascades(self, card_service, populated, sample_card):
        """Test that deleting a card removes everything billed to it."""
        card_service.delete_card(card_service.plan_card_deletion(sample_card.id))

        assert populated.get_cards() == []
        assert populated.get_statements() == []
        assert populated.get_installments() == []
        assert populated.get_cash_installments() == []
        assert populated.get_one_time_bills() == []

    def test_delete_keeps_other_cards(self, card_service, statement_service, populated, sample_profile, sample_card):
        """Test that other cards' data survives."""
        other = card_service.add_card(sample_profile.id, "Chase", "Sapphire", due_day=3, cutoff_day=10)
        statement_service.update_statement(other.id, "2024-03", amount=Decimal("1"))

        card_service.delete_card(card_service.plan_card_deletion(sample_card.id))

        assert [s.card_id for s in populated.get_statements()] == [other.id]

    def test_stale_plan(self, card_service, sample_card):
        """Test that a plan for an already deleted card fails."""
        plan = card_service.plan_card_deletion(sample_card.id)
        card_service.delete_card(plan)

        with pytest.raises(NotFoundError):
            card_service.delete_card(plan)
