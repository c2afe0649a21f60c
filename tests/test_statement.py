"""Tests for monthly statements."""

from decimal import Decimal

import pytest

from billtrack.domain.errors import NotFoundError, ValidationError
from billtrack.domain.statement import upsert_statement


def _keys(repo):
    return [(s.card_id, s.month_str) for s in repo.get_statements()]


class TestUpdateStatement:
    """Tests for inserting and updating statements."""

    def test_insert_defaults(self, statement_service, sample_card):
        """Test that a new statement starts unpaid and unbilled."""
        statement = statement_service.update_statement(sample_card.id, "2024-03", amount=Decimal("100"))

        assert statement.amount == Decimal("100")
        assert statement.is_paid is False
        assert statement.is_unbilled is True

    def test_update_existing(self, statement_service, repo, sample_card):
        """Test that a second update for the same month edits in place."""
        first = statement_service.update_statement(sample_card.id, "2024-03", amount=Decimal("100"))
        second = statement_service.update_statement(sample_card.id, "2024-03", is_unbilled=False)

        assert second.id == first.id
        assert second.amount == Decimal("100")
        assert second.is_unbilled is False
        assert _keys(repo) == [(sample_card.id, "2024-03")]

    def test_one_statement_per_card_month(self, statement_service, card_service, repo, sample_profile, sample_card):
        """Test that repeated updates never create duplicates."""
        other = card_service.add_card(sample_profile.id, "Chase", "Sapphire", due_day=3, cutoff_day=10)
        for card_id, month in [
            (sample_card.id, "2024-03"),
            (sample_card.id, "2024-04"),
            (other.id, "2024-03"),
            (sample_card.id, "2024-03"),
            (other.id, "2024-03"),
        ]:
            statement_service.update_statement(card_id, month, amount=Decimal("1"))

        keys = _keys(repo)
        assert len(keys) == len(set(keys)) == 3

    def test_adjusted_amount_and_due_date(self, statement_service, sample_card):
        """Test storing an adjusted amount and custom due date."""
        statement = statement_service.update_statement(
            sample_card.id, "2024-03", adjusted_amount=Decimal("80"), custom_due_date="2024-04-02"
        )

        assert statement.adjusted_amount == Decimal("80")
        assert statement.custom_due_date == "2024-04-02"

    def test_invalid_month(self, statement_service, sample_card):
        """Test that months must be YYYY-MM."""
        with pytest.raises(ValidationError):
            statement_service.update_statement(sample_card.id, "2024-13", amount=Decimal("1"))

    def test_unknown_card(self, statement_service, sample_profile):
        """Test that statements need an existing card."""
        with pytest.raises(NotFoundError):
            statement_service.update_statement("missing", "2024-03", amount=Decimal("1"))

    @pytest.mark.parametrize("field", ["id", "color"])
    def test_unknown_field(self, statement_service, sample_card, field):
        """Test that only statement fields can be updated."""
        with pytest.raises(ValidationError, match=field):
            statement_service.update_statement(sample_card.id, "2024-03", **{field: "x"})

        assert statement_service.get_statement(sample_card.id, "2024-03") is None

    def test_key_fields_not_updatable(self, sample_card):
        """Test that the card and month of a statement cannot be rewritten."""
        with pytest.raises(ValidationError, match="month_str"):
            upsert_statement([], sample_card.id, "2024-03", {"month_str": "2024-04"})


class TestTogglePaid:
    """Tests for flipping the paid flag."""

    def test_creates_paid_statement(self, statement_service, sample_card):
        """Test that paying a month without a statement records the installment total."""
        statement = statement_service.toggle_paid(sample_card.id, "2024-03", Decimal("5000"))

        assert statement.is_paid is True
        assert statement.is_unbilled is False
        assert statement.amount == Decimal("5000")

    def test_paying_clears_unbilled(self, statement_service, sample_card):
        """Test that marking paid clears the unbilled flag."""
        statement_service.update_statement(sample_card.id, "2024-03", amount=Decimal("100"))

        statement = statement_service.toggle_paid(sample_card.id, "2024-03", Decimal("0"))

        assert statement.is_paid is True
        assert statement.is_unbilled is False
        assert statement.amount == Decimal("100")

    def test_unpay(self, statement_service, sample_card):
        """Test that toggling twice marks unpaid again."""
        statement_service.toggle_paid(sample_card.id, "2024-03", Decimal("0"))

        statement = statement_service.toggle_paid(sample_card.id, "2024-03", Decimal("0"))

        assert statement.is_paid is False


def test_upsert_statement_is_pure(sample_card):
    """Test that upsert returns a new list and leaves the input alone."""
    statements = []

    updated, created = upsert_statement(statements, sample_card.id, "2024-03", {"amount": Decimal("5")})

    assert statements == []
    assert updated == [created]
