"""Tests for installment plans."""

from datetime import date
from decimal import Decimal

import pytest

from billtrack.domain.entities import Installment
from billtrack.domain.errors import NotFoundError, ValidationError
from billtrack.domain.installment import get_installment_status


@pytest.fixture
def laptop():
    return Installment("i1", "c1", "Laptop", Decimal("60000"), 12, Decimal("5000"), date(2024, 1, 10))


class TestInstallmentStatus:
    """Tests for the term of an installment in a given month."""

    @pytest.mark.parametrize(
        "view_date,term,active,finished,upcoming",
        [
            (date(2023, 12, 31), 0, False, False, True),
            (date(2024, 1, 1), 1, True, False, False),
            (date(2024, 6, 15), 6, True, False, False),
            (date(2024, 12, 1), 12, True, False, False),
            (date(2025, 1, 1), 13, False, True, False),
        ],
    )
    def test_status(self, laptop, view_date, term, active, finished, upcoming):
        """Test term numbering and flags across the plan."""
        status = get_installment_status(laptop, view_date)

        assert status.current_term == term
        assert status.total_terms == 12
        assert status.monthly_amount == Decimal("5000")
        assert (status.is_active, status.is_finished, status.is_upcoming) == (active, finished, upcoming)


class TestInstallmentService:
    """Tests for managing installments."""

    def test_default_amortization(self, installment_service, sample_card):
        """Test that the monthly amount divides the principal over the terms."""
        installment = installment_service.add_installment(
            sample_card.id, "Phone", Decimal("1000"), 3, date(2024, 1, 1)
        )

        assert installment.monthly_amortization == Decimal("333.33")

    def test_explicit_amortization(self, installment_service, sample_card):
        """Test that an explicit monthly amount is kept."""
        installment = installment_service.add_installment(
            sample_card.id, "Phone", Decimal("1000"), 3, date(2024, 1, 1), Decimal("350")
        )

        assert installment.monthly_amortization == Decimal("350")

    @pytest.mark.parametrize("principal,terms", [(Decimal("0"), 3), (Decimal("100"), 0)])
    def test_invalid_values(self, installment_service, sample_card, principal, terms):
        """Test that principal and terms must be positive."""
        with pytest.raises(ValidationError):
            installment_service.add_installment(sample_card.id, "x", principal, terms, date(2024, 1, 1))

    def test_unknown_card(self, installment_service, sample_profile):
        """Test that installments need an existing card."""
        with pytest.raises(NotFoundError):
            installment_service.add_installment("missing", "x", Decimal("1"), 1, date(2024, 1, 1))

    def test_active_installments_and_total(self, installment_service, sample_card):
        """Test which installments are billed in a month."""
        installment_service.add_installment(sample_card.id, "Laptop", Decimal("60000"), 12, date(2024, 1, 10))
        installment_service.add_installment(sample_card.id, "Phone", Decimal("3000"), 3, date(2024, 5, 1))

        march = installment_service.active_installments("2024-03")
        assert [(i.name, s.current_term) for i, s in march] == [("Laptop", 3)]
        assert installment_service.card_installment_total(sample_card.id, "2024-06") == Decimal("6000")

    def test_update_and_delete(self, installment_service, populated):
        """Test updating and deleting an installment."""
        installment = installment_service.list_installments()[0]

        updated = installment_service.update_installment(installment.id, name="Work laptop")
        assert updated.name == "Work laptop"

        installment_service.delete_installment(installment.id)
        assert installment_service.get_installment(installment.id) is None
        with pytest.raises(NotFoundError):
            installment_service.delete_installment(installment.id)
