"""Installment domain service."""

from dataclasses import replace
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional, Sequence

from billtrack.database.repository import Repository
from billtrack.domain.entities import Installment, InstallmentStatus
from billtrack.domain.errors import (
    NotFoundError,
    ValidationError,
    card_not_found,
    installment_not_found,
)
from billtrack.utils.dates import month_difference, month_start
from billtrack.utils.ids import new_id

_UPDATABLE_FIELDS = {
    "card_id",
    "name",
    "total_principal",
    "terms",
    "monthly_amortization",
    "start_date",
}


def get_installment_status(installment: Installment, view_date: date) -> InstallmentStatus:
    """Compute where an installment stands in the month of view_date.

    The start month is term 1; the installment is active through term
    ``terms``, upcoming before it and finished after it.
    """
    current_term = month_difference(view_date, installment.start_date) + 1
    return InstallmentStatus(
        current_term=current_term,
        total_terms=installment.terms,
        monthly_amount=installment.monthly_amortization,
        is_active=1 <= current_term <= installment.terms,
        is_finished=current_term > installment.terms,
        is_upcoming=current_term < 1,
    )


class InstallmentService:
    """Service for managing installment plans."""

    def __init__(self, repo: Repository):
        """Initialize installment service.

        Args:
            repo: Repository instance
        """
        self.repo = repo

    def add_installment(
        self,
        card_id: str,
        name: str,
        total_principal: Decimal,
        terms: int,
        start_date: date,
        monthly_amortization: Optional[Decimal] = None,
    ) -> Installment:
        """Add an installment plan to a card.

        When monthly_amortization is omitted it is the principal divided
        evenly over the terms, rounded to cents.

        Raises:
            NotFoundError: If card doesn't exist
            ValidationError: If terms or amounts are invalid
        """
        if not any(c.id == card_id for c in self.repo.get_cards()):
            raise NotFoundError(card_not_found(card_id))
        if terms < 1:
            raise ValidationError("Installment terms must be at least 1")
        if total_principal <= 0:
            raise ValidationError("Installment principal must be positive")
        if monthly_amortization is None:
            monthly_amortization = (total_principal / terms).quantize(
                Decimal("0.01"), rounding=ROUND_HALF_UP
            )

        installment = Installment(
            id=new_id(),
            card_id=card_id,
            name=name.strip(),
            total_principal=total_principal,
            terms=terms,
            monthly_amortization=monthly_amortization,
            start_date=start_date,
        )
        self.repo.save_installments([*self.repo.get_installments(), installment])
        return installment

    def get_installment(self, installment_id: str) -> Optional[Installment]:
        """Get installment by ID."""
        for installment in self.repo.get_installments():
            if installment.id == installment_id:
                return installment
        return None

    def list_installments(self, card_ids: Optional[Sequence[str]] = None) -> list[Installment]:
        """List installments, optionally restricted to some cards."""
        installments = self.repo.get_installments()
        if card_ids is None:
            return installments
        wanted = set(card_ids)
        return [i for i in installments if i.card_id in wanted]

    def update_installment(self, installment_id: str, **updates: Any) -> Installment:
        """Update installment fields.

        Raises:
            NotFoundError: If installment or a new card doesn't exist
            ValidationError: If a field is unknown
        """
        unknown = set(updates) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update installment fields: {', '.join(sorted(unknown))}")
        if "card_id" in updates and not any(c.id == updates["card_id"] for c in self.repo.get_cards()):
            raise NotFoundError(card_not_found(updates["card_id"]))

        installments = self.repo.get_installments()
        for index, installment in enumerate(installments):
            if installment.id == installment_id:
                updated = replace(installment, **updates)
                installments[index] = updated
                self.repo.save_installments(installments)
                return updated
        raise NotFoundError(installment_not_found(installment_id))

    def delete_installment(self, installment_id: str) -> None:
        """Delete an installment.

        Raises:
            NotFoundError: If installment doesn't exist
        """
        installments = self.repo.get_installments()
        kept = [i for i in installments if i.id != installment_id]
        if len(kept) == len(installments):
            raise NotFoundError(installment_not_found(installment_id))
        self.repo.save_installments(kept)

    def active_installments(
        self, month_str: str, card_ids: Optional[Sequence[str]] = None
    ) -> list[tuple[Installment, InstallmentStatus]]:
        """Installments billed in a month, with their status."""
        view_date = month_start(month_str)
        result = []
        for installment in self.list_installments(card_ids):
            status = get_installment_status(installment, view_date)
            if status.is_active:
                result.append((installment, status))
        return result

    def card_installment_total(self, card_id: str, month_str: str) -> Decimal:
        """Sum of monthly amortizations billed to a card in a month."""
        return sum(
            (i.monthly_amortization for i, _ in self.active_installments(month_str, [card_id])),
            Decimal("0"),
        )
