"""One-time bill and cash installment domain service."""

from dataclasses import replace
from decimal import Decimal
from typing import Optional, Sequence

from billtrack.database.repository import Repository
from billtrack.domain.entities import CashInstallment, OneTimeBill
from billtrack.domain.errors import NotFoundError, ValidationError, bill_not_found, card_not_found
from billtrack.utils.ids import new_id


class BillService:
    """Service for bills paid outside the monthly card statement."""

    def __init__(self, repo: Repository):
        """Initialize bill service.

        Args:
            repo: Repository instance
        """
        self.repo = repo

    def _check(self, card_id: str, name: str, amount: Decimal, due_date: str) -> None:
        if not any(c.id == card_id for c in self.repo.get_cards()):
            raise NotFoundError(card_not_found(card_id))
        if not name.strip() or not due_date:
            raise ValidationError("Name and due date are required")
        if amount <= 0:
            raise ValidationError("Please enter a valid amount")

    def add_one_time_bill(
        self, card_id: str, name: str, amount: Decimal, due_date: str
    ) -> OneTimeBill:
        """Add an unpaid one-time bill to a card."""
        self._check(card_id, name, amount, due_date)
        bill = OneTimeBill(
            id=new_id(),
            card_id=card_id,
            name=name.strip(),
            amount=amount,
            due_date=due_date,
            is_paid=False,
        )
        self.repo.save_one_time_bills([*self.repo.get_one_time_bills(), bill])
        return bill

    def list_one_time_bills(self, card_ids: Optional[Sequence[str]] = None) -> list[OneTimeBill]:
        bills = self.repo.get_one_time_bills()
        if card_ids is None:
            return bills
        return [b for b in bills if b.card_id in set(card_ids)]

    def toggle_one_time_bill_paid(self, bill_id: str) -> OneTimeBill:
        bills = self.repo.get_one_time_bills()
        for index, bill in enumerate(bills):
            if bill.id == bill_id:
                bills[index] = replace(bill, is_paid=not bill.is_paid)
                self.repo.save_one_time_bills(bills)
                return bills[index]
        raise NotFoundError(bill_not_found(bill_id))

    def delete_one_time_bill(self, bill_id: str) -> None:
        bills = self.repo.get_one_time_bills()
        kept = [b for b in bills if b.id != bill_id]
        if len(kept) == len(bills):
            raise NotFoundError(bill_not_found(bill_id))
        self.repo.save_one_time_bills(kept)

    def add_cash_installment(
        self,
        card_id: str,
        name: str,
        amount: Decimal,
        due_date: str,
        term: Optional[str] = None,
        installment_id: Optional[str] = None,
    ) -> CashInstallment:
        """Add an unpaid cash installment to a card."""
        self._check(card_id, name, amount, due_date)
        cash = CashInstallment(
            id=new_id(),
            card_id=card_id,
            name=name.strip(),
            amount=amount,
            due_date=due_date,
            is_paid=False,
            term=term,
            installment_id=installment_id,
        )
        self.repo.save_cash_installments([*self.repo.get_cash_installments(), cash])
        return cash

    def list_cash_installments(
        self, card_ids: Optional[Sequence[str]] = None
    ) -> list[CashInstallment]:
        cash_installments = self.repo.get_cash_installments()
        if card_ids is None:
            return cash_installments
        return [c for c in cash_installments if c.card_id in set(card_ids)]

    def toggle_cash_installment_paid(self, cash_installment_id: str) -> CashInstallment:
        cash_installments = self.repo.get_cash_installments()
        for index, cash in enumerate(cash_installments):
            if cash.id == cash_installment_id:
                cash_installments[index] = replace(cash, is_paid=not cash.is_paid)
                self.repo.save_cash_installments(cash_installments)
                return cash_installments[index]
        raise NotFoundError(bill_not_found(cash_installment_id))

    def delete_cash_installment(self, cash_installment_id: str) -> None:
        cash_installments = self.repo.get_cash_installments()
        kept = [c for c in cash_installments if c.id != cash_installment_id]
        if len(kept) == len(cash_installments):
            raise NotFoundError(bill_not_found(cash_installment_id))
        self.repo.save_cash_installments(kept)
