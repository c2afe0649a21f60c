"""Statement domain service.

A card has at most one statement per month. Every mutation looks the
statement up by (card_id, month_str) before deciding between insert and
update.
"""

from dataclasses import replace
from decimal import Decimal
from typing import Any, Optional

from billtrack.database.repository import Repository
from billtrack.domain.entities import Statement
from billtrack.domain.errors import NotFoundError, ValidationError, card_not_found
from billtrack.utils.dates import month_start
from billtrack.utils.ids import new_id

_UPDATABLE_FIELDS = {"amount", "is_paid", "is_unbilled", "custom_due_date", "adjusted_amount"}


def find_statement(
    statements: list[Statement], card_id: str, month_str: str
) -> Optional[Statement]:
    """Find the statement for a card and month."""
    for statement in statements:
        if statement.card_id == card_id and statement.month_str == month_str:
            return statement
    return None


def upsert_statement(
    statements: list[Statement], card_id: str, month_str: str, updates: dict[str, Any]
) -> tuple[list[Statement], Statement]:
    """Apply updates to the (card_id, month_str) statement, creating it if needed.

    New statements start as unpaid and unbilled with a zero amount unless
    the updates say otherwise.

    Returns:
        The new statement list and the inserted or updated statement
    """
    unknown = set(updates) - _UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot update statement fields: {', '.join(sorted(unknown))}")

    existing = find_statement(statements, card_id, month_str)
    if existing is not None:
        updated = replace(existing, **updates)
        return [updated if s.id == existing.id else s for s in statements], updated

    fields: dict[str, Any] = {"amount": Decimal("0"), "is_paid": False, "is_unbilled": True}
    fields.update(updates)
    created = Statement(id=new_id(), card_id=card_id, month_str=month_str, **fields)
    return [*statements, created], created


class StatementService:
    """Service for managing monthly card statements."""

    def __init__(self, repo: Repository):
        """Initialize statement service.

        Args:
            repo: Repository instance
        """
        self.repo = repo

    def _validate(self, card_id: str, month_str: str) -> None:
        try:
            month_start(month_str)
        except ValueError as e:
            raise ValidationError(str(e))
        if not any(c.id == card_id for c in self.repo.get_cards()):
            raise NotFoundError(card_not_found(card_id))

    def update_statement(self, card_id: str, month_str: str, **updates: Any) -> Statement:
        """Insert or update the statement of a card for a month.

        Args:
            card_id: Card ID
            month_str: Month in "YYYY-MM" form
            **updates: amount, is_paid, is_unbilled, custom_due_date,
                adjusted_amount

        Returns:
            The stored statement

        Raises:
            NotFoundError: If card doesn't exist
            ValidationError: If month or fields are invalid
        """
        self._validate(card_id, month_str)
        statements, statement = upsert_statement(
            self.repo.get_statements(), card_id, month_str, updates
        )
        self.repo.save_statements(statements)
        return statement

    def toggle_paid(self, card_id: str, month_str: str, installment_total: Decimal) -> Statement:
        """Flip the paid flag of a month's statement.

        Marking paid also clears the unbilled flag. When no statement exists
        yet, one is created as paid with the card's installment total as its
        amount.
        """
        self._validate(card_id, month_str)
        statements = self.repo.get_statements()
        existing = find_statement(statements, card_id, month_str)
        if existing is None:
            updates: dict[str, Any] = {
                "amount": installment_total,
                "is_paid": True,
                "is_unbilled": False,
            }
        elif not existing.is_paid:
            updates = {"is_paid": True, "is_unbilled": False}
        else:
            updates = {"is_paid": False}

        statements, statement = upsert_statement(statements, card_id, month_str, updates)
        self.repo.save_statements(statements)
        return statement

    def get_statement(self, card_id: str, month_str: str) -> Optional[Statement]:
        """Get the statement of a card for a month."""
        return find_statement(self.repo.get_statements(), card_id, month_str)

    def list_for_month(self, month_str: str) -> list[Statement]:
        """List all statements of a month."""
        return [s for s in self.repo.get_statements() if s.month_str == month_str]

    def delete_statements_for_card(self, card_id: str) -> int:
        """Delete every statement of a card.

        Returns:
            Number of statements removed
        """
        statements = self.repo.get_statements()
        kept = [s for s in statements if s.card_id != card_id]
        self.repo.save_statements(kept)
        return len(statements) - len(kept)
