"""Monthly summary domain service."""

from decimal import Decimal
from typing import Optional, Sequence

from billtrack.database.repository import Repository
from billtrack.domain.entities import MonthlyTotals
from billtrack.domain.installment import InstallmentService
from billtrack.domain.profile import ProfileService
from billtrack.domain.statement import find_statement


class SummaryService:
    """Service for building dashboard totals."""

    def __init__(self, repo: Repository):
        """Initialize summary service.

        Args:
            repo: Repository instance
        """
        self.repo = repo
        self.installment_service = InstallmentService(repo)
        self.profile_service = ProfileService(repo)

    def monthly_totals(
        self, month_str: str, profile_ids: Optional[Sequence[str]] = None
    ) -> MonthlyTotals:
        """Compute bill, unpaid and installment totals for a month.

        A card's bill is its statement amount, or its installment total when
        the month has no statement yet. Unpaid amounts use the statement's
        adjusted amount when one is set.

        Args:
            month_str: Month in "YYYY-MM" form
            profile_ids: Profiles to include; defaults to the visible profiles

        Returns:
            MonthlyTotals for the selected cards
        """
        if profile_ids is None:
            profile_ids = self.profile_service.visible_profile_ids()
        wanted = set(profile_ids)
        cards = [c for c in self.repo.get_cards() if c.profile_id in wanted]
        card_ids = [c.id for c in cards]

        per_card: dict[str, Decimal] = {card_id: Decimal("0") for card_id in card_ids}
        for installment, _ in self.installment_service.active_installments(month_str, card_ids):
            per_card[installment.card_id] += installment.monthly_amortization

        statements = [s for s in self.repo.get_statements() if s.month_str == month_str]
        bill_total = Decimal("0")
        unpaid_total = Decimal("0")
        for card in cards:
            statement = find_statement(statements, card.id, month_str)
            effective = statement.amount if statement is not None else per_card[card.id]
            bill_total += effective
            if statement is None or not statement.is_paid:
                if statement is not None and statement.adjusted_amount is not None:
                    unpaid_total += statement.adjusted_amount
                else:
                    unpaid_total += effective

        return MonthlyTotals(
            month_str=month_str,
            bill_total=bill_total,
            unpaid_total=unpaid_total,
            installment_total=sum(per_card.values(), Decimal("0")),
        )
