"""Credit card domain service."""

import logging
from dataclasses import replace
from typing import Any, Optional, Sequence

from billtrack.database.repository import Repository
from billtrack.domain.entities import CardDeletionPlan, CreditCard
from billtrack.domain.errors import (
    NotFoundError,
    ValidationError,
    card_not_found,
    profile_not_found,
)
from billtrack.utils.ids import new_id

logger = logging.getLogger(__name__)

DEFAULT_CARD_COLOR = "#3b82f6"

_UPDATABLE_FIELDS = {"bank_name", "card_name", "due_day", "cutoff_day", "color"}


def _validate_day(field: str, value: int) -> None:
    if not 1 <= value <= 31:
        raise ValidationError(f"{field} must be between 1 and 31, got {value}")


class CardService:
    """Service for managing credit cards."""

    def __init__(self, repo: Repository):
        """Initialize card service.

        Args:
            repo: Repository instance
        """
        self.repo = repo

    def _require_profile(self, profile_id: str) -> None:
        if not any(p.id == profile_id for p in self.repo.get_profiles()):
            raise NotFoundError(profile_not_found(profile_id))

    def add_card(
        self,
        profile_id: str,
        bank_name: str,
        card_name: str,
        due_day: int,
        cutoff_day: int,
        color: str = DEFAULT_CARD_COLOR,
    ) -> CreditCard:
        """Add a card to a profile.

        Args:
            profile_id: Owning profile ID
            bank_name: Issuing bank
            card_name: Card display name
            due_day: Day of month the bill is due (1-31)
            cutoff_day: Statement cutoff day (1-31)
            color: Display color

        Returns:
            The new card

        Raises:
            NotFoundError: If profile doesn't exist
            ValidationError: If a day is out of range or a name is empty
        """
        self._require_profile(profile_id)
        if not bank_name.strip() or not card_name.strip():
            raise ValidationError("Bank name and card name are required")
        _validate_day("due_day", due_day)
        _validate_day("cutoff_day", cutoff_day)

        card = CreditCard(
            id=new_id(),
            profile_id=profile_id,
            bank_name=bank_name.strip(),
            card_name=card_name.strip(),
            due_day=due_day,
            cutoff_day=cutoff_day,
            color=color,
        )
        self.repo.save_cards([*self.repo.get_cards(), card])
        return card

    def get_card(self, card_id: str) -> Optional[CreditCard]:
        """Get card by ID."""
        for card in self.repo.get_cards():
            if card.id == card_id:
                return card
        return None

    def list_cards(self, profile_ids: Optional[Sequence[str]] = None) -> list[CreditCard]:
        """List cards, optionally restricted to some profiles."""
        cards = self.repo.get_cards()
        if profile_ids is None:
            return cards
        wanted = set(profile_ids)
        return [c for c in cards if c.profile_id in wanted]

    def update_card(self, card_id: str, **updates: Any) -> CreditCard:
        """Update card fields.

        Accepted fields: bank_name, card_name, due_day, cutoff_day, color.
        Use transfer_card to change the owning profile.

        Raises:
            NotFoundError: If card doesn't exist
            ValidationError: If a field is unknown or invalid
        """
        unknown = set(updates) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update card fields: {', '.join(sorted(unknown))}")
        if "due_day" in updates:
            _validate_day("due_day", updates["due_day"])
        if "cutoff_day" in updates:
            _validate_day("cutoff_day", updates["cutoff_day"])

        cards = self.repo.get_cards()
        for index, card in enumerate(cards):
            if card.id == card_id:
                updated = replace(card, **updates)
                cards[index] = updated
                self.repo.save_cards(cards)
                return updated
        raise NotFoundError(card_not_found(card_id))

    def transfer_card(self, card_id: str, target_profile_id: str) -> CreditCard:
        """Move a card, with its history, to another profile.

        Only the card's profile reference changes; statements and
        installments follow the card through its unchanged ID.

        Raises:
            NotFoundError: If card or target profile doesn't exist
        """
        self._require_profile(target_profile_id)
        cards = self.repo.get_cards()
        for index, card in enumerate(cards):
            if card.id == card_id:
                if card.profile_id == target_profile_id:
                    return card
                moved = replace(card, profile_id=target_profile_id)
                cards[index] = moved
                self.repo.save_cards(cards)
                logger.info("Transferred card %s to profile %s", card_id, target_profile_id)
                return moved
        raise NotFoundError(card_not_found(card_id))

    def plan_card_deletion(self, card_id: str) -> CardDeletionPlan:
        """Describe what deleting a card would remove.

        The returned plan is handed back to delete_card once the caller has
        confirmed it.

        Raises:
            NotFoundError: If card doesn't exist
        """
        card = self.get_card(card_id)
        if card is None:
            raise NotFoundError(card_not_found(card_id))
        return CardDeletionPlan(
            card=card,
            statement_count=sum(1 for s in self.repo.get_statements() if s.card_id == card_id),
            installment_count=sum(1 for i in self.repo.get_installments() if i.card_id == card_id),
            cash_installment_count=sum(
                1 for c in self.repo.get_cash_installments() if c.card_id == card_id
            ),
            one_time_bill_count=sum(1 for b in self.repo.get_one_time_bills() if b.card_id == card_id),
        )

    def delete_card(self, plan: CardDeletionPlan) -> None:
        """Delete a confirmed card together with everything billed to it.

        Raises:
            NotFoundError: If the card was removed since the plan was made
        """
        card_id = plan.card.id
        cards = self.repo.get_cards()
        if not any(c.id == card_id for c in cards):
            raise NotFoundError(card_not_found(card_id))

        self.repo.save_all(
            cards=[c for c in cards if c.id != card_id],
            statements=[s for s in self.repo.get_statements() if s.card_id != card_id],
            installments=[i for i in self.repo.get_installments() if i.card_id != card_id],
            cash_installments=[
                c for c in self.repo.get_cash_installments() if c.card_id != card_id
            ],
            one_time_bills=[b for b in self.repo.get_one_time_bills() if b.card_id != card_id],
        )
        logger.info("Deleted card %s", card_id)
