"""Additive merge of an imported snapshot into local data.

Collections are merged in dependency order and each one is saved as soon as
it is merged. A failure part way through leaves the earlier collections
merged and the later ones untouched.
"""

import logging
from dataclasses import dataclass, field

from billtrack.database.repository import Repository
from billtrack.sync.snapshot import Snapshot

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    """Per-collection counts of added and skipped entities."""

    added: dict[str, int] = field(default_factory=dict)
    skipped: dict[str, int] = field(default_factory=dict)

    @property
    def total_added(self) -> int:
        return sum(self.added.values())

    @property
    def total_skipped(self) -> int:
        return sum(self.skipped.values())


class MergeImporter:
    """Merges snapshots without deleting or changing existing entities.

    An imported entity is added only when its ID is new and the entity it
    references exists after the earlier steps. Statements are additionally
    skipped when the card already has a statement for that month, and bank
    balances when the profile already has one for that month.
    """

    def __init__(self, repo: Repository):
        """Initialize merge importer.

        Args:
            repo: Repository instance
        """
        self.repo = repo

    def merge(self, snapshot: Snapshot) -> MergeResult:
        """Merge a snapshot into the repository.

        Returns:
            MergeResult with counts per collection
        """
        result = MergeResult()

        # Profiles keep their IDs: the same profile on two devices shares one
        profiles = self.repo.get_profiles()
        profile_ids = {p.id for p in profiles}
        new_profiles = []
        for profile in snapshot.profiles or []:
            if profile.id in profile_ids:
                continue
            profile_ids.add(profile.id)
            new_profiles.append(profile)
        self._record(result, "profiles", len(new_profiles), len(snapshot.profiles or []))
        if new_profiles:
            self.repo.save_profiles([*profiles, *new_profiles])

        cards = self.repo.get_cards()
        card_ids = {c.id for c in cards}
        new_cards = []
        for card in snapshot.cards or []:
            if card.id in card_ids:
                continue
            if card.profile_id not in profile_ids:
                logger.warning("Skipping card %s: profile %s not found", card.id, card.profile_id)
                continue
            card_ids.add(card.id)
            new_cards.append(card)
        self._record(result, "cards", len(new_cards), len(snapshot.cards or []))
        if new_cards:
            self.repo.save_cards([*cards, *new_cards])

        statements = self.repo.get_statements()
        statement_ids = {s.id for s in statements}
        months = {(s.card_id, s.month_str) for s in statements}
        new_statements = []
        for statement in snapshot.statements or []:
            if statement.id in statement_ids or statement.card_id not in card_ids:
                continue
            key = (statement.card_id, statement.month_str)
            if key in months:
                logger.info(
                    "Skipping statement %s: card %s already has %s",
                    statement.id,
                    statement.card_id,
                    statement.month_str,
                )
                continue
            statement_ids.add(statement.id)
            months.add(key)
            new_statements.append(statement)
        self._record(result, "statements", len(new_statements), len(snapshot.statements or []))
        if new_statements:
            self.repo.save_statements([*statements, *new_statements])

        installments = self.repo.get_installments()
        new_installments = self._by_id_and_card(installments, snapshot.installments, card_ids)
        self._record(result, "installments", len(new_installments), len(snapshot.installments or []))
        if new_installments:
            self.repo.save_installments([*installments, *new_installments])

        cash_installments = self.repo.get_cash_installments()
        new_cash = self._by_id_and_card(cash_installments, snapshot.cash_installments, card_ids)
        self._record(result, "cash_installments", len(new_cash), len(snapshot.cash_installments or []))
        if new_cash:
            self.repo.save_cash_installments([*cash_installments, *new_cash])

        bills = self.repo.get_one_time_bills()
        new_bills = self._by_id_and_card(bills, snapshot.one_time_bills, card_ids)
        self._record(result, "one_time_bills", len(new_bills), len(snapshot.one_time_bills or []))
        if new_bills:
            self.repo.save_one_time_bills([*bills, *new_bills])

        balances = self.repo.get_bank_balances()
        balance_ids = {b.id for b in balances}
        balance_months = {(b.profile_id, b.month_str) for b in balances}
        new_balances = []
        for balance in snapshot.bank_balances or []:
            key = (balance.profile_id, balance.month_str)
            if balance.id in balance_ids or balance.profile_id not in profile_ids or key in balance_months:
                continue
            balance_ids.add(balance.id)
            balance_months.add(key)
            new_balances.append(balance)
        self._record(result, "bank_balances", len(new_balances), len(snapshot.bank_balances or []))
        if new_balances:
            self.repo.save_bank_balances([*balances, *new_balances])

        logger.info("Merge added %d and skipped %d entities", result.total_added, result.total_skipped)
        return result

    @staticmethod
    def _by_id_and_card(existing: list, imported: list | None, card_ids: set[str]) -> list:
        ids = {item.id for item in existing}
        added = []
        for item in imported or []:
            if item.id in ids or item.card_id not in card_ids:
                continue
            ids.add(item.id)
            added.append(item)
        return added

    @staticmethod
    def _record(result: MergeResult, name: str, added: int, offered: int) -> None:
        result.added[name] = added
        result.skipped[name] = offered - added
