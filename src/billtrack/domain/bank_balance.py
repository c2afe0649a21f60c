"""Bank balance domain service."""

from dataclasses import replace
from decimal import Decimal
from typing import Optional

from billtrack.database.repository import Repository
from billtrack.domain.entities import BankBalance
from billtrack.domain.errors import NotFoundError, ValidationError, profile_not_found
from billtrack.utils.dates import month_start
from billtrack.utils.ids import new_id


class BankBalanceService:
    """Service for per-profile monthly bank balances."""

    def __init__(self, repo: Repository):
        self.repo = repo

    def set_balance(self, profile_id: str, month_str: str, balance: Decimal) -> BankBalance:
        """Record the balance of a profile for a month, replacing any earlier value.

        Raises:
            NotFoundError: If profile doesn't exist
            ValidationError: If month is invalid
        """
        if not any(p.id == profile_id for p in self.repo.get_profiles()):
            raise NotFoundError(profile_not_found(profile_id))
        try:
            month_start(month_str)
        except ValueError as e:
            raise ValidationError(str(e))

        balances = self.repo.get_bank_balances()
        for index, existing in enumerate(balances):
            if existing.profile_id == profile_id and existing.month_str == month_str:
                balances[index] = replace(existing, balance=balance)
                self.repo.save_bank_balances(balances)
                return balances[index]

        created = BankBalance(id=new_id(), profile_id=profile_id, month_str=month_str, balance=balance)
        self.repo.save_bank_balances([*balances, created])
        return created

    def get_balance(self, profile_id: str, month_str: str) -> Optional[BankBalance]:
        for balance in self.repo.get_bank_balances():
            if balance.profile_id == profile_id and balance.month_str == month_str:
                return balance
        return None

    def is_tracking_enabled(self) -> bool:
        return self.repo.get_bank_balance_tracking()

    def set_tracking_enabled(self, enabled: bool) -> None:
        self.repo.save_bank_balance_tracking(enabled)
