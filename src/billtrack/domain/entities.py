"""Domain model entities for billtrack.

These are pure data classes representing business concepts, independent of
how they are stored. Entities are immutable: an update builds a new value
with ``dataclasses.replace`` and the owning collection is saved again.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Profile:
    """Profile owning a set of cards."""

    id: str
    name: str


@dataclass(frozen=True)
class CreditCard:
    """Credit card domain entity."""

    id: str
    profile_id: str
    bank_name: str
    card_name: str
    due_day: int
    cutoff_day: int
    color: str


@dataclass(frozen=True)
class Statement:
    """Monthly statement for a card. Unique per (card_id, month_str)."""

    id: str
    card_id: str
    month_str: str
    amount: Decimal
    is_paid: bool
    is_unbilled: Optional[bool] = None
    custom_due_date: Optional[str] = None
    adjusted_amount: Optional[Decimal] = None


@dataclass(frozen=True)
class Installment:
    """Amortizing charge billed to a card for a number of months."""

    id: str
    card_id: str
    name: str
    total_principal: Decimal
    terms: int
    monthly_amortization: Decimal
    start_date: date


@dataclass(frozen=True)
class InstallmentStatus:
    """Derived position of an installment within a given month."""

    current_term: int
    total_terms: int
    monthly_amount: Decimal
    is_active: bool
    is_finished: bool
    is_upcoming: bool


@dataclass(frozen=True)
class CashInstallment:
    """Installment paid in cash against a card."""

    id: str
    card_id: str
    name: str
    amount: Decimal
    due_date: str
    is_paid: bool
    term: Optional[str] = None
    installment_id: Optional[str] = None


@dataclass(frozen=True)
class OneTimeBill:
    """Single bill attached to a card."""

    id: str
    card_id: str
    name: str
    amount: Decimal
    due_date: str
    is_paid: bool


@dataclass(frozen=True)
class BankBalance:
    """Bank balance for a profile in a month. Unique per (profile_id, month_str)."""

    id: str
    profile_id: str
    month_str: str
    balance: Decimal


@dataclass(frozen=True)
class CardDeletionPlan:
    """Pending card deletion awaiting caller confirmation."""

    card: CreditCard
    statement_count: int
    installment_count: int
    cash_installment_count: int
    one_time_bill_count: int


@dataclass(frozen=True)
class MonthlyTotals:
    """Dashboard totals for one month."""

    month_str: str
    bill_total: Decimal
    unpaid_total: Decimal
    installment_total: Decimal
