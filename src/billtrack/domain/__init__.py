"""Domain layer for billtrack application.

Only entities and errors are re-exported here; services are imported from
their modules so the persistence layer can depend on entities without
pulling in the services.
"""

from billtrack.domain.entities import (
    BankBalance,
    CardDeletionPlan,
    CashInstallment,
    CreditCard,
    Installment,
    InstallmentStatus,
    MonthlyTotals,
    OneTimeBill,
    Profile,
    Statement,
)
from billtrack.domain.errors import DomainError

__all__ = [
    "BankBalance",
    "CardDeletionPlan",
    "CashInstallment",
    "CreditCard",
    "DomainError",
    "Installment",
    "InstallmentStatus",
    "MonthlyTotals",
    "OneTimeBill",
    "Profile",
    "Statement",
]
