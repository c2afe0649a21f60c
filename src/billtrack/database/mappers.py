"""Mapper functions to convert between domain entities and stored records.

Records are the JSON objects kept in the key-value store and carried by
export files. Keys are camelCase and optional fields are omitted when unset,
so files written by older clients load unchanged.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from billtrack.domain import entities as domain
from billtrack.domain.errors import ValidationError


def _require(raw: Any, key: str, entity: str) -> Any:
    if not isinstance(raw, dict):
        raise ValidationError(f"Invalid {entity} record: expected an object")
    if raw.get(key) is None:
        raise ValidationError(f"Invalid {entity} record: missing '{key}'")
    return raw[key]


def _decimal(value: Any, key: str, entity: str) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {entity} record: '{key}' is not a number")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"Invalid {entity} record: '{key}' is not a number")


def _optional_decimal(raw: dict, key: str, entity: str) -> Optional[Decimal]:
    value = raw.get(key)
    if value is None:
        return None
    return _decimal(value, key, entity)


def _int(value: Any, key: str, entity: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {entity} record: '{key}' is not an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {entity} record: '{key}' is not an integer")


def number(value: Decimal) -> int | float:
    """Render a Decimal as a JSON number, keeping whole amounts integral."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _put(record: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        record[key] = number(value) if isinstance(value, Decimal) else value


def profile_from_record(raw: Any) -> domain.Profile:
    """Convert stored record to Profile entity."""
    return domain.Profile(
        id=str(_require(raw, "id", "profile")),
        name=str(_require(raw, "name", "profile")),
    )


def profile_to_record(profile: domain.Profile) -> dict[str, Any]:
    """Convert Profile entity to stored record."""
    return {"id": profile.id, "name": profile.name}


def card_from_record(raw: Any) -> domain.CreditCard:
    """Convert stored record to CreditCard entity."""
    return domain.CreditCard(
        id=str(_require(raw, "id", "card")),
        profile_id=str(_require(raw, "profileId", "card")),
        bank_name=str(_require(raw, "bankName", "card")),
        card_name=str(_require(raw, "cardName", "card")),
        due_day=_int(_require(raw, "dueDay", "card"), "dueDay", "card"),
        cutoff_day=_int(_require(raw, "cutoffDay", "card"), "cutoffDay", "card"),
        color=str(raw.get("color") or ""),
    )


def card_to_record(card: domain.CreditCard) -> dict[str, Any]:
    """Convert CreditCard entity to stored record."""
    return {
        "id": card.id,
        "profileId": card.profile_id,
        "bankName": card.bank_name,
        "cardName": card.card_name,
        "dueDay": card.due_day,
        "cutoffDay": card.cutoff_day,
        "color": card.color,
    }


def statement_from_record(raw: Any) -> domain.Statement:
    """Convert stored record to Statement entity."""
    is_unbilled = raw.get("isUnbilled") if isinstance(raw, dict) else None
    return domain.Statement(
        id=str(_require(raw, "id", "statement")),
        card_id=str(_require(raw, "cardId", "statement")),
        month_str=str(_require(raw, "monthStr", "statement")),
        amount=_decimal(raw.get("amount", 0), "amount", "statement"),
        is_paid=bool(raw.get("isPaid", False)),
        is_unbilled=None if is_unbilled is None else bool(is_unbilled),
        custom_due_date=raw.get("customDueDate"),
        adjusted_amount=_optional_decimal(raw, "adjustedAmount", "statement"),
    )


def statement_to_record(statement: domain.Statement) -> dict[str, Any]:
    """Convert Statement entity to stored record."""
    record: dict[str, Any] = {
        "id": statement.id,
        "cardId": statement.card_id,
        "monthStr": statement.month_str,
        "amount": number(statement.amount),
        "isPaid": statement.is_paid,
    }
    _put(record, "isUnbilled", statement.is_unbilled)
    _put(record, "customDueDate", statement.custom_due_date)
    _put(record, "adjustedAmount", statement.adjusted_amount)
    return record


def installment_from_record(raw: Any) -> domain.Installment:
    """Convert stored record to Installment entity."""
    start = str(_require(raw, "startDate", "installment"))
    try:
        start_date = date.fromisoformat(start[:10])
    except ValueError:
        raise ValidationError(f"Invalid installment record: bad startDate '{start}'")
    return domain.Installment(
        id=str(_require(raw, "id", "installment")),
        card_id=str(_require(raw, "cardId", "installment")),
        name=str(_require(raw, "name", "installment")),
        total_principal=_decimal(raw.get("totalPrincipal", 0), "totalPrincipal", "installment"),
        terms=_int(_require(raw, "terms", "installment"), "terms", "installment"),
        monthly_amortization=_decimal(
            _require(raw, "monthlyAmortization", "installment"), "monthlyAmortization", "installment"
        ),
        start_date=start_date,
    )


def installment_to_record(installment: domain.Installment) -> dict[str, Any]:
    """Convert Installment entity to stored record."""
    return {
        "id": installment.id,
        "cardId": installment.card_id,
        "name": installment.name,
        "totalPrincipal": number(installment.total_principal),
        "terms": installment.terms,
        "monthlyAmortization": number(installment.monthly_amortization),
        "startDate": installment.start_date.isoformat(),
    }


def cash_installment_from_record(raw: Any) -> domain.CashInstallment:
    """Convert stored record to CashInstallment entity."""
    term = raw.get("term") if isinstance(raw, dict) else None
    return domain.CashInstallment(
        id=str(_require(raw, "id", "cash installment")),
        card_id=str(_require(raw, "cardId", "cash installment")),
        name=str(_require(raw, "name", "cash installment")),
        amount=_decimal(_require(raw, "amount", "cash installment"), "amount", "cash installment"),
        due_date=str(raw.get("dueDate") or ""),
        is_paid=bool(raw.get("isPaid", False)),
        term=None if term is None else str(term),
        installment_id=raw.get("installmentId"),
    )


def cash_installment_to_record(cash: domain.CashInstallment) -> dict[str, Any]:
    """Convert CashInstallment entity to stored record."""
    record: dict[str, Any] = {
        "id": cash.id,
        "cardId": cash.card_id,
        "name": cash.name,
        "amount": number(cash.amount),
        "dueDate": cash.due_date,
        "isPaid": cash.is_paid,
    }
    _put(record, "term", cash.term)
    _put(record, "installmentId", cash.installment_id)
    return record


def one_time_bill_from_record(raw: Any) -> domain.OneTimeBill:
    """Convert stored record to OneTimeBill entity."""
    return domain.OneTimeBill(
        id=str(_require(raw, "id", "one-time bill")),
        card_id=str(_require(raw, "cardId", "one-time bill")),
        name=str(_require(raw, "name", "one-time bill")),
        amount=_decimal(_require(raw, "amount", "one-time bill"), "amount", "one-time bill"),
        due_date=str(raw.get("dueDate") or ""),
        is_paid=bool(raw.get("isPaid", False)),
    )


def one_time_bill_to_record(bill: domain.OneTimeBill) -> dict[str, Any]:
    """Convert OneTimeBill entity to stored record."""
    return {
        "id": bill.id,
        "cardId": bill.card_id,
        "name": bill.name,
        "amount": number(bill.amount),
        "dueDate": bill.due_date,
        "isPaid": bill.is_paid,
    }


def bank_balance_from_record(raw: Any) -> domain.BankBalance:
    """Convert stored record to BankBalance entity."""
    return domain.BankBalance(
        id=str(_require(raw, "id", "bank balance")),
        profile_id=str(_require(raw, "profileId", "bank balance")),
        month_str=str(_require(raw, "monthStr", "bank balance")),
        balance=_decimal(raw.get("balance", 0), "balance", "bank balance"),
    )


def bank_balance_to_record(balance: domain.BankBalance) -> dict[str, Any]:
    """Convert BankBalance entity to stored record."""
    return {
        "id": balance.id,
        "profileId": balance.profile_id,
        "monthStr": balance.month_str,
        "balance": number(balance.balance),
    }
