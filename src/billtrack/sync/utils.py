"""Helpers around backup and sync."""

import json
import secrets
import string

from billtrack.database import mappers
from billtrack.database.repository import Repository

PASSWORD_CHARSET = string.ascii_uppercase + string.ascii_lowercase + string.digits + "!@#$%^&*"
MIN_PASSWORD_LENGTH = 8


def has_local_data(repo: Repository) -> bool:
    """Return True if any entity collection holds data."""
    return any(
        (
            repo.get_profiles(),
            repo.get_cards(),
            repo.get_statements(),
            repo.get_installments(),
            repo.get_cash_installments(),
            repo.get_one_time_bills(),
        )
    )


def data_size(repo: Repository) -> int:
    """Approximate size in bytes of the entity collections as JSON."""
    data = {
        "profiles": [mappers.profile_to_record(p) for p in repo.get_profiles()],
        "cards": [mappers.card_to_record(c) for c in repo.get_cards()],
        "statements": [mappers.statement_to_record(s) for s in repo.get_statements()],
        "installments": [mappers.installment_to_record(i) for i in repo.get_installments()],
        "cashInstallments": [
            mappers.cash_installment_to_record(c) for c in repo.get_cash_installments()
        ],
        "oneTimeBills": [mappers.one_time_bill_to_record(b) for b in repo.get_one_time_bills()],
    }
    return len(json.dumps(data, separators=(",", ":")).encode("utf-8"))


def format_bytes(size: int) -> str:
    """Format a byte count, e.g. ``1536`` -> ``"1.5 KB"``."""
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    exponent = 0
    while size >= 1024 ** (exponent + 1) and exponent < len(units) - 1:
        exponent += 1
    value = round(size / 1024**exponent, 2)
    if value == int(value):
        value = int(value)
    return f"{value} {units[exponent]}"


def validate_password(password: str) -> list[str]:
    """Return the ways a password falls short of the recommended rules.

    An empty list means the password meets every rule.
    """
    issues = []
    if len(password) < MIN_PASSWORD_LENGTH:
        issues.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if not any(c.isupper() for c in password):
        issues.append("Password should contain at least one uppercase letter")
    if not any(c.islower() for c in password):
        issues.append("Password should contain at least one lowercase letter")
    if not any(c.isdigit() for c in password):
        issues.append("Password should contain at least one number")
    return issues


def password_strength(password: str) -> str:
    """Rate a password as ``weak``, ``medium`` or ``strong``."""
    issues = len(validate_password(password))
    if issues >= 3:
        return "weak"
    if issues >= 1:
        return "medium"
    return "strong"


def generate_password(length: int = 16) -> str:
    if length < 1:
        raise ValueError("length must be positive")
    return "".join(secrets.choice(PASSWORD_CHARSET) for _ in range(length))


def clear_sync_data(repo: Repository) -> None:
    """Forget the last-sync cursor so the next sync starts fresh."""
    repo.clear_last_sync()
