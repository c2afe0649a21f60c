"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class ProfileNameCollisionError(ConflictError):
    """A profile with the imported name already exists locally."""


class SyncError(DomainError):
    """Base class for backup, encryption and transport failures."""


class AuthenticationError(SyncError):
    """Wrong password, or ciphertext that was corrupted or tampered with."""


class MalformedBlobError(SyncError):
    """Structurally invalid encrypted blob or snapshot."""


class PasswordRequiredError(SyncError):
    """Encrypted content was presented without a password."""

    def __init__(self, message: str = "Password required for encrypted data"):
        super().__init__(message)


class ImportFailedError(SyncError):
    """Import could not be completed. The underlying error is kept as ``cause``."""

    def __init__(self, cause: Optional[BaseException] = None, message: Optional[str] = None):
        self.cause = cause
        super().__init__(message or "Failed to import data. Please check the file and password.")


class TransportError(SyncError):
    """Remote store failure (network, authorization, missing object)."""


def profile_not_found(profile_id: str) -> str:
    """Return message for missing profile."""
    return f"Profile {profile_id} not found"


def card_not_found(card_id: str) -> str:
    """Return message for missing card."""
    return f"Card {card_id} not found"


def installment_not_found(installment_id: str) -> str:
    """Return message for missing installment."""
    return f"Installment {installment_id} not found"


def bill_not_found(bill_id: str) -> str:
    """Return message for missing one-time bill or cash installment."""
    return f"Bill {bill_id} not found"


def duplicate_profile_name(name: str) -> str:
    """Return message for a profile name already in use."""
    return f"Profile '{name}' already exists"


def profile_name_collision(name: str) -> str:
    """Return message when an imported profile name is already in use."""
    return f"Profile \"{name}\" already exists. Please rename it before importing."


def profile_delete_blocked(profile_id: str, card_count: int) -> str:
    """Return message when a profile still owns cards."""
    return (
        f"Cannot delete profile {profile_id}: it has "
        f"{card_count} card{'s' if card_count != 1 else ''}. "
        "Transfer or delete them first, or delete with cascade."
    )
