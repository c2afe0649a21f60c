"""Utilities for resolving profile and card references to IDs."""

from billtrack.domain.card import CardService
from billtrack.domain.errors import NotFoundError, ValidationError
from billtrack.domain.profile import ProfileService


def resolve_profile(profile_service: ProfileService, profile: str) -> str:
    """Resolve a profile name or ID to a profile ID.

    Args:
        profile_service: ProfileService instance
        profile: Profile ID or name

    Returns:
        Profile ID

    Raises:
        NotFoundError: If no profile matches
    """
    if profile_service.get_profile(profile) is not None:
        return profile

    for candidate in profile_service.list_profiles():
        if candidate.name == profile:
            return candidate.id

    raise NotFoundError(f"Profile '{profile}' not found")


def resolve_card(card_service: CardService, card: str) -> str:
    """Resolve a card reference to a card ID.

    The reference may be a full ID, a unique ID prefix, a card name, or
    "Bank/Card Name".

    Raises:
        NotFoundError: If no card matches
        ValidationError: If the reference matches more than one card
    """
    if card_service.get_card(card) is not None:
        return card

    cards = card_service.list_cards()
    matches = [c for c in cards if c.id.startswith(card)]
    if not matches:
        matches = [c for c in cards if c.card_name == card or f"{c.bank_name}/{c.card_name}" == card]

    if len(matches) == 1:
        return matches[0].id
    if len(matches) > 1:
        raise ValidationError(f"Card reference '{card}' is ambiguous ({len(matches)} matches)")
    raise NotFoundError(f"Card '{card}' not found")
