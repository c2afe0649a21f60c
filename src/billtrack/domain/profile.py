"""Profile domain service."""

import logging
from typing import Any, Optional

from billtrack.database.repository import Keys, Repository
from billtrack.domain.entities import Profile
from billtrack.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    duplicate_profile_name,
    profile_delete_blocked,
    profile_not_found,
)
from billtrack.utils.ids import new_id

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_NAME = "My Profile"


class ProfileService:
    """Service for managing profiles and the active-profile cursor."""

    def __init__(self, repo: Repository):
        """Initialize profile service.

        Args:
            repo: Repository instance
        """
        self.repo = repo

    def ensure_default_profile(self) -> Profile:
        """Seed a default profile on first run and make sure one is active.

        Returns:
            The active profile
        """
        profiles = self.repo.get_profiles()
        if not profiles:
            profile = Profile(id=new_id(), name=DEFAULT_PROFILE_NAME)
            self.repo.save_profiles([profile])
            self.repo.save_active_profile_id(profile.id)
            logger.info("Seeded default profile %s", profile.id)
            return profile

        active_id = self.repo.get_active_profile_id()
        for profile in profiles:
            if profile.id == active_id:
                return profile

        self.repo.save_active_profile_id(profiles[0].id)
        return profiles[0]

    def create_profile(self, name: str) -> Profile:
        """Create a profile and make it active.

        Raises:
            ValidationError: If name is empty
            ConflictError: If a profile with this name exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Profile name cannot be empty")

        profiles = self.repo.get_profiles()
        if any(p.name == name for p in profiles):
            raise ConflictError(duplicate_profile_name(name))

        profile = Profile(id=new_id(), name=name)
        self.repo.save_profiles([*profiles, profile])
        self.repo.save_active_profile_id(profile.id)
        return profile

    def get_profile(self, profile_id: str) -> Optional[Profile]:
        """Get profile by ID."""
        for profile in self.repo.get_profiles():
            if profile.id == profile_id:
                return profile
        return None

    def list_profiles(self) -> list[Profile]:
        """List all profiles in creation order."""
        return self.repo.get_profiles()

    def get_active_profile(self) -> Optional[Profile]:
        """Return the active profile, if the cursor points at one."""
        active_id = self.repo.get_active_profile_id()
        if active_id is None:
            return None
        return self.get_profile(active_id)

    def set_active_profile(self, profile_id: str) -> None:
        """Move the active-profile cursor.

        Raises:
            NotFoundError: If profile doesn't exist
        """
        if self.get_profile(profile_id) is None:
            raise NotFoundError(profile_not_found(profile_id))
        self.repo.save_active_profile_id(profile_id)

    def rename_profile(self, profile_id: str, name: str) -> Profile:
        """Rename a profile.

        Raises:
            NotFoundError: If profile doesn't exist
            ConflictError: If another profile already uses the name
        """
        name = name.strip()
        if not name:
            raise ValidationError("Profile name cannot be empty")

        profiles = self.repo.get_profiles()
        if not any(p.id == profile_id for p in profiles):
            raise NotFoundError(profile_not_found(profile_id))
        if any(p.name == name and p.id != profile_id for p in profiles):
            raise ConflictError(duplicate_profile_name(name))

        renamed = Profile(id=profile_id, name=name)
        self.repo.save_profiles([renamed if p.id == profile_id else p for p in profiles])
        return renamed

    def delete_profile(self, profile_id: str, cascade: bool = False) -> dict[str, int]:
        """Delete a profile.

        Without cascade the profile must own no cards. With cascade its
        cards, everything billed to those cards and its bank balances are
        removed in one write.

        Args:
            profile_id: Profile ID to delete
            cascade: Also delete owned data

        Returns:
            Dict with the number of removed cards, statements, installments,
            cash_installments, one_time_bills and bank_balances

        Raises:
            NotFoundError: If profile doesn't exist
            DependencyError: If it is the only profile, or owns cards and
                cascade is False
        """
        profiles = self.repo.get_profiles()
        if not any(p.id == profile_id for p in profiles):
            raise NotFoundError(profile_not_found(profile_id))
        if len(profiles) == 1:
            raise DependencyError("Cannot delete the only profile")

        cards = self.repo.get_cards()
        owned = {c.id for c in cards if c.profile_id == profile_id}
        if owned and not cascade:
            raise DependencyError(profile_delete_blocked(profile_id, len(owned)))

        statements = self.repo.get_statements()
        installments = self.repo.get_installments()
        cash_installments = self.repo.get_cash_installments()
        bills = self.repo.get_one_time_bills()
        balances = self.repo.get_bank_balances()

        remaining_profiles = [p for p in profiles if p.id != profile_id]
        kept_statements = [s for s in statements if s.card_id not in owned]
        kept_installments = [i for i in installments if i.card_id not in owned]
        kept_cash = [c for c in cash_installments if c.card_id not in owned]
        kept_bills = [b for b in bills if b.card_id not in owned]
        kept_balances = [b for b in balances if b.profile_id != profile_id]

        cursors: dict[str, Any] = {}
        if self.repo.get_active_profile_id() == profile_id:
            cursors[Keys.ACTIVE_PROFILE_ID] = remaining_profiles[0].id
        selected = self.repo.get_selected_profile_ids()
        if profile_id in selected:
            cursors[Keys.SELECTED_PROFILE_IDS] = [i for i in selected if i != profile_id]

        self.repo.save_all(
            profiles=remaining_profiles,
            cards=[c for c in cards if c.id not in owned],
            statements=kept_statements,
            installments=kept_installments,
            cash_installments=kept_cash,
            one_time_bills=kept_bills,
            bank_balances=kept_balances,
            cursors=cursors,
        )
        logger.info("Deleted profile %s with %d card(s)", profile_id, len(owned))

        return {
            "cards": len(owned),
            "statements": len(statements) - len(kept_statements),
            "installments": len(installments) - len(kept_installments),
            "cash_installments": len(cash_installments) - len(kept_cash),
            "one_time_bills": len(bills) - len(kept_bills),
            "bank_balances": len(balances) - len(kept_balances),
        }

    def set_multi_profile_mode(self, enabled: bool) -> None:
        """Enable or disable viewing several profiles at once."""
        self.repo.save_multi_profile_mode(enabled)

    def toggle_profile_selection(self, profile_id: str) -> list[str]:
        """Add or remove a profile from the multi-profile selection.

        Returns:
            The updated selection
        """
        if self.get_profile(profile_id) is None:
            raise NotFoundError(profile_not_found(profile_id))
        selected = self.repo.get_selected_profile_ids()
        if profile_id in selected:
            selected = [i for i in selected if i != profile_id]
        else:
            selected = [*selected, profile_id]
        self.repo.save_selected_profile_ids(selected)
        return selected

    def visible_profile_ids(self) -> list[str]:
        """Profiles whose cards are shown: the selection in multi-profile mode, else the active one."""
        if self.repo.get_multi_profile_mode():
            selected = self.repo.get_selected_profile_ids()
            if selected:
                return selected
        active_id = self.repo.get_active_profile_id()
        return [active_id] if active_id else []
