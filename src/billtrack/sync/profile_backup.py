"""Single-profile backups.

A profile backup holds one profile with its cards, statements and
installments. Importing one always creates a new profile with fresh IDs, so
it can be loaded next to the data it was exported from.
"""

import json
import logging
import re
from dataclasses import dataclass, replace
from typing import Any

from billtrack.database import mappers
from billtrack.database.repository import Keys, Repository
from billtrack.domain.entities import Profile
from billtrack.domain.errors import (
    NotFoundError,
    ProfileNameCollisionError,
    ValidationError,
    profile_name_collision,
    profile_not_found,
)
from billtrack.domain.statement import upsert_statement
from billtrack.utils.ids import new_id

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1
BACKUP_TYPE = "profile-backup"


@dataclass(frozen=True)
class ProfileImportResult:
    profile: Profile
    card_count: int
    statement_count: int
    installment_count: int


def profile_backup_filename(profile: Profile) -> str:
    """Return a file name derived from the profile name."""
    slug = re.sub(r"[^a-z0-9]", "-", profile.name, flags=re.IGNORECASE).lower()
    return f"bill-tracker-{slug}.json"


class ProfileBackupService:
    """Exports one profile and imports it as a new profile."""

    def __init__(self, repo: Repository):
        """Initialize profile backup service.

        Args:
            repo: Repository instance
        """
        self.repo = repo

    def export_profile(self, profile_id: str) -> str:
        """Export a profile with its cards, statements and installments.

        Args:
            profile_id: Profile to export

        Returns:
            Indented JSON document

        Raises:
            NotFoundError: If the profile does not exist
        """
        profile = next((p for p in self.repo.get_profiles() if p.id == profile_id), None)
        if profile is None:
            raise NotFoundError(profile_not_found(profile_id))

        cards = [c for c in self.repo.get_cards() if c.profile_id == profile_id]
        card_ids = {c.id for c in cards}
        data = {
            "version": BACKUP_VERSION,
            "type": BACKUP_TYPE,
            "profile": mappers.profile_to_record(profile),
            "cards": [mappers.card_to_record(c) for c in cards],
            "statements": [
                mappers.statement_to_record(s)
                for s in self.repo.get_statements()
                if s.card_id in card_ids
            ],
            "installments": [
                mappers.installment_to_record(i)
                for i in self.repo.get_installments()
                if i.card_id in card_ids
            ],
        }
        return json.dumps(data, indent=2)

    def import_profile(self, json_str: str) -> ProfileImportResult:
        """Import a profile backup as a new, active profile.

        Card and installment IDs are regenerated and foreign keys rewritten
        to the new IDs. Statements and installments pointing at cards that
        are not in the backup are dropped. Statements are upserted by
        (card, month). Nothing is written unless the whole import succeeds.

        Args:
            json_str: Profile backup document

        Returns:
            ProfileImportResult describing what was added

        Raises:
            ValidationError: If the document is not a profile backup
            ProfileNameCollisionError: If a local profile has the same name
        """
        try:
            data: Any = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid profile backup: {e}") from e
        if not isinstance(data, dict) or not data.get("profile") or not isinstance(data.get("cards"), list):
            raise ValidationError("Invalid file format. Expected profile and cards array.")

        imported_profile = mappers.profile_from_record(data["profile"])
        profiles = self.repo.get_profiles()
        if any(p.name == imported_profile.name for p in profiles):
            raise ProfileNameCollisionError(profile_name_collision(imported_profile.name))

        profile = Profile(id=new_id(), name=imported_profile.name)

        card_id_map: dict[str, str] = {}
        new_cards = []
        for record in data["cards"]:
            card = mappers.card_from_record(record)
            card_id_map[card.id] = new_id()
            new_cards.append(replace(card, id=card_id_map[card.id], profile_id=profile.id))

        statements = self.repo.get_statements()
        statement_count = 0
        for record in data.get("statements") or []:
            statement = mappers.statement_from_record(record)
            card_id = card_id_map.get(statement.card_id)
            if card_id is None:
                continue
            statements, _ = upsert_statement(
                statements,
                card_id,
                statement.month_str,
                {
                    "amount": statement.amount,
                    "is_paid": statement.is_paid,
                    "is_unbilled": statement.is_unbilled,
                    "custom_due_date": statement.custom_due_date,
                },
            )
            statement_count += 1

        new_installments = []
        for record in data.get("installments") or []:
            installment = mappers.installment_from_record(record)
            card_id = card_id_map.get(installment.card_id)
            if card_id is not None:
                new_installments.append(replace(installment, id=new_id(), card_id=card_id))

        self.repo.save_all(
            profiles=[*profiles, profile],
            cards=[*self.repo.get_cards(), *new_cards],
            statements=statements,
            installments=[*self.repo.get_installments(), *new_installments],
            cursors={Keys.ACTIVE_PROFILE_ID: profile.id},
        )
        logger.info("Imported profile %s with %d cards", profile.id, len(new_cards))

        return ProfileImportResult(
            profile=profile,
            card_count=len(new_cards),
            statement_count=statement_count,
            installment_count=len(new_installments),
        )
