#!/usr/bin/env python3
"""Migration script to assign profiles to cards created before profiles existed.

Data written before profiles were introduced holds cards without a
profileId. This migration:
- creates the default profile if there are no profiles
- sets profileId on every card that lacks one, using the active profile
  (or the first profile when none is active)
- points the active-profile cursor at that profile if it is unset

Usage:
    python migrations/migrate_assign_card_profiles.py [--db-path PATH]
"""

import sys
from pathlib import Path

# Add src to path so we can import billtrack modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from billtrack.database.factories import create_sqlite_store
from billtrack.database.repository import Keys
from billtrack.domain.profile import DEFAULT_PROFILE_NAME
from billtrack.utils.ids import new_id


def migrate_database(database_path: str | None = None) -> None:
    """Assign a profile to every card without one.

    Args:
        database_path: Path to database file. If None, uses default location.

    Raises:
        Exception: If migration fails
    """
    store = create_sqlite_store(database_path=database_path)
    store.connect()
    store.initialize_schema()

    try:
        cards = store.get(Keys.CARDS) or []
        orphans = [card for card in cards if not card.get("profileId")]
        if not orphans:
            print("Migration already applied: every card has a profile")
            return

        print(f"Starting migration: assigning a profile to {len(orphans)} card(s)...")

        values = {}
        profiles = store.get(Keys.PROFILES) or []
        if not profiles:
            profiles = [{"id": new_id(), "name": DEFAULT_PROFILE_NAME}]
            values[Keys.PROFILES] = profiles
            print(f"  Created profile '{DEFAULT_PROFILE_NAME}'")

        profile_ids = {p["id"] for p in profiles}
        active_id = store.get(Keys.ACTIVE_PROFILE_ID)
        if active_id not in profile_ids:
            active_id = profiles[0]["id"]
            values[Keys.ACTIVE_PROFILE_ID] = active_id

        for card in orphans:
            card["profileId"] = active_id
        values[Keys.CARDS] = cards

        # Profiles, cards and cursor are written together or not at all
        store.set_many(values)
        print(f"  Assigned {len(orphans)} card(s) to profile {active_id}")
        print("Migration completed successfully!")

    except Exception as e:
        print(f"Migration failed: {e}")
        raise
    finally:
        store.disconnect()


def main():
    """Main entry point for migration script."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Assign a profile to cards that have none"
    )
    parser.add_argument(
        "--db-path",
        type=str,
        help="Path to database file (overrides BILLTRACK_DB_PATH environment variable)",
    )
    args = parser.parse_args()

    try:
        migrate_database(database_path=args.db_path)
        return 0
    except Exception as e:
        print(f"\nMigration failed: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
