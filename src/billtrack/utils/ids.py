"""Identifier generation."""

import uuid


def new_id() -> str:
    """Return a fresh random entity identifier."""
    return str(uuid.uuid4())
