"""Identifier helpers for rows keyed by UUID strings."""

import uuid


def new_id() -> str:
    """Return a new random UUID string, used as the default primary key."""
    return str(uuid.uuid4())
