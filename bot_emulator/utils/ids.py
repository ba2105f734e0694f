"""Identifier generation for conversations and users."""

import uuid


def unique_id() -> str:
    """Time-based identifier used for regenerated conversation ids."""
    return str(uuid.uuid1())


def unique_id_v4() -> str:
    """Random identifier used for user ids."""
    return str(uuid.uuid4())
