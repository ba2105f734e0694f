"""Utilities module."""

from bot_emulator.utils.async_timeout import AsyncTimeoutError, with_timeout
from bot_emulator.utils.ids import unique_id, unique_id_v4

__all__ = [
    "AsyncTimeoutError",
    "with_timeout",
    "unique_id",
    "unique_id_v4",
]
