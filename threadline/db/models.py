"""Database query helpers for persisted conversation history.

Expected table (owned by the persistence layer, not created here)::

    conversation_history (
        user_handle  text,         -- platform handle of the other party
        sender       text,         -- 'agent' for the bot's own messages
        text         text,
        created_at   timestamptz
    )
"""

import logging

from ..sources import FetchError, HistorySource
from ..thread.models import HistoryEntry
from .connection import get_connection

logger = logging.getLogger("threadline.db.models")


# ============================================================
# HISTORY
# ============================================================

async def get_conversation_with_user(handle: str, limit: int = 50) -> list[dict]:
    """Load the most recent `limit` history rows with a user, oldest first."""
    async with get_connection() as conn:
        rows = await conn.fetch("""
            SELECT sender, text, created_at FROM (
                SELECT sender, text, created_at
                FROM conversation_history
                WHERE lower(user_handle) = lower($1)
                ORDER BY created_at DESC
                LIMIT $2
            ) recent
            ORDER BY created_at ASC
        """, handle.lstrip("@"), limit)
        return [dict(row) for row in rows]


class PostgresHistorySource(HistorySource):
    """History source reading the conversation_history table."""

    def __init__(self, limit: int = 50):
        self.limit = limit

    async def fetch_history(self, sender: str) -> list[HistoryEntry]:
        try:
            rows = await get_conversation_with_user(sender, self.limit)
        except Exception as e:
            raise FetchError(f"History lookup for {sender} failed: {e}") from e

        dated = [row for row in rows if row["created_at"] is not None]
        if len(dated) < len(rows):
            logger.warning(f"Dropped {len(rows) - len(dated)} history rows for {sender} with no created_at")
        logger.debug(f"Loaded {len(dated)} history rows for {sender}")
        return [
            HistoryEntry(
                sender=row["sender"] or "Unknown User",
                text=row["text"] or "",
                timestamp=row["created_at"],
            )
            for row in dated
        ]
