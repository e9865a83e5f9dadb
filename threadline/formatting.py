"""Shared text formatting helpers."""

from datetime import datetime, timezone

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M UTC"

# Display label for messages authored by the bot itself
SELF_LABEL = "(YOU)"


def as_utc(dt: datetime) -> datetime:
    """Convert to an aware UTC datetime; naive values are taken to already be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """Render a datetime as UTC minutes, e.g. '2024-05-01 10:04 UTC'."""
    return as_utc(dt).strftime(TIMESTAMP_FORMAT)


def normalize_handle(handle: str) -> str:
    """Lowercase a platform handle and strip a leading '@'."""
    return (handle or "").strip().lstrip("@").lower()


def is_self(sender: str, bot_handle: str) -> bool:
    """Whether `sender` is the bot account.

    The literal sender 'agent' (used by persisted history for the bot's
    own messages) always counts.
    """
    name = normalize_handle(sender)
    if name == "agent":
        return True
    return bool(bot_handle) and name == normalize_handle(bot_handle)


def display_sender(sender: str, bot_handle: str) -> str:
    return SELF_LABEL if is_self(sender, bot_handle) else sender
