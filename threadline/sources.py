"""Source interfaces the thread engine reads from, plus in-memory implementations."""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from .formatting import as_utc
from .thread.models import HistoryEntry, Message

logger = logging.getLogger("threadline.sources")


# ════════════════════════════════════════════════════════
# Error hierarchy — sources raise these, the thread engine
# absorbs them and degrades to absent values.
# ════════════════════════════════════════════════════════

class ThreadlineError(Exception):
    """Base class for all Threadline errors."""
    pass

class FetchError(ThreadlineError):
    """A message, history or media lookup failed (network, rate limit, ...)."""
    pass

class MessageNotFoundError(FetchError):
    """The referenced message does not exist or was deleted."""
    pass

class FixtureError(ThreadlineError):
    """A fixture file could not be parsed."""
    pass


class MessageSource(ABC):
    """Abstract platform client: resolves a message by identifier."""

    @abstractmethod
    async def fetch_message(self, message_id: str) -> Optional[Message]:
        """Return the message, or None when it does not exist.

        Implementations may raise FetchError for transient failures.
        """
        ...


class HistorySource(ABC):
    """Abstract persistence reader for past conversation with a sender."""

    @abstractmethod
    async def fetch_history(self, sender: str) -> list[HistoryEntry]:
        """Return persisted history with `sender`, oldest first."""
        ...


class StaticMessageSource(MessageSource):
    """Message source backed by a dict — fixtures, replays and tests."""

    def __init__(self, messages: Optional[list[Message]] = None):
        self._messages: dict[str, Message] = {}
        for msg in messages or []:
            self.add(msg)
        self.calls: list[str] = []

    def add(self, message: Message):
        self._messages[message.id] = message

    async def fetch_message(self, message_id: str) -> Optional[Message]:
        self.calls.append(message_id)
        return self._messages.get(message_id)


class StaticHistorySource(HistorySource):
    """History source backed by a dict keyed by lowercase sender handle."""

    def __init__(self, history: Optional[dict[str, list[HistoryEntry]]] = None):
        self._history = {k.lower(): list(v) for k, v in (history or {}).items()}

    async def fetch_history(self, sender: str) -> list[HistoryEntry]:
        entries = [e for e in self._history.get(sender.lower(), []) if e.timestamp is not None]
        return sorted(entries, key=lambda e: as_utc(e.timestamp))


# ============================================================
# FIXTURES
# ============================================================

def parse_timestamp(value: Union[str, int, float, datetime]) -> datetime:
    """Parse an ISO-8601 string or epoch seconds into an aware datetime."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)):
        dt = datetime.fromtimestamp(value, tz=timezone.utc)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _photo_locators(value) -> tuple:
    if not value:
        return ()
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise TypeError(f"photos must be a list of locator strings, got {type(value).__name__}")
    for photo in value:
        if not isinstance(photo, str):
            raise TypeError(f"photo locator must be a string, got {photo!r}")
    return tuple(value)


def message_from_dict(data: dict) -> Message:
    """Build a Message from a fixture/API dict."""
    try:
        return Message(
            id=str(data["id"]),
            sender=data.get("sender") or "Unknown User",
            text=data.get("text") or "",
            created_at=parse_timestamp(data["created_at"]),
            parent_id=str(data["parent_id"]) if data.get("parent_id") else None,
            quoted_id=str(data["quoted_id"]) if data.get("quoted_id") else None,
            photos=_photo_locators(data.get("photos")),
        )
    except (KeyError, ValueError, TypeError) as e:
        raise FixtureError(f"Invalid message entry {data!r}: {e}") from e


def history_from_dict(data: dict) -> HistoryEntry:
    try:
        return HistoryEntry(
            sender=data["sender"],
            text=data.get("text") or "",
            timestamp=parse_timestamp(data["timestamp"]),
        )
    except (KeyError, ValueError, TypeError) as e:
        raise FixtureError(f"Invalid history entry {data!r}: {e}") from e


def load_fixture(path: Union[str, Path]) -> tuple[StaticMessageSource, StaticHistorySource]:
    """Load messages and history from a JSON fixture file.

    Expected shape::

        {
          "messages": [{"id": "2", "sender": "alice", "text": "Hi",
                        "created_at": "2024-05-01T10:00:00Z",
                        "parent_id": "1", "quoted_id": null, "photos": []}],
          "history": {"alice": [{"sender": "alice", "text": "...",
                                 "timestamp": "2024-04-01T09:00:00Z"}]}
        }
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise FixtureError(f"Cannot read fixture {path}: {e}") from e

    if not isinstance(raw, dict):
        raise FixtureError(f"Fixture {path} must contain a JSON object")

    messages = [message_from_dict(m) for m in raw.get("messages", [])]
    history = {
        sender: [history_from_dict(h) for h in entries]
        for sender, entries in (raw.get("history") or {}).items()
    }
    logger.debug(f"Loaded fixture {path}: {len(messages)} messages, {len(history)} history senders")
    return StaticMessageSource(messages), StaticHistorySource(history)
