"""Pytest configuration and shared fixtures."""

import asyncio

import pytest
from datetime import datetime, timedelta, timezone

from threadline.sources import FetchError, MessageSource, StaticHistorySource, StaticMessageSource
from threadline.thread.models import HistoryEntry, Message

BASE_TIME = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)


class FlakySource(MessageSource):
    """Wraps a StaticMessageSource and raises FetchError for chosen ids."""

    def __init__(self, inner: StaticMessageSource, failing: set[str]):
        self.inner = inner
        self.failing = failing
        self.calls: list[str] = []

    async def fetch_message(self, message_id):
        self.calls.append(message_id)
        if message_id in self.failing:
            raise FetchError(f"rate limited on {message_id}")
        return await self.inner.fetch_message(message_id)


class SlowSource(MessageSource):
    """Wraps a StaticMessageSource and delays chosen ids, recording completion order."""

    def __init__(self, inner: StaticMessageSource, delays: dict[str, float]):
        self.inner = inner
        self.delays = delays
        self.completed: list[str] = []

    async def fetch_message(self, message_id):
        await asyncio.sleep(self.delays.get(message_id, 0))
        self.completed.append(message_id)
        return await self.inner.fetch_message(message_id)


@pytest.fixture
def make_msg():
    """Factory: make_msg('2', 'bob', 'Hi', minute=1, parent_id='1')."""
    def _make(
        id, sender, text, minute=0, parent_id=None, quoted_id=None, photos=(),
    ) -> Message:
        return Message(
            id=id,
            sender=sender,
            text=text,
            created_at=BASE_TIME + timedelta(minutes=minute),
            parent_id=parent_id,
            quoted_id=quoted_id,
            photos=tuple(photos),
        )
    return _make


@pytest.fixture
def make_entry():
    def _make(sender, text, minute=0) -> HistoryEntry:
        return HistoryEntry(sender=sender, text=text, timestamp=BASE_TIME - timedelta(days=1) + timedelta(minutes=minute))
    return _make


@pytest.fixture
def chain_source(make_msg):
    """Four-message reply chain: 1 <- 2 <- 3 <- 4 (focus candidate)."""
    return StaticMessageSource([
        make_msg("1", "alice", "Root post", minute=0),
        make_msg("2", "bob", "First reply", minute=1, parent_id="1"),
        make_msg("3", "threadbot", "Bot reply", minute=2, parent_id="2"),
        make_msg("4", "bob", "Second reply", minute=3, parent_id="3"),
    ])


@pytest.fixture
def empty_history():
    return StaticHistorySource()
