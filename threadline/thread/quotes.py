"""Quote resolution — attach one level of quoted-message context to each node."""

import asyncio
import logging
from dataclasses import replace
from typing import Optional

from ..sources import MessageSource
from .models import Message, QuoteContext, ThreadNode
from .walker import fetch_or_none

logger = logging.getLogger("threadline.thread.quotes")


async def resolve_quote(source: MessageSource, message: Message) -> Optional[QuoteContext]:
    """Resolve the message quoted by `message`, if any.

    The quoted message's own quote is never followed.
    """
    if not message.quoted_id:
        return None

    quoted = await fetch_or_none(source, message.quoted_id)
    if quoted is None:
        logger.debug(f"Quoted message {message.quoted_id} (from {message.id}) unavailable")
        return None
    return QuoteContext.from_message(quoted)


async def attach_quotes(source: MessageSource, nodes: list[ThreadNode]) -> list[ThreadNode]:
    """Return a copy of `nodes` with quote contexts resolved concurrently.

    Results are matched back by position, so the output order is the
    input order regardless of which lookup finishes first.
    """
    if not nodes:
        return []

    quotes = await asyncio.gather(*(resolve_quote(source, n.message) for n in nodes))
    return [replace(node, quote=quote) for node, quote in zip(nodes, quotes)]
