"""Thread walker — follow reply links upward from the focus message."""

import logging
from typing import Optional

from ..sources import MessageSource, MessageNotFoundError
from .models import Message, ThreadNode

logger = logging.getLogger("threadline.thread.walker")

DEFAULT_MAX_HOPS = 50


async def fetch_or_none(source: MessageSource, message_id: str) -> Optional[Message]:
    """Fetch a message, turning every failure into None.

    Not-found and transient failures are treated the same: the caller
    only ever sees an absent message.
    """
    try:
        return await source.fetch_message(message_id)
    except MessageNotFoundError:
        logger.debug(f"Message {message_id} not found")
        return None
    except Exception as e:
        logger.warning(f"Failed to fetch message {message_id}: {e}")
        return None


async def build_ancestry(
    source: MessageSource,
    focus_id: str,
    max_hops: int = DEFAULT_MAX_HOPS,
) -> list[ThreadNode]:
    """Walk the reply chain from the focus message up to the root.

    Returns nodes oldest-first with the focus node last. Quote contexts
    are not resolved here (see quotes.attach_quotes).

    The walk stops at the first message without a parent, the first
    parent that cannot be resolved, a parent already seen in this walk,
    or after `max_hops` parent lookups. Everything resolved so far is kept.
    An unresolvable focus message yields an empty list.
    """
    focus = await fetch_or_none(source, focus_id)
    if focus is None:
        logger.info(f"Focus message {focus_id} could not be resolved")
        return []

    ancestors: list[Message] = []
    seen = {focus.id}
    current = focus
    hops = 0

    while current.parent_id:
        if hops >= max_hops:
            logger.warning(f"Thread walk for {focus_id} stopped after {max_hops} hops")
            break
        if current.parent_id in seen:
            logger.warning(f"Reply cycle detected at {current.parent_id} while walking {focus_id}")
            break

        hops += 1
        parent = await fetch_or_none(source, current.parent_id)
        if parent is None:
            logger.debug(f"Parent {current.parent_id} unavailable — keeping {len(ancestors) + 1} node(s)")
            break

        ancestors.insert(0, parent)
        seen.add(parent.id)
        current = parent

    nodes = [ThreadNode(message=m) for m in ancestors]
    nodes.append(ThreadNode(message=focus, is_focus=True))
    return nodes
