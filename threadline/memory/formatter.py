"""Memory formatter — render a thread plus persisted history as one transcript.

Layout (sections in fixed order):

    Current Tweet Thread:

    Parent Tweet:
    [ts] sender: text
    Replies Above the Tweet You Are Replying To:
    [ts] sender: text
    The Tweet You Are Replying To:
    [ts] sender: text


    Past Conversation History:

    [ts] sender: text

The focus message is rendered here as part of the thread and again by the
interface assembler in its highlighted section.
"""

import logging
from typing import Optional, Sequence

from ..formatting import as_utc, display_sender, format_timestamp
from ..thread.models import HistoryEntry, QuoteContext, ThreadNode

logger = logging.getLogger("threadline.memory.formatter")

THREAD_HEADER = "Current Tweet Thread:"
PARENT_HEADER = "Parent Tweet:"
REPLIES_HEADER = "Replies Above the Tweet You Are Replying To:"
FOCUS_HEADER = "The Tweet You Are Replying To:"
HISTORY_HEADER = "Past Conversation History:"
NO_HISTORY = "No previous conversation history."


def format_quote(quote: QuoteContext, bot_handle: str = "") -> str:
    """Indented quote lines; images are reported as a count only."""
    lines = [f"    📝 Quoting {display_sender(quote.sender, bot_handle)}: {quote.text}"]
    if quote.photos:
        lines.append(f"    🖼️ Quote tweet contains {len(quote.photos)} image(s)")
    return "\n".join(lines)


def format_message(
    sender: str,
    text: str,
    timestamp,
    quote: Optional[QuoteContext] = None,
    bot_handle: str = "",
) -> str:
    line = f"[{format_timestamp(timestamp)}] {display_sender(sender, bot_handle)}: {text}"
    if quote:
        line += "\n" + format_quote(quote, bot_handle)
    return line


def format_node(node: ThreadNode, bot_handle: str = "") -> str:
    return format_message(node.sender, node.text, node.timestamp, node.quote, bot_handle)


def format_entry(entry: HistoryEntry, bot_handle: str = "") -> str:
    return format_message(entry.sender, entry.text, entry.timestamp, None, bot_handle)


def render_thread(nodes: Sequence[ThreadNode], bot_handle: str = "") -> str:
    """Render the live thread section (parent, replies above, focus)."""
    parent: Optional[ThreadNode] = None
    focus: Optional[ThreadNode] = None
    replies: Sequence[ThreadNode] = ()

    if nodes:
        focus = nodes[-1]
        if len(nodes) > 1:
            parent = nodes[0]
            replies = nodes[1:-1]

    parent_section = f"{PARENT_HEADER}\n{format_node(parent, bot_handle)}\n" if parent else ""
    replies_section = (
        REPLIES_HEADER + "\n" + "\n".join(format_node(n, bot_handle) for n in replies) + "\n"
        if replies else ""
    )
    focus_section = f"{FOCUS_HEADER}\n{format_node(focus, bot_handle)}\n" if focus else ""

    return f"{THREAD_HEADER}\n\n{parent_section}{replies_section}{focus_section}"


def render_history(history: Sequence[HistoryEntry], bot_handle: str = "") -> str:
    """Render persisted history oldest-first, or the no-history placeholder.

    Entries without a timestamp are skipped. Naive timestamps sort as UTC.
    """
    dated = [e for e in history if e.timestamp is not None]
    if len(dated) < len(history):
        logger.debug(f"Skipped {len(history) - len(dated)} history entries without a timestamp")
    if not dated:
        return NO_HISTORY
    ordered = sorted(dated, key=lambda e: as_utc(e.timestamp))
    return f"{HISTORY_HEADER}\n\n" + "\n".join(format_entry(e, bot_handle) for e in ordered)


def render_memory(
    nodes: Sequence[ThreadNode],
    history: Sequence[HistoryEntry],
    bot_handle: str = "",
) -> str:
    """Render thread and history into the conversation memory block."""
    return f"{render_thread(nodes, bot_handle)}\n\n{render_history(history, bot_handle)}"
