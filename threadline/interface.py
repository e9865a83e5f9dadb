"""Interface assembler — turn one inbound message id into a context bundle."""

import logging
from typing import Optional

from .formatting import format_timestamp
from .media import MediaFetcher
from .memory.formatter import render_memory
from .sources import HistorySource, MessageSource
from .thread.images import collect_images, dedupe_refs, focus_images
from .thread.models import ContextBundle, HistoryEntry, ThreadNode
from .thread.quotes import attach_quotes
from .thread.walker import DEFAULT_MAX_HOPS, build_ancestry

logger = logging.getLogger("threadline.interface")

INTERFACE_HEADER = (
    "# TWITTER INTERFACE\n"
    "This section contains your LIVE Twitter interface featuring context "
    "you need to reply to the current tweet."
)
FOCUS_BANNER = (
    "## THIS IS THE CURRENT TWEET YOU ARE REPLYING TO. "
    "GIVE YOUR FULL FOCUS TO REPLYING TO THIS TWEET."
)


def render_focus_section(focus: ThreadNode) -> str:
    """Highlighted block for the focus message and its quote, if any."""
    lines = [
        FOCUS_BANNER,
        f"Sender: {focus.sender or 'Unknown User'}",
        f"Time: {format_timestamp(focus.timestamp)}",
        f"Content: {focus.text}",
    ]
    if focus.quote:
        quote = focus.quote
        lines += [
            "",
            "Quote Tweet Context:",
            f"  Sender: {quote.sender or 'Unknown User'}",
            f"  Time: {format_timestamp(quote.timestamp)}",
            f"  Content: {quote.text}",
        ]
        if quote.photos:
            lines.append(f"  Images: Contains {len(quote.photos)} image(s)")
    return "\n".join(lines)


def render_images_note(count: int) -> str:
    return (
        "## IMAGES IN CONVERSATION\n"
        f"The following messages contain {count} images that provide additional context."
    )


class InterfaceAssembler:
    """Builds context bundles from a message source, history and media fetcher.

    Holds only collaborators and settings; every assemble() call works on
    its own data, so one assembler can serve concurrent requests.
    """

    def __init__(
        self,
        source: MessageSource,
        history: Optional[HistorySource] = None,
        media: Optional[MediaFetcher] = None,
        bot_handle: str = "",
        max_hops: int = DEFAULT_MAX_HOPS,
    ):
        self.source = source
        self.history = history
        self.media = media
        self.bot_handle = bot_handle
        self.max_hops = max_hops

    async def _load_history(self, sender: str) -> list[HistoryEntry]:
        if self.history is None:
            return []
        try:
            return list(await self.history.fetch_history(sender))
        except Exception as e:
            logger.warning(f"Failed to load history for {sender}: {e}")
            return []

    async def assemble(self, focus_id: str) -> Optional[ContextBundle]:
        """Build the bundle for `focus_id`.

        Returns None only when the focus message itself cannot be resolved;
        every other missing piece degrades to an empty or placeholder section.
        """
        nodes = await build_ancestry(self.source, focus_id, max_hops=self.max_hops)
        if not nodes:
            return None

        nodes = await attach_quotes(self.source, nodes)
        focus = nodes[-1]

        history = await self._load_history(focus.sender)
        memory = render_memory(nodes, history, self.bot_handle)

        # Focus media first so it stays grouped with the highlighted section
        refs = dedupe_refs(focus_images(focus) + collect_images(nodes))
        images = await self.media.fetch_all(refs) if self.media and refs else []

        parts = [
            INTERFACE_HEADER,
            f"## RECENT CHAT HISTORY BETWEEN YOU AND {focus.sender or 'THE USER'}\n{memory}",
            render_focus_section(focus),
        ]
        if images:
            parts.append(render_images_note(len(images)))

        logger.info(
            f"Assembled context for {focus_id}: {len(nodes)} thread node(s), "
            f"{len(history)} history entries, {len(images)} image(s)"
        )
        return ContextBundle(
            text="\n\n".join(parts) + "\n",
            images=images,
            focus_sender=focus.sender,
            focus_text=focus.text,
        )


async def build_context_bundle(
    focus_id: str,
    source: MessageSource,
    history: Optional[HistorySource] = None,
    media: Optional[MediaFetcher] = None,
    bot_handle: str = "",
    max_hops: int = DEFAULT_MAX_HOPS,
) -> Optional[ContextBundle]:
    """Assemble a context bundle for one focus message; None if it is unresolvable."""
    assembler = InterfaceAssembler(
        source, history=history, media=media, bot_handle=bot_handle, max_hops=max_hops,
    )
    return await assembler.assemble(focus_id)
