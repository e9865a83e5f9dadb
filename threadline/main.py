"""Threadline — runtime wiring: logging and settings-driven assembly."""

import logging
import os
from typing import Optional

from .config import ThreadlineSettings
from .interface import InterfaceAssembler
from .media import MediaFetcher
from .sources import HistorySource, MessageSource
from .thread.models import ContextBundle

_log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("threadline")


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None):
    """Configure root logging: stderr always, plus a file when requested."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(os.path.expanduser(log_file), encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format=_log_format,
        handlers=handlers,
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def build_bundle(
    focus_id: str,
    settings: ThreadlineSettings,
    source: MessageSource,
    history: Optional[HistorySource] = None,
    fetch_images: bool = True,
) -> Optional[ContextBundle]:
    """Assemble a bundle with collaborators configured from `settings`."""
    media = None
    if fetch_images:
        media = MediaFetcher(
            timeout=settings.image_timeout,
            max_bytes=settings.max_image_bytes,
            max_concurrent=settings.max_concurrent_fetches,
        )

    assembler = InterfaceAssembler(
        source,
        history=history,
        media=media,
        bot_handle=settings.bot_handle,
        max_hops=settings.max_hops,
    )
    try:
        return await assembler.assemble(focus_id)
    finally:
        if media is not None:
            await media.close()
