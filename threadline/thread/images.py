"""Image collection across the thread, deduplicated by locator."""

from typing import Iterable

from .models import ImageRef, ThreadNode


def dedupe_refs(refs: Iterable[ImageRef]) -> list[ImageRef]:
    """Drop repeated locators, keeping the first occurrence (and its sender)."""
    seen: set[str] = set()
    unique = []
    for ref in refs:
        if ref.url in seen:
            continue
        seen.add(ref.url)
        unique.append(ref)
    return unique


def collect_images(nodes: list[ThreadNode]) -> list[ImageRef]:
    """Collect images from the non-focus nodes of a thread.

    Each node contributes its own photos, then its quoted message's
    photos (attributed to the quoted sender). The focus node and its
    quote are skipped; the assembler handles those next to the
    highlighted focus section.
    """
    refs = []
    for node in nodes:
        if node.is_focus:
            continue
        for url in node.photos:
            refs.append(ImageRef(url=url, sender=node.sender))
        if node.quote:
            for url in node.quote.photos:
                refs.append(ImageRef(url=url, sender=node.quote.sender))
    return dedupe_refs(refs)


def focus_images(node: ThreadNode) -> list[ImageRef]:
    """The focus node's own photos followed by its quote's photos."""
    refs = [ImageRef(url=url, sender=node.sender) for url in node.photos]
    if node.quote:
        refs.extend(ImageRef(url=url, sender=node.quote.sender or "Unknown User") for url in node.quote.photos)
    return refs
