"""Anthropic Messages API adapter for context bundles."""

from ..thread.models import ContextBundle


def bundle_to_content_blocks(bundle: ContextBundle) -> list[dict]:
    """Translate a bundle into Anthropic user-content blocks.

    Each image is preceded by a short text block naming its sender, and
    the bundle text comes last so the model reads it after the images.
    """
    blocks: list[dict] = []
    for image in bundle.images:
        blocks.append({"type": "text", "text": f"[Image from @{image.sender or 'unknown'}]"})
        blocks.append({
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": image.media_type,
                "data": image.data,
            },
        })
    blocks.append({"type": "text", "text": bundle.text})
    return blocks


def build_user_message(bundle: ContextBundle) -> dict:
    """Wrap the bundle as a single Anthropic `user` message."""
    return {"role": "user", "content": bundle_to_content_blocks(bundle)}
