"""Data types for thread reconstruction and context bundles."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Message:
    """A platform message as returned by the message source. Never mutated."""
    id: str
    sender: str
    text: str
    created_at: datetime
    parent_id: Optional[str] = None     # message this one replies to
    quoted_id: Optional[str] = None     # message this one quotes
    photos: tuple[str, ...] = ()        # image locators, in post order


@dataclass(frozen=True)
class QuoteContext:
    """Snapshot of a quoted message, resolved one level deep."""
    sender: str
    text: str
    timestamp: datetime
    photos: tuple[str, ...] = ()

    @classmethod
    def from_message(cls, message: Message) -> "QuoteContext":
        return cls(
            sender=message.sender,
            text=message.text,
            timestamp=message.created_at,
            photos=message.photos,
        )


@dataclass(frozen=True)
class ThreadNode:
    message: Message
    quote: Optional[QuoteContext] = None
    is_focus: bool = False

    @property
    def sender(self) -> str:
        return self.message.sender

    @property
    def text(self) -> str:
        return self.message.text

    @property
    def timestamp(self) -> datetime:
        return self.message.created_at

    @property
    def photos(self) -> tuple[str, ...]:
        return self.message.photos


@dataclass(frozen=True)
class HistoryEntry:
    """A persisted past message between the bot and a user."""
    sender: str
    text: str
    timestamp: datetime


@dataclass(frozen=True)
class ImageRef:
    url: str
    sender: str


@dataclass(frozen=True)
class EncodedImage:
    sender: str
    media_type: str     # e.g. 'image/png'
    data: str           # base64 payload
    url: str = ""

    def to_dict(self) -> dict:
        return {
            "sender": self.sender,
            "media_type": self.media_type,
            "data": self.data,
            "url": self.url,
        }


@dataclass
class ContextBundle:
    """Rendered context for one inbound message: transcript text plus images.

    Built fresh for every assemble() call; nothing is shared between bundles.
    """
    text: str
    images: list[EncodedImage] = field(default_factory=list)
    focus_sender: str = ""
    focus_text: str = ""

    @property
    def image_count(self) -> int:
        return len(self.images)

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "focus_sender": self.focus_sender,
            "focus_text": self.focus_text,
            "images": [img.to_dict() for img in self.images],
        }
