"""Message and dialogue value types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

from parley.identity import canonical_address
from parley.network.base import TEXT_CONTENT_TYPE, NetworkConversation, NetworkMessage

Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class TextContent:
    text: str


@dataclass(frozen=True)
class OtherContent:
    """Any payload Parley does not interpret, tagged with its network content type."""

    kind: str
    payload: Any = field(default=None, compare=False, repr=False)


Content = TextContent | OtherContent


def content_of(message: NetworkMessage) -> Content:
    """Classify a network payload once, at ingestion."""

    if message.content_type == TEXT_CONTENT_TYPE and isinstance(message.content, str):
        return TextContent(message.content)
    return OtherContent(kind=message.content_type, payload=message.content)


@dataclass(frozen=True)
class InboundMessage:
    """Message received from a correspondent."""

    id: str
    sender_address: str
    content: Content
    conversation: NetworkConversation = field(compare=False, repr=False)
    sent_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_network(cls, message: NetworkMessage) -> InboundMessage:
        return cls(
            id=str(message.id),
            sender_address=canonical_address(message.sender_address),
            content=content_of(message),
            conversation=message.conversation,
            sent_at=message.sent_at,
        )

    @property
    def is_text(self) -> bool:
        return isinstance(self.content, TextContent)


@dataclass(frozen=True)
class DialogueEntry:
    """One prior turn, normalized for the chat model."""

    role: Role
    text: str

    def as_message(self) -> dict[str, str]:
        return {"role": self.role, "content": self.text}


HistoryWindow = tuple[DialogueEntry, ...]
EMPTY_HISTORY: HistoryWindow = ()
