"""Per-message handler context."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass

from parley.errors import ReplySendError
from parley.events import DialogueEntry, HistoryWindow, InboundMessage
from parley.session import Session


@dataclass(frozen=True)
class HandlerContext:
    """Everything a handler may see about one inbound message."""

    message: InboundMessage
    history: HistoryWindow
    session: Session

    async def reply(self, content: str) -> None:
        """Send ``content`` into the conversation the message arrived on."""

        try:
            await self.message.conversation.send(content)
        except Exception as exc:
            raise ReplySendError(f"failed to reply to {self.message.sender_address}") from exc


Handler = Callable[[HandlerContext], Awaitable[None]]


def build_context(message: InboundMessage, history: Iterable[DialogueEntry], session: Session) -> HandlerContext:
    if not isinstance(message, InboundMessage):
        raise TypeError(f"expected InboundMessage, got {type(message).__name__}")
    if not isinstance(session, Session):
        raise TypeError(f"expected Session, got {type(session).__name__}")
    if history is None:
        raise TypeError("history must be an iterable of DialogueEntry, not None")
    window = tuple(history)
    for entry in window:
        if not isinstance(entry, DialogueEntry):
            raise TypeError(f"history entries must be DialogueEntry, got {type(entry).__name__}")
    return HandlerContext(message=message, history=window, session=session)
