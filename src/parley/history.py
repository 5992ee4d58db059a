"""Per-correspondent history window loading."""

from __future__ import annotations

import asyncio

from loguru import logger

from parley.errors import HistoryFetchError
from parley.events import EMPTY_HISTORY, DialogueEntry, HistoryWindow, OtherContent, TextContent, content_of
from parley.identity import canonical_address
from parley.network.base import NetworkConversation, NetworkMessage
from parley.session import Session

DEFAULT_HISTORY_LIMIT = 5


class HistoryLoader:
    """Fetch the most recent turns exchanged with one correspondent.

    ``limit`` counts the triggering message, which is dropped, so a window holds at
    most ``limit - 1`` entries. Messages that arrived after the trigger are never
    part of its window.
    """

    def __init__(self, *, limit: int = DEFAULT_HISTORY_LIMIT, timeout_seconds: float | None = None) -> None:
        if limit < 2:
            raise ValueError("history limit must leave room for at least one prior turn")
        self.limit = limit
        self._timeout_seconds = timeout_seconds

    async def load(self, session: Session, correspondent: str, trigger_id: str | None = None) -> HistoryWindow:
        """Return the turns preceding ``trigger_id``, or preceding the newest message when it is unknown."""

        try:
            async with asyncio.timeout(self._timeout_seconds):
                conversation = await self._find_conversation(session, correspondent)
                if conversation is None:
                    return EMPTY_HISTORY
                messages = await conversation.messages(limit=self.limit, descending=True)
                if trigger_id is not None and len(messages) == self.limit:
                    position = find_message(messages, trigger_id)
                    if position != 0:
                        # Later messages crowd the page; reach past them so the window stays full.
                        wider = None if position is None else self.limit + position
                        messages = await conversation.messages(limit=wider, descending=True)
            window = self._to_window(session, drop_trigger(messages, trigger_id, keep=self.limit - 1))
        except Exception as exc:
            raise HistoryFetchError(f"failed to load history with {correspondent}") from exc

        logger.debug("history.loaded correspondent={} entries={}", correspondent, len(window))
        return window

    async def _find_conversation(self, session: Session, correspondent: str) -> NetworkConversation | None:
        wanted = canonical_address(correspondent)
        for conversation in await session.client.list_conversations():
            if canonical_address(conversation.peer_address) == wanted:
                return conversation
        return None

    @staticmethod
    def _to_window(session: Session, newest_first: list[NetworkMessage]) -> HistoryWindow:
        entries = [to_entry(session, message) for message in newest_first]
        entries.reverse()
        return tuple(entries)


def find_message(newest_first: list[NetworkMessage], message_id: str | None) -> int | None:
    if message_id is None:
        return None
    for index, message in enumerate(newest_first):
        if str(message.id) == message_id:
            return index
    return None


def drop_trigger(
    newest_first: list[NetworkMessage], trigger_id: str | None = None, *, keep: int | None = None
) -> list[NetworkMessage]:
    """Keep only messages older than the trigger, at most ``keep`` of them.

    Without a known trigger the newest message is taken to be the one being handled.
    """

    position = find_message(newest_first, trigger_id)
    start = 1 if position is None else position + 1
    end = None if keep is None else start + keep
    return list(newest_first[start:end])


def to_entry(session: Session, message: NetworkMessage) -> DialogueEntry:
    role = "assistant" if session.is_self(message.sender_address) else "user"
    match content_of(message):
        case TextContent(text=text):
            return DialogueEntry(role=role, text=text)
        case OtherContent(kind=kind):
            return DialogueEntry(role=role, text=f"[{kind}]")
