from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from parley.events import InboundMessage, OtherContent, TextContent

BOT_KEY = "0x" + "11" * 32
PEER_KEY = "0x" + "22" * 32


class RecordingConversation:
    def __init__(self, peer_address: str = "", *, fail_sends: int = 0) -> None:
        self.peer_address = peer_address
        self.sent: list[str] = []
        self.fail_sends = fail_sends

    async def messages(self, *, limit: int | None = None, descending: bool = False) -> list[Any]:
        return []

    async def send(self, content: str) -> None:
        if self.fail_sends:
            self.fail_sends -= 1
            raise OSError("send failed")
        self.sent.append(content)


class FakeGenerator:
    def __init__(self, reply: str = "generated", *, error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, tuple[Any, ...], str]] = []

    async def generate(self, system_prompt: str, history: Any, user_text: str) -> str:
        self.calls.append((system_prompt, tuple(history), user_text))
        if self.error is not None:
            raise self.error
        return self.reply


def make_inbound(
    sender: str,
    text: str | None = "hi",
    *,
    kind: str = "attachment",
    conversation: Any = None,
    message_id: str = "1",
) -> InboundMessage:
    content = TextContent(text) if text is not None else OtherContent(kind=kind, payload=b"\x00")
    return InboundMessage(
        id=message_id,
        sender_address=sender,
        content=content,
        conversation=conversation if conversation is not None else RecordingConversation(sender),
    )


async def settle(rounds: int = 5) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


async def wait_until(predicate: Callable[[], Awaitable[bool]], timeout: float = 1.0) -> None:
    async def _poll() -> None:
        while not await predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(_poll(), timeout=timeout)
