"""Contracts a messaging network adapter must satisfy."""

from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from parley.identity import Identity

TEXT_CONTENT_TYPE = "text"


class NetworkMessage(Protocol):
    """A decoded message as delivered by the network."""

    id: str
    sender_address: str
    content: Any
    content_type: str
    conversation: NetworkConversation
    sent_at: datetime


class NetworkConversation(Protocol):
    """A two-party conversation seen from one participant."""

    peer_address: str

    async def messages(self, *, limit: int | None = None, descending: bool = False) -> list[NetworkMessage]: ...

    async def send(self, content: Any) -> Any: ...


class NetworkClient(Protocol):
    """An authenticated connection bound to one identity."""

    address: str

    async def publish_contact(self) -> None: ...

    async def list_conversations(self) -> list[NetworkConversation]: ...

    async def stream_all_messages(self) -> AsyncIterator[NetworkMessage]: ...

    async def close(self) -> None: ...


class NetworkFactory(Protocol):
    """Create a client for ``identity`` against the ``env`` deployment."""

    async def __call__(self, identity: Identity, env: str) -> NetworkClient: ...
