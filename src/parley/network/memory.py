"""In-process messaging network used for local runs and tests."""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from loguru import logger

from parley.identity import canonical_address
from parley.network.base import TEXT_CONTENT_TYPE

if TYPE_CHECKING:
    from parley.identity import Identity

_END = object()


@dataclass(frozen=True)
class MemoryMessage:
    id: str
    sender_address: str
    content: Any
    content_type: str
    conversation: MemoryConversation
    sent_at: datetime


@dataclass(frozen=True)
class _Record:
    id: str
    sender_address: str
    content: Any
    content_type: str
    sent_at: datetime


class MemoryConversation:
    """One participant's view of a two-party conversation."""

    def __init__(self, network: MemoryNetwork, owner: str, peer_address: str) -> None:
        self._network = network
        self.owner = owner
        self.peer_address = peer_address

    @property
    def topic(self) -> frozenset[str]:
        return frozenset((self.owner, self.peer_address))

    async def messages(self, *, limit: int | None = None, descending: bool = False) -> list[MemoryMessage]:
        self._network.check_available()
        records = list(self._network.records(self.topic))
        if descending:
            records.reverse()
        if limit is not None:
            records = records[:limit]
        return [self._network.materialize(record, self) for record in records]

    async def send(self, content: Any, *, content_type: str = TEXT_CONTENT_TYPE) -> MemoryMessage:
        return self._network.deliver(self, content, content_type)


class MemoryStream:
    """Live subscription to every message addressed to or sent by one client."""

    def __init__(self, network: MemoryNetwork, address: str) -> None:
        self._network = network
        self._address = address
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        network.subscribe(address, self._queue)

    def __aiter__(self) -> AsyncIterator[MemoryMessage]:
        return self

    async def __anext__(self) -> MemoryMessage:
        item = await self._queue.get()
        if item is _END:
            self._network.unsubscribe(self._address, self._queue)
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            self._network.unsubscribe(self._address, self._queue)
            raise item
        return item

    def close(self) -> None:
        """Stop receiving and end iteration once queued messages are drained."""

        self._network.unsubscribe(self._address, self._queue)
        self._queue.put_nowait(_END)


class MemoryClient:
    """Client bound to one identity on a :class:`MemoryNetwork`."""

    def __init__(self, network: MemoryNetwork, address: str, env: str) -> None:
        self._network = network
        self.address = address
        self.env = env
        self.closed = False
        self._streams: list[MemoryStream] = []

    def _ensure_usable(self) -> None:
        if self.closed:
            raise ConnectionError(f"client for {self.address} is closed")
        self._network.check_available()

    async def publish_contact(self) -> None:
        self._ensure_usable()
        self._network.publish_contact(self.address)

    async def list_conversations(self) -> list[MemoryConversation]:
        self._ensure_usable()
        return [MemoryConversation(self._network, self.address, peer) for peer in self._network.peers_of(self.address)]

    async def new_conversation(self, peer_address: str) -> MemoryConversation:
        self._ensure_usable()
        peer = canonical_address(peer_address)
        if not self._network.has_contact(peer):
            raise LookupError(f"{peer} has not published contact information")
        return MemoryConversation(self._network, self.address, peer)

    async def stream_all_messages(self) -> MemoryStream:
        self._ensure_usable()
        stream = MemoryStream(self._network, self.address)
        self._streams.append(stream)
        return stream

    async def close(self) -> None:
        self.closed = True
        for stream in self._streams:
            stream.close()
        self._streams.clear()


class MemoryNetwork:
    """A shared in-process message log with live per-address subscriptions."""

    def __init__(self) -> None:
        self._contacts: set[str] = set()
        self._log: dict[frozenset[str], list[_Record]] = {}
        self._subscribers: dict[str, list[asyncio.Queue[Any]]] = {}
        self._ids = itertools.count(1)
        self._outage: Exception | None = None

    async def connect(self, identity: Identity, env: str) -> MemoryClient:
        self.check_available()
        logger.debug("memory.network.connect address={} env={}", identity.address, env)
        return MemoryClient(self, identity.address, env)

    def check_available(self) -> None:
        if self._outage is not None:
            raise self._outage

    def set_outage(self, error: Exception | None) -> None:
        """Make every network call fail with ``error`` until cleared with ``None``."""

        self._outage = error

    def publish_contact(self, address: str) -> None:
        self._contacts.add(address)

    def has_contact(self, address: str) -> bool:
        return address in self._contacts

    def peers_of(self, address: str) -> list[str]:
        peers: list[str] = []
        for topic in self._log:
            if address in topic:
                (peer,) = topic - {address} or {address}
                peers.append(peer)
        return peers

    def records(self, topic: frozenset[str]) -> list[_Record]:
        return self._log.get(topic, [])

    def materialize(self, record: _Record, view: MemoryConversation) -> MemoryMessage:
        return MemoryMessage(
            id=record.id,
            sender_address=record.sender_address,
            content=record.content,
            content_type=record.content_type,
            conversation=view,
            sent_at=record.sent_at,
        )

    def deliver(self, view: MemoryConversation, content: Any, content_type: str) -> MemoryMessage:
        self.check_available()
        record = _Record(
            id=str(next(self._ids)),
            sender_address=view.owner,
            content=content,
            content_type=content_type,
            sent_at=datetime.now(UTC),
        )
        self._log.setdefault(view.topic, []).append(record)
        for participant in view.topic:
            participant_view = MemoryConversation(self, participant, next(iter(view.topic - {participant}), participant))
            message = self.materialize(record, participant_view)
            for queue in self._subscribers.get(participant, []):
                queue.put_nowait(message)
        return self.materialize(record, view)

    def subscribe(self, address: str, queue: asyncio.Queue[Any]) -> None:
        self._subscribers.setdefault(address, []).append(queue)

    def unsubscribe(self, address: str, queue: asyncio.Queue[Any]) -> None:
        queues = self._subscribers.get(address, [])
        if queue in queues:
            queues.remove(queue)

    def end_streams(self) -> None:
        """End every open subscription normally."""

        self._broadcast(_END)

    def fail_streams(self, error: Exception) -> None:
        """Make every open subscription raise ``error``."""

        self._broadcast(error)

    def _broadcast(self, item: Any) -> None:
        for queues in self._subscribers.values():
            for queue in list(queues):
                queue.put_nowait(item)
