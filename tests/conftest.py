from __future__ import annotations

from collections.abc import Awaitable, Callable
from types import SimpleNamespace

import pytest
from support import BOT_KEY, PEER_KEY

from parley.identity import Identity, resolve_identity
from parley.network.memory import MemoryClient, MemoryNetwork
from parley.session import Session, SessionManager


@pytest.fixture
def bot_identity() -> Identity:
    return resolve_identity(BOT_KEY)


@pytest.fixture
def peer_identity() -> Identity:
    return resolve_identity(PEER_KEY)


@pytest.fixture
def network() -> MemoryNetwork:
    return MemoryNetwork()


@pytest.fixture
def sessions(network: MemoryNetwork) -> SessionManager:
    return SessionManager(network.connect)


@pytest.fixture
def make_peer(network: MemoryNetwork, peer_identity: Identity) -> Callable[[], Awaitable[MemoryClient]]:
    async def _make() -> MemoryClient:
        client = await network.connect(peer_identity, "dev")
        await client.publish_contact()
        return client

    return _make


@pytest.fixture
def offline_session(bot_identity: Identity) -> Session:
    async def _close() -> None:
        return None

    return Session(identity=bot_identity, client=SimpleNamespace(close=_close), env="dev")  # type: ignore[arg-type]
