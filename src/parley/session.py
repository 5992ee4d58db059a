"""Session establishment against the messaging network."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from loguru import logger

from parley.errors import ConfigError, ConnectError
from parley.identity import Identity, resolve_identity, same_address
from parley.network.base import NetworkClient, NetworkFactory

ALLOWED_ENVS = frozenset({"production", "dev"})


@dataclass
class Session:
    """Live identity-bound connection. Owned by exactly one supervisor cycle."""

    identity: Identity
    client: NetworkClient
    env: str
    closed: bool = field(default=False, init=False)

    @property
    def address(self) -> str:
        return self.identity.address

    def is_self(self, address: str) -> bool:
        return same_address(address, self.address)

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            await self.client.close()
        except Exception:
            logger.opt(exception=True).warning("session.close.error address={}", self.address)


class SessionManager:
    """Create sessions through a network factory."""

    def __init__(self, factory: NetworkFactory, *, connect_timeout_seconds: float | None = None) -> None:
        self._factory = factory
        self._connect_timeout_seconds = connect_timeout_seconds

    async def connect(self, key: str | None, env: str) -> Session:
        if env not in ALLOWED_ENVS:
            raise ConfigError(f"invalid network env {env!r}, expected one of {sorted(ALLOWED_ENVS)}")
        identity = resolve_identity(key)

        try:
            async with asyncio.timeout(self._connect_timeout_seconds):
                client = await self._factory(identity, env)
        except Exception as exc:
            raise ConnectError(f"failed to connect {identity.address} to {env}") from exc

        session = Session(identity=identity, client=client, env=env)
        try:
            async with asyncio.timeout(self._connect_timeout_seconds):
                await client.publish_contact()
        except Exception as exc:
            await session.close()
            raise ConnectError(f"failed to publish contact for {identity.address}") from exc

        logger.info("session.connected address={} env={} ephemeral={}", session.address, env, identity.ephemeral)
        return session
