"""Built-in plugin serving the in-process network."""

from __future__ import annotations

from typing import TYPE_CHECKING

from parley.network.hookspecs import hookimpl
from parley.network.memory import MemoryNetwork

if TYPE_CHECKING:
    from parley.config import Settings
    from parley.network.base import NetworkFactory

MEMORY_NETWORK_NAME = "memory"


class MemoryNetworkPlugin:
    def __init__(self, network: MemoryNetwork | None = None) -> None:
        self.network = network or MemoryNetwork()

    @hookimpl
    def provide_network(self, name: str, settings: Settings) -> NetworkFactory | None:
        if name != MEMORY_NETWORK_NAME:
            return None
        return self.network.connect
