"""Messaging network adapters and plugin discovery."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

import pluggy
from loguru import logger

from parley.errors import ConfigError
from parley.network.base import (
    TEXT_CONTENT_TYPE,
    NetworkClient,
    NetworkConversation,
    NetworkFactory,
    NetworkMessage,
)
from parley.network.hookspecs import PARLEY_HOOK_NAMESPACE, NetworkHookSpecs, hookimpl
from parley.network.memory import MemoryNetwork
from parley.network.plugin import MemoryNetworkPlugin

if TYPE_CHECKING:
    from parley.config import Settings

__all__ = [
    "TEXT_CONTENT_TYPE",
    "MemoryNetwork",
    "NetworkClient",
    "NetworkConversation",
    "NetworkFactory",
    "NetworkMessage",
    "build_network_factory",
    "hookimpl",
]


def build_network_factory(settings: Settings, *, plugins: Iterable[Any] = ()) -> NetworkFactory:
    """Resolve the client factory for ``settings.network`` from registered plugins.

    Installed plugins (entry-point group ``parley``) and explicit ``plugins`` take
    precedence over the built-in in-memory network.
    """

    manager = pluggy.PluginManager(PARLEY_HOOK_NAMESPACE)
    manager.add_hookspecs(NetworkHookSpecs)
    manager.register(MemoryNetworkPlugin(), name="builtin:memory")
    loaded = manager.load_setuptools_entrypoints(PARLEY_HOOK_NAMESPACE)
    if loaded:
        logger.info("network.plugins.loaded count={}", loaded)
    for plugin in plugins:
        manager.register(plugin)

    factory = manager.hook.provide_network(name=settings.network, settings=settings)
    if factory is None:
        raise ConfigError(f"no plugin provides network {settings.network!r}")
    return factory
