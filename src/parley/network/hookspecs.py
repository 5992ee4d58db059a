"""Pluggy hook namespace for messaging network adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from parley.config import Settings
    from parley.network.base import NetworkFactory

PARLEY_HOOK_NAMESPACE = "parley"
hookspec = pluggy.HookspecMarker(PARLEY_HOOK_NAMESPACE)
hookimpl = pluggy.HookimplMarker(PARLEY_HOOK_NAMESPACE)


class NetworkHookSpecs:
    """Hook contract for network adapter plugins."""

    @hookspec(firstresult=True)
    def provide_network(self, name: str, settings: Settings) -> NetworkFactory | None:
        """Return a client factory when this plugin serves the network called ``name``."""
