"""Parley - answer every message, survive every disconnect."""

from .context import Handler, HandlerContext, build_context
from .dispatcher import dispatch
from .supervisor import ReconnectSupervisor, SupervisorState

__version__ = "0.1.0"

__all__ = ["Handler", "HandlerContext", "ReconnectSupervisor", "SupervisorState", "build_context", "dispatch"]
