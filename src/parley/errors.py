"""Application-level exception types for Parley."""

from __future__ import annotations


class ParleyError(Exception):
    """Base exception for Parley."""


class ConfigError(ParleyError):
    """Raised for deterministic misconfiguration. Never retried."""


class ConnectError(ParleyError):
    """Raised when a session cannot be established with the messaging network."""


class StreamError(ParleyError):
    """Raised when the live message subscription fails."""


class HistoryFetchError(ParleyError):
    """Raised when prior turns for a correspondent cannot be fetched."""


class HandlerError(ParleyError):
    """Raised by handlers that cannot produce a reply."""


class ReplySendError(ParleyError):
    """Raised when a reply cannot be delivered to its conversation."""
