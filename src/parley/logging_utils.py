"""Runtime logging helpers."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from logging import Handler
from typing import Literal

import loguru
from loguru import logger
from rich import get_console
from rich.logging import RichHandler

LogProfile = Literal["default", "rich"]

_PROFILE_FORMATS: dict[LogProfile, str] = {
    "rich": "{extra[address]} | {message}",
    "default": "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<6} | {name}:{function}:{line} | {extra[address]} | {message}",
}
_NO_ADDRESS = "-"
_current_address: ContextVar[str] = ContextVar("parley_address", default=_NO_ADDRESS)
_CONFIGURED: tuple[LogProfile, str] | None = None


def current_address() -> str:
    """Return the session address bound to the running task, if any."""

    return _current_address.get()


@contextmanager
def bind_address(address: str) -> Iterator[None]:
    """Tag every record logged inside the block with ``address``."""

    token = _current_address.set(address)
    try:
        yield
    finally:
        _current_address.reset(token)


def _inject_context(record: loguru.Record) -> None:
    record["extra"].setdefault("address", current_address())


def _build_rich_handler() -> Handler:
    return RichHandler(
        console=get_console(),
        show_level=True,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )


def configure_logging(*, profile: LogProfile = "default", level: str = "INFO") -> None:
    """Configure process-level logging once."""

    global _CONFIGURED
    level = level.upper()
    if (profile, level) == _CONFIGURED:
        return

    logger.remove()
    sink = _build_rich_handler() if profile == "rich" else sys.stderr
    logger.add(
        sink,
        level=level,
        format=_PROFILE_FORMATS[profile],
        backtrace=False,
        diagnose=False,
    )
    logger.configure(patcher=_inject_context)
    _CONFIGURED = (profile, level)
