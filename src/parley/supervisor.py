"""Bounded reconnect supervision of session + stream cycles."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import StrEnum

from loguru import logger

from parley.consumer import StreamConsumer
from parley.context import Handler
from parley.errors import ConfigError
from parley.logging_utils import bind_address
from parley.session import Session, SessionManager

DEFAULT_MAX_RETRIES = 5


class SupervisorState(StrEnum):
    CONNECTING = "connecting"
    RUNNING = "running"
    RETRYING = "retrying"
    FATAL = "fatal"
    STOPPED = "stopped"


@dataclass
class RetryBudget:
    """Remaining reconnect attempts. Never negative."""

    remaining: int

    def __post_init__(self) -> None:
        if self.remaining < 0:
            raise ValueError("retry budget must be non-negative")

    def consume(self) -> bool:
        """Spend one retry. Return ``False`` when the budget is already exhausted."""

        if self.remaining == 0:
            return False
        self.remaining -= 1
        return True


class ReconnectSupervisor:
    """Restart ingestion on transient failures until the stream ends or retries run out."""

    def __init__(
        self,
        sessions: SessionManager,
        consumer: StreamConsumer,
        *,
        key: str | None,
        env: str,
        retry_delay_seconds: float = 0.0,
    ) -> None:
        self._sessions = sessions
        self._consumer = consumer
        self._key = key
        self._env = env
        self._retry_delay_seconds = retry_delay_seconds
        self.state = SupervisorState.CONNECTING
        self.last_error: BaseException | None = None

    async def supervise(self, handler: Handler, max_retries: int = DEFAULT_MAX_RETRIES) -> SupervisorState:
        budget = RetryBudget(max_retries)
        self.state = SupervisorState.CONNECTING
        self.last_error = None

        while True:
            match self.state:
                case SupervisorState.CONNECTING:
                    try:
                        session = await self._sessions.connect(self._key, self._env)
                    except ConfigError as exc:
                        self.last_error = exc
                        self.state = SupervisorState.FATAL
                    except Exception as exc:
                        self.last_error = exc
                        logger.opt(exception=True).warning("supervisor.connect.error")
                        self.state = SupervisorState.RETRYING
                    else:
                        self.state = SupervisorState.RUNNING
                        self.state = await self._run(session, handler)

                case SupervisorState.RETRYING:
                    if not budget.consume():
                        self.state = SupervisorState.FATAL
                        continue
                    logger.warning("supervisor.retrying retries_left={}", budget.remaining)
                    if self._retry_delay_seconds:
                        await asyncio.sleep(self._retry_delay_seconds)
                    self.state = SupervisorState.CONNECTING

                case SupervisorState.FATAL:
                    logger.error("supervisor.fatal error={!r}", self.last_error)
                    return self.state

                case SupervisorState.STOPPED:
                    logger.info("supervisor.done")
                    return self.state

    async def _run(self, session: Session, handler: Handler) -> SupervisorState:
        """Consume one session's stream, then close it. Return the next state."""

        try:
            with bind_address(session.address):
                await self._consumer.consume(session, handler)
        except Exception as exc:
            self.last_error = exc
            logger.opt(exception=True).warning("supervisor.stream.error address={}", session.address)
            return SupervisorState.RETRYING
        finally:
            await session.close()
        return SupervisorState.STOPPED
