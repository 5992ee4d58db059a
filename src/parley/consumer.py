"""Sequential consumption of the live message stream."""

from __future__ import annotations

from typing import Any, Literal

from loguru import logger

from parley.context import Handler, build_context
from parley.dispatcher import dispatch
from parley.errors import HistoryFetchError, StreamError
from parley.events import EMPTY_HISTORY, InboundMessage
from parley.history import HistoryLoader
from parley.session import Session

HistoryFailurePolicy = Literal["degrade", "skip"]


class StreamConsumer:
    """Drive every inbound message through history, context and dispatch, one at a time.

    Failures while handling one message are logged and the loop moves on. Failures of
    the stream itself surface as :class:`StreamError` so the session can be rebuilt.
    """

    def __init__(self, history: HistoryLoader, *, history_failure_policy: HistoryFailurePolicy = "degrade") -> None:
        self._history = history
        self._history_failure_policy = history_failure_policy

    async def consume(self, session: Session, handler: Handler) -> None:
        try:
            stream = await session.client.stream_all_messages()
            iterator = aiter(stream)
        except Exception as exc:
            raise StreamError(f"failed to open message stream for {session.address}") from exc

        logger.info("stream.listening address={}", session.address)
        while True:
            try:
                raw = await anext(iterator)
            except StopAsyncIteration:
                logger.info("stream.ended address={}", session.address)
                return
            except Exception as exc:
                raise StreamError(f"message stream for {session.address} failed") from exc

            try:
                await self.process(session, raw, handler)
            except Exception:
                logger.exception("stream.message.error message_id={}", getattr(raw, "id", None))

    async def process(self, session: Session, raw: Any, handler: Handler) -> bool:
        """Handle one raw network message. Return whether it reached the handler."""

        message = InboundMessage.from_network(raw)
        if session.is_self(message.sender_address):
            return False

        try:
            history = await self._history.load(session, message.sender_address, message.id)
        except HistoryFetchError:
            if self._history_failure_policy == "skip":
                logger.opt(exception=True).warning("stream.history.skip sender={}", message.sender_address)
                return False
            logger.opt(exception=True).warning("stream.history.degraded sender={}", message.sender_address)
            history = EMPTY_HISTORY

        context = build_context(message, history, session)
        await dispatch(handler, context)
        return True
