"""Failure boundary around handler invocation."""

from __future__ import annotations

from loguru import logger

from parley.context import Handler, HandlerContext

APOLOGY_REPLY = "Sorry, an error occurred. Please try again later."


async def dispatch(handler: Handler, context: HandlerContext) -> None:
    """Run ``handler`` for one message. Never raises for handler or reply failures.

    A failed handler or reply earns one apology; a failed apology is only logged.
    """

    sender = context.message.sender_address
    try:
        await handler(context)
        return
    except Exception:
        logger.exception("dispatch.handler.error sender={} message_id={}", sender, context.message.id)

    try:
        await context.reply(APOLOGY_REPLY)
    except Exception:
        logger.exception("dispatch.apology.error sender={} message_id={}", sender, context.message.id)
