"""Built-in message handlers."""

from __future__ import annotations

from loguru import logger

from parley.config import DEFAULT_SYSTEM_PROMPT
from parley.context import HandlerContext
from parley.errors import HandlerError
from parley.events import OtherContent, TextContent
from parley.generation import Generator

TEXT_ONLY_REPLY = "Sorry, I only understand text messages."


class ChatHandler:
    """Answer text messages with the configured chat model."""

    def __init__(self, generator: Generator, *, system_prompt: str = DEFAULT_SYSTEM_PROMPT) -> None:
        self._generator = generator
        self.system_prompt = system_prompt

    async def __call__(self, context: HandlerContext) -> None:
        match context.message.content:
            case OtherContent(kind=kind):
                logger.info("chat.unsupported sender={} kind={}", context.message.sender_address, kind)
                await context.reply(TEXT_ONLY_REPLY)
                return
            case TextContent(text=text):
                pass

        response = await self._generator.generate(self.system_prompt, context.history, text)
        if not response:
            raise HandlerError("chat model returned an empty reply")
        await context.reply(response)
