"""Chat completion backends."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from loguru import logger
from openai import AsyncOpenAI, OpenAIError
from openai.types.chat import ChatCompletionMessageParam

from parley.config import Settings
from parley.errors import ConfigError
from parley.events import DialogueEntry


class Generator(Protocol):
    """Produce a reply for ``user_text`` given the prior dialogue."""

    async def generate(self, system_prompt: str, history: Sequence[DialogueEntry], user_text: str) -> str: ...


def build_messages(
    system_prompt: str, history: Sequence[DialogueEntry], user_text: str
) -> list[ChatCompletionMessageParam]:
    messages: list[ChatCompletionMessageParam] = [{"role": "system", "content": system_prompt}]
    for entry in history:
        if entry.role == "assistant":
            messages.append({"role": "assistant", "content": entry.text})
        else:
            messages.append({"role": "user", "content": entry.text})
    messages.append({"role": "user", "content": user_text})
    return messages


class OpenAIGenerator:
    """Generator backed by an OpenAI-compatible chat completions API."""

    def __init__(self, client: AsyncOpenAI, *, model: str, max_tokens: int | None = None) -> None:
        self._client = client
        self.model = model
        self.max_tokens = max_tokens

    @classmethod
    def from_settings(cls, settings: Settings) -> OpenAIGenerator:
        try:
            client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                base_url=settings.api_base,
                timeout=settings.request_timeout_seconds,
            )
        except OpenAIError as exc:
            raise ConfigError("chat model client is not configured, set OPENAI_API_KEY") from exc
        return cls(client, model=settings.model, max_tokens=settings.max_tokens)

    async def generate(self, system_prompt: str, history: Sequence[DialogueEntry], user_text: str) -> str:
        messages = build_messages(system_prompt, history, user_text)
        if self.max_tokens is None:
            response = await self._client.chat.completions.create(model=self.model, messages=messages)
        else:
            response = await self._client.chat.completions.create(
                model=self.model, messages=messages, max_tokens=self.max_tokens
            )
        logger.debug("generation.done model={} history={}", self.model, len(history))
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
