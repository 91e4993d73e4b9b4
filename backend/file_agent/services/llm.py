"""Language model provider backed by any OpenAI-compatible endpoint, such as OpenAI or a local Ollama."""

import logging
from typing import AsyncIterator, Dict, List, Optional

from openai import AsyncOpenAI

from file_agent.core import config

logger = logging.getLogger(__name__)


class LLMClient:
    """Thin async wrapper exposing complete, stream and chat over chat.completions."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else config.settings.openai_api_key
        self.base_url = base_url if base_url is not None else config.settings.openai_base_url
        self.model = model or config.settings.openai_model or "gpt-4o-mini"
        self.temperature = temperature if temperature is not None else config.settings.llm_temperature
        self._client: Optional[AsyncOpenAI] = None

    @property
    def client(self) -> AsyncOpenAI:
        # Built lazily so a missing key only fails the call that needs it
        if self._client is None:
            client_config = {"api_key": self.api_key or "not-set"}
            if self.base_url:
                client_config["base_url"] = self.base_url
            self._client = AsyncOpenAI(**client_config)
        return self._client

    async def chat(self, messages: List[Dict[str, str]]) -> str:
        """Send a full message list and return the assistant's text."""
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
        )
        content = response.choices[0].message.content or ""
        logger.debug("LLM reply from %s: %d chars", self.model, len(content))
        return content

    async def complete(self, prompt: str) -> str:
        """Single-turn completion of a user prompt."""
        return await self.chat([{"role": "user", "content": prompt}])

    async def stream(self, prompt: str) -> AsyncIterator[str]:
        """Yield reply text chunks as they arrive."""
        stream = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature,
            stream=True,
        )
        async for chunk in stream:
            if chunk.choices and chunk.choices[0].delta.content:
                yield chunk.choices[0].delta.content

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
