"""
Text generation clients for the enhancement pass.

The gateway only needs something with ``async generate(prompt) -> str``.
OpenAICompatibleClient speaks the chat-completions API, so the same code
works with OpenAI, vLLM, Ollama and other compatible servers.

Usage:
    client = OpenAICompatibleClient(EnhancementConfig(base_url="http://localhost:8000/v1"))
    text = await client.generate("Summarize ...")
"""

from __future__ import annotations

import logging
import os
import time
from typing import Protocol

import httpx

from scholarparse.config import EnhancementConfig
from scholarparse.exceptions import EnhancementError

logger = logging.getLogger(__name__)

API_KEY_ENV = "SCHOLARPARSE_API_KEY"
SYSTEM_PROMPT = "You are an academic document formatting assistant."


class TextGenerator(Protocol):
    """Anything that turns a prompt into generated text."""

    async def generate(self, prompt: str) -> str: ...


class OpenAICompatibleClient:
    """
    Async client for OpenAI-compatible chat-completions endpoints.

    One request per call and no retries; the caller bounds the wait.

    Attributes:
        config: Endpoint, model and generation settings.
    """

    def __init__(
        self,
        config: EnhancementConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            config: Enhancement settings (defaults if omitted).
            transport: Custom httpx transport (e.g. httpx.MockTransport in tests).
        """
        self.config = config or EnhancementConfig()
        self._transport = transport

    @property
    def api_key(self) -> str | None:
        return self.config.api_key or os.environ.get(API_KEY_ENV)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def generate(self, prompt: str) -> str:
        """
        Send one chat request and return the reply text.

        Raises:
            httpx.HTTPError: On transport or HTTP status failures.
            EnhancementError: If the response has no message content.
        """
        payload = {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }

        start_time = time.time()
        async with httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            headers=self._headers(),
            transport=self._transport,
        ) as client:
            response = await client.post("/chat/completions", json=payload)
            response.raise_for_status()
            data = response.json()

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise EnhancementError(f"Unexpected chat-completions response: {e!r}") from e
        if not isinstance(content, str):
            raise EnhancementError("Chat-completions response has no text content")

        usage = data.get("usage") or {}
        logger.debug(
            "LLM response: %.2fs, prompt_tokens=%s, completion_tokens=%s",
            time.time() - start_time,
            usage.get("prompt_tokens", "?"),
            usage.get("completion_tokens", "?"),
        )
        return content

    def __repr__(self) -> str:
        return f"OpenAICompatibleClient(url={self.config.base_url!r}, model={self.config.model!r})"
