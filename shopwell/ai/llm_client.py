"""
Async client for an on-device model server speaking the OpenAI API
(Ollama, llama.cpp server, LM Studio).
"""
import asyncio
import logging
from typing import Optional

from openai import APIConnectionError, AsyncOpenAI
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from ..config import get_config


logger = logging.getLogger(__name__)


class LLMClient:
    """
    Thin async wrapper around AsyncOpenAI pointed at a local server.
    Raw text in, raw text out; parsing is left to the callers.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
    ):
        config = get_config()
        self.base_url = base_url or config.capabilities.base_url
        self.api_key = api_key or config.capabilities.api_key
        self.max_tokens = config.capabilities.max_tokens
        self.temperature = config.capabilities.temperature

        # AsyncOpenAI keeps an httpx pool bound to the loop it first ran on
        self._client: Optional[AsyncOpenAI] = None
        self._client_loop: Optional[asyncio.AbstractEventLoop] = None

        if not self.base_url:
            logger.warning("No local model server configured")

    def is_available(self) -> bool:
        """Check if the client is properly configured."""
        return bool(self.base_url)

    @property
    def client(self) -> AsyncOpenAI:
        """The AsyncOpenAI client for the running event loop, rebuilt when the loop changes."""
        if not self.is_available():
            raise RuntimeError("LLM client not configured")
        loop = asyncio.get_running_loop()
        if self._client is None or self._client_loop is not loop:
            if self._client is not None:
                logger.debug("Event loop changed, creating a new model server client")
            self._client = AsyncOpenAI(base_url=self.base_url, api_key=self.api_key)
            self._client_loop = loop
        return self._client

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=2),
        retry=retry_if_exception_type(APIConnectionError),
        before_sleep=lambda retry_state: logger.warning(
            f"Model list retry attempt {retry_state.attempt_number}"
        ),
        reraise=True,
    )
    async def list_models(self) -> list[str]:
        """Model ids the server has installed. Retried once while the server starts."""
        return [model.id async for model in self.client.models.list()]

    async def _call(
        self,
        model: str,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        """Make an API call and return the response text."""
        response = await self.client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        return response.choices[0].message.content or ""

    async def call_raw(
        self,
        model: str,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        """Make a raw API call without any parsing."""
        return await self._call(model, system_prompt, user_prompt)
