"""
Host capability surface.

The pipeline only depends on TextCapability: a readiness query plus
session creation, where a session takes text and returns free text.
LocalModelCapability implements it on top of a local model server.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

from ..config import CapabilityConfig, get_config
from ..errors import CapabilityInvocationFailure, CapabilityUnavailable
from ..models.capability import Readiness
from .llm_client import LLMClient
from .prompts import SUMMARIZER_SYSTEM_PROMPT


logger = logging.getLogger(__name__)


class CapabilitySession(ABC):
    """One configured conversation with a capability."""

    @abstractmethod
    async def run(self, text: str) -> str:
        """Send text, get free text back."""
        ...


class TextCapability(ABC):
    """Base class every host capability must implement."""

    name: str

    @abstractmethod
    async def availability(self) -> Readiness:
        """Report whether the capability can be used right now."""
        ...

    @abstractmethod
    async def create_session(self, system_prompt: Optional[str] = None) -> CapabilitySession:
        """Open a session, optionally overriding the default instruction."""
        ...


class LocalModelSession(CapabilitySession):

    def __init__(self, client: LLMClient, model: str, system_prompt: str):
        self.client = client
        self.model = model
        self.system_prompt = system_prompt

    async def run(self, text: str) -> str:
        return await self.client.call_raw(self.model, self.system_prompt, text)


class LocalModelCapability(TextCapability):
    """A capability served by one model on the local server."""

    def __init__(
        self,
        name: str,
        model: str,
        client: Optional[LLMClient] = None,
        system_prompt: str = "",
        enabled: bool = True,
    ):
        self.name = name
        self.model = model
        self.client = client or LLMClient()
        self.system_prompt = system_prompt
        self.enabled = enabled

    async def availability(self) -> Readiness:
        if not self.enabled or not self.client.is_available():
            return Readiness.NO

        installed = await self.client.list_models()
        if self._is_installed(installed):
            return Readiness.READILY
        # Server is up, model still has to be pulled
        return Readiness.AFTER_DOWNLOAD

    def _is_installed(self, installed: list[str]) -> bool:
        if self.model in installed:
            return True
        # Ollama reports "name:latest" for an untagged name
        if ":" not in self.model:
            return f"{self.model}:latest" in installed
        return False

    async def create_session(self, system_prompt: Optional[str] = None) -> CapabilitySession:
        if not self.enabled or not self.client.is_available():
            raise CapabilityUnavailable(f"{self.name} capability is disabled or unconfigured")
        return LocalModelSession(self.client, self.model, system_prompt or self.system_prompt)


async def invoke(
    capability: TextCapability,
    text: str,
    system_prompt: Optional[str] = None,
    timeout: Optional[float] = None,
) -> str:
    """
    Open a session and run text through it, bounded by timeout.

    Raises:
        CapabilityUnavailable: If the session cannot be opened because the
            capability is not usable
        CapabilityInvocationFailure: If the call raises or times out
    """
    if timeout is None:
        timeout = get_config().capabilities.call_timeout_seconds

    async def _run() -> str:
        session = await capability.create_session(system_prompt)
        return await session.run(text)

    try:
        return await asyncio.wait_for(_run(), timeout=timeout)
    except CapabilityUnavailable:
        raise
    except asyncio.TimeoutError as e:
        raise CapabilityInvocationFailure(
            f"{capability.name} call timed out after {timeout:.0f}s"
        ) from e
    except Exception as e:
        raise CapabilityInvocationFailure(
            f"{capability.name} call failed: {type(e).__name__}: {e}"
        ) from e


def build_default_capabilities(
    config: Optional[CapabilityConfig] = None,
    client: Optional[LLMClient] = None,
) -> tuple[TextCapability, TextCapability]:
    """Summarizer and prompt capabilities backed by the configured local server."""
    config = config or get_config().capabilities
    client = client or LLMClient(base_url=config.base_url, api_key=config.api_key)

    summarizer = LocalModelCapability(
        name="summarizer",
        model=config.summarizer_model,
        client=client,
        system_prompt=SUMMARIZER_SYSTEM_PROMPT,
        enabled=config.enable_summarizer,
    )
    prompt = LocalModelCapability(
        name="prompt",
        model=config.prompt_model,
        client=client,
        enabled=config.enable_prompt,
    )
    return summarizer, prompt
