"""
Capability probe - asks the host which capabilities are ready.
"""
import asyncio
import logging
from typing import Optional

from ..config import get_config
from ..models.capability import CapabilitySet, Readiness
from .capabilities import TextCapability


logger = logging.getLogger(__name__)


class CapabilityProbe:
    """
    Queries summarizer and prompt readiness once per analysis request.

    probe() never raises: a failed query is written to diagnostics and the
    capability counts as not ready. Nothing is cached between calls.
    """

    def __init__(
        self,
        summarizer: Optional[TextCapability] = None,
        prompt: Optional[TextCapability] = None,
        timeout: Optional[float] = None,
    ):
        self.summarizer = summarizer
        self.prompt = prompt
        self.timeout = timeout or get_config().capabilities.call_timeout_seconds

    async def probe(self) -> CapabilitySet:
        diagnostics: dict[str, str] = {}

        summarizer_ready = await self._check("summarizer", self.summarizer, diagnostics)
        prompt_ready = await self._check("prompt", self.prompt, diagnostics)

        capabilities = CapabilitySet(
            summarizer_ready=summarizer_ready,
            prompt_ready=prompt_ready,
            diagnostics=diagnostics,
        )
        log_capabilities(capabilities)
        return capabilities

    async def _check(
        self,
        name: str,
        capability: Optional[TextCapability],
        diagnostics: dict[str, str],
    ) -> bool:
        if capability is None:
            diagnostics[name] = "missing"
            return False

        try:
            raw = await asyncio.wait_for(capability.availability(), timeout=self.timeout)
            readiness = Readiness(raw)
        except asyncio.TimeoutError:
            diagnostics[f"{name}_error"] = f"availability check timed out after {self.timeout:.0f}s"
            logger.warning(f"{name} availability check timed out")
            return False
        except Exception as e:
            diagnostics[f"{name}_error"] = str(e) or type(e).__name__
            logger.warning(f"{name} availability check failed: {type(e).__name__}: {e}")
            return False

        diagnostics[name] = readiness.value
        return readiness is Readiness.READILY


def can_use_ai(capabilities: CapabilitySet) -> bool:
    """Whether at least one stage can run on a capability."""
    return capabilities.any_ready


def status_message(capabilities: CapabilitySet) -> str:
    """User-facing summary of what the analysis will use."""
    if capabilities.summarizer_ready and capabilities.prompt_ready:
        return "On-device AI fully available. Enhanced analysis enabled."
    if capabilities.summarizer_ready:
        return "On-device summarizer available. Limited wellness analysis enabled."
    if capabilities.prompt_ready:
        return "On-device prompt model available. Basic wellness analysis enabled."
    if any(key.endswith("_error") for key in capabilities.diagnostics):
        return "On-device AI could not be reached. Basic analysis will be used."
    return "On-device AI not ready. Using fallback analysis."


def log_capabilities(capabilities: CapabilitySet) -> None:
    logger.info(
        f"Capabilities: summarizer={capabilities.summarizer_ready} "
        f"prompt={capabilities.prompt_ready}"
    )
    logger.debug(f"Capability diagnostics: {capabilities.diagnostics}")
    if not capabilities.any_ready:
        logger.info(status_message(capabilities))
