"""AI modules for capability access and probing."""

from .llm_client import LLMClient
from .capabilities import (
    CapabilitySession,
    TextCapability,
    LocalModelCapability,
    build_default_capabilities,
    invoke,
)
from .probe import CapabilityProbe, can_use_ai, status_message

__all__ = [
    "LLMClient",
    "CapabilitySession",
    "TextCapability",
    "LocalModelCapability",
    "build_default_capabilities",
    "invoke",
    "CapabilityProbe",
    "can_use_ai",
    "status_message",
]
