"""
Error taxonomy for capability-backed analysis.

All three capability errors are caught at the strategy boundary and turned
into a fallback; none of them reach the orchestrator.
"""


class ShopWellError(Exception):
    """Base class for Shop Well errors."""


class CapabilityUnavailable(ShopWellError):
    """The host reports the capability as not ready."""


class CapabilityInvocationFailure(ShopWellError):
    """Creating a session or running it raised, rejected or timed out."""


class MalformedCapabilityOutput(ShopWellError):
    """The capability answered, but not with anything we can use."""
