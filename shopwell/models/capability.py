"""
Capability models - host readiness and the per-run analysis context.
"""
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .profile import UserProfile


class Readiness(str, Enum):
    """Availability signal reported by a host capability."""
    READILY = "readily"
    AFTER_DOWNLOAD = "after-download"
    NO = "no"


class CapabilitySet(BaseModel):
    """Which on-device capabilities are usable for this run. Never persisted."""
    model_config = ConfigDict(frozen=True)

    summarizer_ready: bool = False
    prompt_ready: bool = False
    diagnostics: dict[str, str] = Field(default_factory=dict)

    @property
    def any_ready(self) -> bool:
        return self.summarizer_ready or self.prompt_ready


class AnalysisContext(BaseModel):
    """
    Immutable snapshot passed into every pipeline step.
    Preference changes made mid-run are not seen until the next run.
    """
    model_config = ConfigDict(frozen=True)

    profile: UserProfile = Field(default_factory=UserProfile)
    capabilities: CapabilitySet = Field(default_factory=CapabilitySet)
    language: str = "en"
