"""
Verdict models - raw generator output, validated verdict, display payload.
"""
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .facts import Confidence


VERDICT_VALUES = ("helpful", "mixed", "not_ideal")
MAX_BULLETS = 3
MIN_BULLETS = 2
MAX_BULLET_CHARS = 80
MAX_CAVEAT_CHARS = 100


class DraftVerdict(BaseModel):
    """
    Unchecked verdict as produced by a generator strategy.
    Only SafetyValidator turns a draft into a Verdict.
    """
    verdict: str = "mixed"
    bullets: list[str] = Field(default_factory=list)
    caveat: str = ""
    allergen_alert: bool = False

    @field_validator("verdict", mode="before")
    @classmethod
    def parse_verdict(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v).strip().lower().replace(" ", "_").replace("-", "_")

    @field_validator("bullets", mode="before")
    @classmethod
    def parse_bullets(cls, v: Any) -> list[str]:
        """Model output may give a string, null or mixed types here."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple)):
            return []
        return [str(b) for b in v if b is not None]

    @field_validator("caveat", mode="before")
    @classmethod
    def parse_caveat(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v)

    @field_validator("allergen_alert", mode="before")
    @classmethod
    def parse_alert(cls, v: Any) -> bool:
        if isinstance(v, str):
            return v.strip().lower() in ("true", "yes", "1")
        return bool(v)


class Verdict(BaseModel):
    """A verdict that has passed the safety validator."""
    model_config = ConfigDict(frozen=True)

    verdict: Literal["helpful", "mixed", "not_ideal"]
    bullets: list[str] = Field(min_length=MIN_BULLETS, max_length=MAX_BULLETS)
    caveat: str = Field(max_length=MAX_CAVEAT_CHARS)
    allergen_alert: bool = False

    @field_validator("bullets")
    @classmethod
    def check_bullet_length(cls, v: list[str]) -> list[str]:
        for bullet in v:
            if len(bullet) > MAX_BULLET_CHARS:
                raise ValueError(f"bullet longer than {MAX_BULLET_CHARS} characters")
        return v


class AnalysisPayload(BaseModel):
    """The only object handed to the display collaborator."""
    verdict: Literal["helpful", "mixed", "not_ideal"]
    bullets: list[str]
    caveat: str
    allergen_alert: bool
    condition: str
    allergen_warnings: list[str] = Field(default_factory=list)
    confidence: Confidence

    @classmethod
    def assemble(
        cls,
        verdict: Verdict,
        condition: str,
        allergen_warnings: list[str],
        confidence: Confidence,
    ) -> "AnalysisPayload":
        return cls(
            **verdict.model_dump(),
            condition=condition,
            allergen_warnings=list(allergen_warnings),
            confidence=confidence,
        )
