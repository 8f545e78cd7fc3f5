"""
Safety validator - the single gate between a draft and the display.

Clamps every draft, whichever strategy wrote it, into the Verdict contract
and enforces the allergen override. Running it on its own output changes
nothing.
"""
import logging
from typing import Union

from pydantic import BaseModel

from ..models.facts import FactSet
from ..models.profile import UserProfile
from ..models.verdict import (
    MAX_BULLET_CHARS,
    MAX_BULLETS,
    MAX_CAVEAT_CHARS,
    MIN_BULLETS,
    VERDICT_VALUES,
    DraftVerdict,
    Verdict,
)
from .verdict import DEFAULT_CAVEAT, PAD_BULLETS, matched_allergens


logger = logging.getLogger(__name__)


ALLERGEN_PREFIX = "Contains your allergens: "
GENERIC_BULLETS = [
    PAD_BULLETS[1],
    "Please review product features manually",
]


class ValidationClamp(BaseModel):
    """A normalisation applied to a draft. Not an error."""
    field: str
    reason: str


def truncate(text: str, limit: int) -> str:
    """Cut text to limit characters, ending in an ellipsis when cut."""
    if len(text) <= limit:
        return text
    return text[:limit - 3] + "..."


def _strip_allergen_statement(caveat: str) -> str:
    """Drop a leading allergen statement that may name the wrong allergens."""
    if not caveat.startswith(ALLERGEN_PREFIX):
        return caveat
    end = caveat.find(". ", len(ALLERGEN_PREFIX))
    if end == -1:
        return ""
    return caveat[end + 2:].lstrip()


class SafetyValidator:
    """
    Turns drafts into Verdicts.

    Steps, in order: clamp the verdict value, clamp and pad the bullets,
    clamp the caveat, then apply the allergen override.
    """

    def validate(
        self,
        draft: Union[DraftVerdict, Verdict],
        facts: FactSet,
        profile: UserProfile,
    ) -> Verdict:
        verdict, _ = self.validate_with_report(draft, facts, profile)
        return verdict

    def validate_with_report(
        self,
        draft: Union[DraftVerdict, Verdict],
        facts: FactSet,
        profile: UserProfile,
    ) -> tuple[Verdict, list[ValidationClamp]]:
        """Validate and also return every clamp that was applied."""
        if isinstance(draft, Verdict):
            draft = DraftVerdict.model_validate(draft.model_dump())

        clamps: list[ValidationClamp] = []

        value = self._clamp_verdict(draft.verdict, clamps)
        bullets = self._clamp_bullets(draft.bullets, clamps)
        caveat = self._clamp_caveat(draft.caveat, clamps)

        # Allergen override
        matched = matched_allergens(facts, profile)
        alert = bool(matched)
        if matched:
            if value != "not_ideal":
                clamps.append(ValidationClamp(field="verdict", reason=f"allergen override from '{value}'"))
                value = "not_ideal"
            statement = f"{ALLERGEN_PREFIX}{', '.join(matched)}."
            if caveat != statement and not caveat.startswith(f"{statement} "):
                rest = _strip_allergen_statement(caveat)
                caveat = truncate(f"{statement} {rest}".strip(), MAX_CAVEAT_CHARS)
                clamps.append(ValidationClamp(field="caveat", reason="allergen statement prepended"))
        elif draft.allergen_alert:
            clamps.append(ValidationClamp(field="allergen_alert", reason="no declared allergen detected"))

        for clamp in clamps:
            logger.debug(f"ValidationClamp {clamp.field}: {clamp.reason}")

        verdict = Verdict(
            verdict=value,
            bullets=bullets,
            caveat=caveat,
            allergen_alert=alert,
        )
        return verdict, clamps

    def _clamp_verdict(self, value: str, clamps: list[ValidationClamp]) -> str:
        if value in VERDICT_VALUES:
            return value
        clamps.append(ValidationClamp(field="verdict", reason=f"unrecognized value {value!r}"))
        return "mixed"

    def _clamp_bullets(self, raw: list[str], clamps: list[ValidationClamp]) -> list[str]:
        bullets = [b.strip() for b in raw if b and b.strip()]
        if len(bullets) != len(raw):
            clamps.append(ValidationClamp(field="bullets", reason="dropped empty bullets"))

        if len(bullets) > MAX_BULLETS:
            clamps.append(ValidationClamp(field="bullets", reason=f"cut {len(bullets)} to {MAX_BULLETS}"))
            bullets = bullets[:MAX_BULLETS]

        for filler in GENERIC_BULLETS:
            if len(bullets) >= MIN_BULLETS:
                break
            if filler not in bullets:
                bullets.append(filler)
                clamps.append(ValidationClamp(field="bullets", reason="padded with generic text"))

        clamped = []
        for bullet in bullets:
            if len(bullet) > MAX_BULLET_CHARS:
                clamps.append(ValidationClamp(field="bullets", reason="truncated long bullet"))
            clamped.append(truncate(bullet, MAX_BULLET_CHARS))
        return clamped

    def _clamp_caveat(self, raw: str, clamps: list[ValidationClamp]) -> str:
        caveat = raw.strip()
        if not caveat:
            clamps.append(ValidationClamp(field="caveat", reason="empty, default substituted"))
            return DEFAULT_CAVEAT
        if len(caveat) > MAX_CAVEAT_CHARS:
            clamps.append(ValidationClamp(field="caveat", reason="truncated long caveat"))
            return truncate(caveat, MAX_CAVEAT_CHARS)
        return caveat
