"""
Verdict generation - turn facts and a profile into a draft verdict.

Drafts are unchecked; SafetyValidator is the only way to a Verdict.
"""
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import ValidationError

from ..ai.capabilities import TextCapability, invoke
from ..ai.prompts import (
    VERDICT_SYSTEM_PROMPT,
    VERDICT_USER_PROMPT_TEMPLATE,
    condition_guidance,
    language_instruction,
)
from ..errors import (
    CapabilityInvocationFailure,
    CapabilityUnavailable,
    MalformedCapabilityOutput,
)
from ..models.capability import AnalysisContext
from ..models.facts import FactSet
from ..models.profile import UserProfile
from ..models.verdict import DraftVerdict


logger = logging.getLogger(__name__)


DEFAULT_CAVEAT = "AI analysis unavailable. Please verify details manually."
ALLERGEN_CAVEAT = "Please verify the ingredient list before buying."

PAD_BULLETS = [
    "Basic product analysis available",
    "Additional details available in product description",
]


def matched_allergens(facts: FactSet, profile: UserProfile) -> list[str]:
    """Detected allergens that the user declared, in detection order."""
    declared = set(profile.all_allergies)
    return [a for a in facts.allergen_warnings if a in declared]


def _balanced_end(text: str, start: int) -> int:
    """
    Index just past the brace that closes text[start], or -1.
    Braces inside JSON strings are ignored.
    """
    depth = 0
    in_string = False
    escaped = False

    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
    return -1


def extract_json_object(text: str) -> dict[str, Any]:
    """
    Pull the first balanced {...} that parses as a JSON object out of
    free text. Prose and markdown fences around it are discarded.

    Raises:
        MalformedCapabilityOutput: If no candidate parses
    """
    start = text.find("{")
    while start != -1:
        end = _balanced_end(text, start)
        data = None
        if end != -1:
            try:
                data = json.loads(text[start:end])
            except json.JSONDecodeError:
                pass
        if isinstance(data, dict):
            return data
        start = text.find("{", start + 1)

    raise MalformedCapabilityOutput(f"No JSON object found in response: {text[:200]!r}")


def parse_verdict_response(text: str) -> DraftVerdict:
    """
    Tolerant parse of a generator response into a draft.

    Raises:
        MalformedCapabilityOutput: If there is no JSON object or it lacks
            the verdict field
    """
    data = extract_json_object(text)
    if "verdict" not in data:
        raise MalformedCapabilityOutput("JSON object has no 'verdict' field")
    try:
        return DraftVerdict.model_validate(data)
    except ValidationError as e:
        raise MalformedCapabilityOutput(f"Unusable verdict object: {e}") from e


def build_verdict_prompts(facts: FactSet, context: AnalysisContext) -> tuple[str, str]:
    """System instruction and user message for the prompt capability."""
    profile = context.profile
    allergies = profile.all_allergies

    allergen_list = (
        f"User allergies to check: {', '.join(allergies)}"
        if allergies
        else "No specific allergies to check"
    )

    user_prompt = VERDICT_USER_PROMPT_TEMPLATE.format(
        condition=profile.resolved_condition,
        guidance=condition_guidance(profile.condition, profile.custom_condition),
        allergies=allergen_list,
        high_sodium=facts.high_sodium,
        high_sugar=facts.high_sugar,
        gluten_free=facts.gluten_free,
        compression_garment=facts.compression_garment,
        lightweight=facts.lightweight,
        ease_of_use=facts.ease_of_use,
        ergonomic_design=facts.ergonomic_design,
        allergen_warnings=", ".join(facts.allergen_warnings) or "none detected",
        dietary_claims=", ".join(facts.dietary_claims) or "none",
        confidence=facts.confidence,
    )
    system_prompt = f"{VERDICT_SYSTEM_PROMPT}\n\n{language_instruction(context.language)}"
    return system_prompt, user_prompt


class VerdictGenerator(ABC):
    """Interface shared by the verdict strategies."""

    name: str

    @abstractmethod
    async def generate(
        self,
        facts: FactSet,
        context: AnalysisContext,
    ) -> Optional[DraftVerdict]:
        """Return a draft, or None when this strategy could not produce one."""
        ...


class PromptVerdictGenerator(VerdictGenerator):
    """Ask the on-device generative model for a JSON verdict."""

    name = "prompt"

    def __init__(self, capability: TextCapability, timeout: Optional[float] = None):
        self.capability = capability
        self.timeout = timeout

    async def generate(
        self,
        facts: FactSet,
        context: AnalysisContext,
    ) -> Optional[DraftVerdict]:
        system_prompt, user_prompt = build_verdict_prompts(facts, context)
        logger.info(f"Verdict prompt length: {len(user_prompt)}")

        try:
            response = await invoke(
                self.capability,
                user_prompt,
                system_prompt=system_prompt,
                timeout=self.timeout,
            )
            logger.debug(f"Raw verdict response: {response}")
            return parse_verdict_response(response or "")
        except (CapabilityUnavailable, CapabilityInvocationFailure, MalformedCapabilityOutput) as e:
            logger.warning(f"Verdict generation failed, falling back: {e}")
            return None


class RuleVerdictGenerator(VerdictGenerator):
    """Deterministic fallback rule table."""

    name = "rules"

    async def generate(
        self,
        facts: FactSet,
        context: AnalysisContext,
    ) -> DraftVerdict:
        return self.generate_now(facts, context.profile)

    def generate_now(self, facts: FactSet, profile: UserProfile) -> DraftVerdict:
        logger.info("Generating verdict with rules (no AI)")

        verdict = "mixed"
        bullets: list[str] = []
        caveat = DEFAULT_CAVEAT

        matched = matched_allergens(facts, profile)
        if matched:
            verdict = "not_ideal"
            bullets.append(f"Contains allergens: {', '.join(matched)}")
            caveat = ALLERGEN_CAVEAT
        elif facts.allergen_warnings:
            bullets.append("Contains allergens - check if relevant to you")

        if facts.compression_garment:
            bullets.append("Compression garment - may support circulation")
            if verdict == "mixed":
                verdict = "helpful"

        if facts.gluten_free:
            bullets.append("Labeled gluten-free")
            if verdict == "mixed":
                verdict = "helpful"

        # Informational only, never moves the verdict
        if facts.high_sodium:
            bullets.append("Higher sodium content")

        if facts.lightweight and facts.ease_of_use:
            bullets.append("Lightweight and easy to use")

        if facts.ergonomic_design:
            bullets.append("Ergonomic design for comfort")

        if not bullets:
            bullets.extend(PAD_BULLETS)
        elif len(bullets) == 1:
            bullets.append(PAD_BULLETS[1])

        return DraftVerdict(
            verdict=verdict,
            bullets=bullets[:3],
            caveat=caveat,
            allergen_alert=bool(matched),
        )
