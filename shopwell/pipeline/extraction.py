"""
Fact extraction - turn a product record into a FactSet.

Two strategies share one parser so that allergen and claim detection is
identical whichever one ran: the summarizer strategy parses the on-device
summary, the pattern strategy parses the raw page text.
"""
import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from ..ai.capabilities import TextCapability, invoke
from ..ai.prompts import SUMMARIZER_SYSTEM_PROMPT, language_instruction
from ..config import PipelineConfig, get_config
from ..errors import (
    CapabilityInvocationFailure,
    CapabilityUnavailable,
    MalformedCapabilityOutput,
)
from ..models.capability import AnalysisContext
from ..models.facts import Confidence, FactSet
from ..models.product import ProductRecord
from ..models.profile import ALLERGEN_PATTERNS


logger = logging.getLogger(__name__)


# Phrases that mention sugar or sodium while meaning the opposite
NEGATED_PHRASES = [
    "sugar-free", "sugar free", "no added sugar", "no sugar", "zero sugar",
    "sodium-free", "sodium free", "low sodium", "low-sodium", "salt-free", "no salt",
]

# Claim label -> trigger phrases
DIETARY_CLAIMS = {
    "gluten-free": ("gluten-free", "gluten free"),
    "dairy-free": ("dairy-free", "dairy free"),
    "sugar-free": ("sugar-free", "sugar free", "no added sugar"),
    "vegan": ("vegan",),
    "organic": ("organic",),
    "non-gmo": ("non-gmo", "non gmo"),
    "keto": ("keto",),
}


def _mentions(text: str, tokens: Iterable[str]) -> bool:
    return any(token in text for token in tokens)


def _strip_negations(text: str) -> str:
    for phrase in NEGATED_PHRASES:
        text = text.replace(phrase, " ")
    return text


def build_summary_input(
    record: ProductRecord,
    config: Optional[PipelineConfig] = None,
) -> str:
    """
    Assemble the summarization document in fixed section order.

    Ingredients go in whole since they drive allergen detection; the
    description and reviews are cut to their budgets and the finished
    document to document_limit characters.
    """
    config = config or get_config().pipeline
    sections = []

    if record.title:
        sections.append(f"PRODUCT: {record.title}")

    if record.bullets:
        sections.append(f"FEATURES: {'; '.join(record.bullets[:config.max_bullets])}")

    if record.ingredients:
        sections.append(f"INGREDIENTS: {record.ingredients}")

    if record.description:
        sections.append(f"DESCRIPTION: {record.description[:config.description_limit]}")

    if record.reviews:
        review_sample = "; ".join(record.reviews[:config.max_reviews])
        sections.append(f"REVIEWS: {review_sample[:config.reviews_limit]}")

    document = "\n\n".join(sections)

    if len(document) > config.document_limit:
        document = document[:config.document_limit - 3] + "..."

    return document


def assess_confidence(record: ProductRecord) -> Confidence:
    """How much the page gave us to work with."""
    if record.ingredients or len(record.bullets) >= 3:
        return "high"
    if record.title and record.description:
        return "medium"
    return "low"


def detect_allergens(
    texts: Iterable[str],
    extra_terms: Iterable[str] = (),
) -> list[str]:
    """
    Canonical allergens mentioned in any of texts.

    Each allergen is reported once: its tokens are scanned in order and
    the first hit ends the scan. Extra terms (custom allergies outside the
    table) are matched as their own token.
    """
    haystacks = [t.lower() for t in texts if t]
    found = []

    for allergen, tokens in ALLERGEN_PATTERNS.items():
        for token in tokens:
            if any(token in text for text in haystacks):
                found.append(allergen)
                break

    for term in extra_terms:
        token = term.replace("-", " ").lower()
        if token and term not in found and any(token in text for text in haystacks):
            found.append(term)

    return found


def parse_facts(
    summary: str,
    record: ProductRecord,
    extra_allergens: Iterable[str] = (),
    source: str = "pattern",
) -> FactSet:
    """
    Shared fact parser for both extraction strategies.

    Args:
        summary: Summarizer output, or the raw page text for the pattern path
        record: The product record, for title/bullets/ingredients checks
        extra_allergens: Custom allergy terms to look for besides the table
        source: Name of the strategy that produced summary

    Returns:
        FactSet with flags, claims, allergens and confidence
    """
    summary_lower = summary.lower()
    title_lower = record.title.lower()
    bullets_text = " ".join(record.bullets).lower()
    ingredients_lower = (record.ingredients or "").lower()

    summary_plain = _strip_negations(summary_lower)
    bullets_plain = _strip_negations(bullets_text)
    ingredients_plain = _strip_negations(ingredients_lower)

    facts = FactSet(source=source, source_text=summary)

    # Dietary
    if (_mentions(summary_plain, ("sodium", "salt"))
            or _mentions(bullets_plain, ("electrolyte", "sodium"))):
        facts.high_sodium = True

    if (_mentions(summary_plain, ("sugar", "sweet"))
            or "sugar" in bullets_plain
            or "sugar" in ingredients_plain):
        facts.high_sugar = True

    claim_text = " ".join([summary_lower, title_lower, bullets_text])
    for claim, triggers in DIETARY_CLAIMS.items():
        if _mentions(claim_text, triggers):
            facts.dietary_claims.append(claim)
    facts.gluten_free = "gluten-free" in facts.dietary_claims

    # Physical
    if (_mentions(title_lower, ("compression", "socks", "sleeve", "stocking"))
            or "compression" in bullets_text
            or "compression" in summary_lower):
        facts.compression_garment = True

    if (_mentions(summary_lower, ("lightweight", "easy", "simple"))
            or _mentions(bullets_text, ("lightweight", "easy to use"))):
        facts.lightweight = True
        facts.ease_of_use = True

    if (_mentions(summary_lower, ("ergonomic", "comfortable"))
            or _mentions(bullets_text, ("ergonomic", "comfort"))):
        facts.ergonomic_design = True

    # Safety
    facts.allergen_warnings = detect_allergens(
        [ingredients_lower, summary_lower],
        extra_terms=extra_allergens,
    )

    facts.confidence = assess_confidence(record)
    return facts


class FactExtractor(ABC):
    """Interface shared by the extraction strategies."""

    name: str

    @abstractmethod
    async def extract(
        self,
        record: ProductRecord,
        context: AnalysisContext,
    ) -> Optional[FactSet]:
        """Return facts, or None when this strategy could not produce them."""
        ...


class SummarizerFactExtractor(FactExtractor):
    """Summarize the page on-device, then parse the summary."""

    name = "summarizer"

    def __init__(
        self,
        capability: TextCapability,
        timeout: Optional[float] = None,
        config: Optional[PipelineConfig] = None,
    ):
        self.capability = capability
        self.timeout = timeout
        self.config = config

    async def extract(
        self,
        record: ProductRecord,
        context: AnalysisContext,
    ) -> Optional[FactSet]:
        document = build_summary_input(record, self.config)
        if not document:
            logger.warning("No suitable content for summarization")
            return None

        logger.info(f"Summarizer input length: {len(document)}")
        system_prompt = f"{SUMMARIZER_SYSTEM_PROMPT}\n{language_instruction(context.language)}"

        try:
            summary = await invoke(
                self.capability,
                document,
                system_prompt=system_prompt,
                timeout=self.timeout,
            )
            if not summary or not summary.strip():
                raise MalformedCapabilityOutput("summarizer returned an empty summary")
        except (CapabilityUnavailable, CapabilityInvocationFailure, MalformedCapabilityOutput) as e:
            logger.warning(f"Summarization failed, falling back: {e}")
            return None

        logger.debug(f"Raw summarizer output: {summary}")
        return parse_facts(
            summary,
            record,
            extra_allergens=context.profile.extra_allergen_terms,
            source=self.name,
        )


class PatternFactExtractor(FactExtractor):
    """Deterministic fallback: parse the raw page text directly."""

    name = "pattern"

    async def extract(
        self,
        record: ProductRecord,
        context: AnalysisContext,
    ) -> FactSet:
        return self.extract_now(record, context)

    def extract_now(
        self,
        record: ProductRecord,
        context: AnalysisContext,
    ) -> FactSet:
        """Synchronous form; same input always gives the same FactSet."""
        logger.info("Extracting facts with patterns (no AI)")
        return parse_facts(
            record.combined_text,
            record,
            extra_allergens=context.profile.extra_allergen_terms,
            source=self.name,
        )
