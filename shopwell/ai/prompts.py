"""
Instructions for the on-device capabilities, plus language handling.
"""
import locale
import logging
from typing import Optional

from ..config import get_config


logger = logging.getLogger(__name__)


SUPPORTED_LANGUAGES = {
    "en": "English",
    "es": "Spanish",
    "ja": "Japanese",
    "fr": "French",
    "de": "German",
}

DEFAULT_LANGUAGE = "en"


SUMMARIZER_SYSTEM_PROMPT = """You summarize retail product pages for a wellness shopping assistant.
Write a short factual summary of the product. Mention, when the text supports it:
- sodium, salt, electrolyte or sugar content
- dietary claims such as gluten-free
- whether it is a compression garment, lightweight, easy to use or ergonomic
- every ingredient that is a common allergen (peanut, tree nuts, milk, egg, wheat, soy, fish, shellfish, sesame)
Do not speculate beyond the given text. Do not give medical advice."""


VERDICT_SYSTEM_PROMPT = """You are a wellness shopping assistant that provides informational guidance only.

CRITICAL RULES:
- Never provide medical advice, diagnosis, or treatment recommendations
- Use supportive language like "may be helpful", "could support", "consider"
- Always include appropriate disclaimers
- Keep responses under 60 words total
- Output ONLY valid JSON format
- Be supportive but not prescriptive

You help people with chronic conditions make informed shopping decisions based on product features."""


VERDICT_USER_PROMPT_TEMPLATE = """Analyze this product for someone with: {condition}

{guidance}

{allergies}

Product facts:
- High sodium: {high_sodium}
- High sugar: {high_sugar}
- Gluten-free: {gluten_free}
- Compression garment: {compression_garment}
- Lightweight: {lightweight}
- Easy to use: {ease_of_use}
- Ergonomic: {ergonomic_design}
- Allergen warnings: {allergen_warnings}
- Dietary claims: {dietary_claims}
- Extraction confidence: {confidence}

Return ONLY this JSON structure:
{{
  "verdict": "helpful" | "mixed" | "not_ideal",
  "bullets": ["point 1", "point 2", "point 3"],
  "caveat": "important warning or limitation"
}}

Keep each bullet under 15 words. Total response under 60 words."""


CONDITION_GUIDANCE = {
    "POTS": """POTS considerations:
- Compression garments may support circulation
- Higher sodium products could help with volume
- Avoid excessive sugar which may worsen symptoms
- Consider ease of use during flare-ups""",

    "ME/CFS": """ME/CFS considerations:
- Lightweight, easy-to-use products reduce energy expenditure
- Ergonomic design supports comfort during activities
- Avoid heavy or complex items that require significant effort
- Consider products that promote rest and recovery""",

    "Celiac Disease": """Celiac considerations:
- Certified gluten-free products are essential
- Check for cross-contamination warnings
- Verified allergen information is critical
- Consider products with clear ingredient labeling""",
}

GENERIC_GUIDANCE = "Provide general wellness and comfort analysis."


def condition_guidance(condition: str, custom_condition: Optional[str] = None) -> str:
    """Guidance text for a known condition, generic text otherwise."""
    if condition == "custom":
        return f"Custom condition: {custom_condition or 'not specified'}. {GENERIC_GUIDANCE}"
    return CONDITION_GUIDANCE.get(condition, GENERIC_GUIDANCE)


def _detect_system_language() -> str:
    """Two-letter code from the process locale, e.g. 'en' from 'en_US'."""
    try:
        lang, _ = locale.getlocale()
    except ValueError:
        lang = None
    if not lang:
        return DEFAULT_LANGUAGE
    return lang.replace("-", "_").split("_")[0].lower()


def resolve_language(preference: Optional[str] = "auto") -> str:
    """
    Pick the analysis language.
    Priority: explicit preference > SHOPWELL_LANGUAGE > system locale > English.
    """
    code = (preference or "auto").strip().lower()
    if code == "auto":
        code = get_config().language_preference.strip().lower() or "auto"
    if code == "auto":
        code = _detect_system_language()

    if code not in SUPPORTED_LANGUAGES:
        logger.warning(f"Unsupported language '{code}', falling back to English")
        code = DEFAULT_LANGUAGE
    return code


def language_instruction(code: str) -> str:
    name = SUPPORTED_LANGUAGES.get(code, SUPPORTED_LANGUAGES[DEFAULT_LANGUAGE])
    return f"Your response must be in {name}."
