"""
Profile models - the shopper's condition and allergy settings.
"""
import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_CONDITION = "POTS"
CUSTOM_CONDITION = "custom"

# Canonical allergen identifiers mapped to their trigger tokens.
# Order matters: tokens are scanned left to right and the first hit wins.
ALLERGEN_PATTERNS: dict[str, tuple[str, ...]] = {
    "peanuts": ("peanut", "groundnut"),
    "tree-nuts": ("almond", "walnut", "pecan", "cashew", "hazelnut", "pistachio", "macadamia"),
    "milk": ("milk", "dairy", "cheese", "whey", "casein"),
    "eggs": ("egg", "albumin"),
    "wheat": ("wheat", "flour"),
    "soy": ("soy", "soybean"),
    "fish": ("fish", "salmon", "tuna"),
    "shellfish": ("shrimp", "crab", "lobster"),
    "sesame": ("sesame", "tahini"),
}

# User-facing names that should resolve to a canonical identifier
_ALLERGEN_ALIASES = {
    "peanut": "peanuts",
    "tree-nut": "tree-nuts",
    "nuts": "tree-nuts",
    "dairy": "milk",
    "lactose": "milk",
    "egg": "eggs",
    "gluten": "wheat",
    "soya": "soy",
    "shell-fish": "shellfish",
}


def canonical_allergen(name: str) -> str:
    """
    Normalize a user-entered allergen name.

    Known names resolve to the identifiers in ALLERGEN_PATTERNS
    ("Tree Nuts" -> "tree-nuts", "Dairy" -> "milk"); anything else is
    returned lowercased with whitespace collapsed to hyphens.
    """
    key = re.sub(r"[\s_]+", "-", name.strip().lower())
    if key in ALLERGEN_PATTERNS:
        return key
    if key in _ALLERGEN_ALIASES:
        return _ALLERGEN_ALIASES[key]
    for allergen, tokens in ALLERGEN_PATTERNS.items():
        if key in tokens:
            return allergen
    return key


class UserProfile(BaseModel):
    """
    Condition and allergy settings for one analysis run.
    Owned by the preference store; read-only inside the pipeline.
    """
    model_config = ConfigDict(frozen=True)

    condition: str = DEFAULT_CONDITION
    custom_condition: Optional[str] = None
    allergies: list[str] = Field(default_factory=list)
    custom_allergies: list[str] = Field(default_factory=list)

    @field_validator("condition", mode="before")
    @classmethod
    def parse_condition(cls, v: Any) -> str:
        if v is None or not str(v).strip():
            return DEFAULT_CONDITION
        return str(v).strip()

    @field_validator("allergies", "custom_allergies", mode="before")
    @classmethod
    def parse_allergy_list(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        return [str(a).strip() for a in v if a is not None and str(a).strip()]

    @classmethod
    def from_settings(cls, settings: dict[str, Any]) -> "UserProfile":
        """Build a profile from preference-store keys (camelCase)."""
        return cls(
            condition=settings.get("condition"),
            custom_condition=settings.get("customCondition") or None,
            allergies=settings.get("allergies"),
            custom_allergies=settings.get("customAllergies"),
        )

    @property
    def is_custom_condition(self) -> bool:
        return self.condition == CUSTOM_CONDITION

    @property
    def resolved_condition(self) -> str:
        """The condition name to show and to prompt with."""
        if self.is_custom_condition:
            return self.custom_condition or "general wellness"
        return self.condition

    @property
    def all_allergies(self) -> list[str]:
        """Preset and custom allergies, canonicalized, order kept, no duplicates."""
        seen: list[str] = []
        for name in [*self.allergies, *self.custom_allergies]:
            allergen = canonical_allergen(name)
            if allergen and allergen not in seen:
                seen.append(allergen)
        return seen

    @property
    def extra_allergen_terms(self) -> list[str]:
        """Custom allergies that the canonical table does not cover."""
        return [a for a in self.all_allergies if a not in ALLERGEN_PATTERNS]
