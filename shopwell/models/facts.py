"""
Fact models - structured wellness facts extracted from a product page.
"""
from typing import Literal

from pydantic import BaseModel, Field


Confidence = Literal["low", "medium", "high"]


class FactSet(BaseModel):
    """
    Boolean flags and claims relevant to wellness filtering.
    Produced identically by the summarizer path and the pattern path.
    """
    high_sodium: bool = False
    high_sugar: bool = False
    gluten_free: bool = False
    compression_garment: bool = False
    lightweight: bool = False
    ease_of_use: bool = False
    ergonomic_design: bool = False

    dietary_claims: list[str] = Field(default_factory=list)
    allergen_warnings: list[str] = Field(
        default_factory=list,
        description="Canonical allergen identifiers, e.g. 'peanuts', 'tree-nuts'",
    )

    confidence: Confidence = "low"
    source_text: str = Field(
        default="",
        description="Summary or raw page text the facts were parsed from",
    )
    source: Literal["summarizer", "pattern"] = Field(
        default="pattern",
        description="Extraction strategy that produced these facts",
    )

    @property
    def active_flags(self) -> list[str]:
        """Names of the flags that are set."""
        flags = [
            "high_sodium", "high_sugar", "gluten_free", "compression_garment",
            "lightweight", "ease_of_use", "ergonomic_design",
        ]
        return [name for name in flags if getattr(self, name)]
