"""
Product models - the scraped product page record.
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductRecord(BaseModel):
    """
    Product page as handed over by the scraper.
    Immutable once it enters the pipeline; absent fields are treated as empty.
    """
    model_config = ConfigDict(frozen=True)

    title: str = ""
    bullets: list[str] = Field(default_factory=list)
    ingredients: Optional[str] = None
    description: Optional[str] = None
    reviews: list[str] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def parse_title(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("ingredients", "description", mode="before")
    @classmethod
    def parse_optional_text(cls, v: Any) -> Optional[str]:
        """Blank text counts as missing."""
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    @field_validator("bullets", "reviews", mode="before")
    @classmethod
    def parse_text_list(cls, v: Any) -> list[str]:
        """Accept None, a single string, or any iterable of values."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        items = []
        for item in v:
            if item is None:
                continue
            text = str(item).strip()
            if text:
                items.append(text)
        return items

    @property
    def combined_text(self) -> str:
        """Every field of the record joined in page order."""
        parts = [self.title]
        parts.extend(self.bullets)
        if self.ingredients:
            parts.append(self.ingredients)
        if self.description:
            parts.append(self.description)
        parts.extend(self.reviews)
        return "\n".join(p for p in parts if p)

    @property
    def is_empty(self) -> bool:
        return not self.combined_text
