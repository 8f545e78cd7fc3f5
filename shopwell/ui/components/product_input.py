"""
Product input component - the page fields the pipeline analyzes.
"""
import streamlit as st
from typing import Optional

from ...models.product import ProductRecord


def _lines(text: str) -> list[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def render_product_input() -> Optional[ProductRecord]:
    """
    Render the product page fields.

    Returns:
        ProductRecord, or None while every field is empty
    """
    title = st.text_input(
        "Product title",
        placeholder="e.g. 'Graduated Compression Socks 20-30 mmHg'",
        key="product_title",
    )

    with st.expander("📝 Page details", expanded=True):
        bullets = st.text_area(
            "Feature bullets (one per line)",
            key="product_bullets",
            height=100,
        )
        ingredients = st.text_area(
            "Ingredients",
            key="product_ingredients",
            height=80,
        )
        description = st.text_area(
            "Description",
            key="product_description",
            height=100,
        )
        reviews = st.text_area(
            "Review snippets (one per line)",
            key="product_reviews",
            height=80,
        )

    if not any(field.strip() for field in (title, bullets, ingredients, description, reviews)):
        return None

    return ProductRecord(
        title=title,
        bullets=_lines(bullets),
        ingredients=ingredients,
        description=description,
        reviews=_lines(reviews),
    )


def should_analyze(
    record: Optional[ProductRecord],
    previous: Optional[ProductRecord],
    analyze_clicked: bool,
    autoshow: bool,
) -> bool:
    """
    Whether this rerun should start an analysis.

    The button always analyzes; autoshow only fires when the product
    fields differ from the last analyzed record, so unrelated widget
    interactions do not re-run the pipeline.
    """
    if record is None:
        return False
    if analyze_clicked:
        return True
    return autoshow and record != previous
