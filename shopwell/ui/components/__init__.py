"""UI components package."""

from .product_input import render_product_input, should_analyze
from .preference_form import render_preference_sidebar
from .result_card import render_analysis, render_status
from .debug_panel import render_debug_panel

__all__ = [
    "render_product_input",
    "should_analyze",
    "render_preference_sidebar",
    "render_analysis",
    "render_status",
    "render_debug_panel",
]
