"""
Pydantic models for Shop Well.
All data contracts are defined here for strict validation.
"""

from .product import ProductRecord
from .profile import UserProfile, ALLERGEN_PATTERNS, canonical_allergen
from .facts import FactSet
from .verdict import DraftVerdict, Verdict, AnalysisPayload
from .capability import Readiness, CapabilitySet, AnalysisContext

__all__ = [
    # Product
    "ProductRecord",
    # Profile
    "UserProfile",
    "ALLERGEN_PATTERNS",
    "canonical_allergen",
    # Facts
    "FactSet",
    # Verdict
    "DraftVerdict",
    "Verdict",
    "AnalysisPayload",
    # Capability
    "Readiness",
    "CapabilitySet",
    "AnalysisContext",
]
