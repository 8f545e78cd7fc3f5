"""
Local preference store - condition, allergy and display settings.

Settings live in one JSON file keyed by the same field names the options
page writes: condition, customCondition, allergies, customAllergies,
autoshow, languagePreference.
"""
import json
import logging
from pathlib import Path
from typing import Any, Optional

from .config import get_config
from .models.profile import CUSTOM_CONDITION, DEFAULT_CONDITION, UserProfile


logger = logging.getLogger(__name__)


DEFAULT_SETTINGS: dict[str, Any] = {
    "condition": DEFAULT_CONDITION,
    "customCondition": "",
    "autoshow": True,
    "allergies": [],
    "customAllergies": [],
    "languagePreference": "auto",
}

CONDITIONS = ["POTS", "ME/CFS", "Celiac Disease", CUSTOM_CONDITION]

COMMON_ALLERGENS = [
    "peanuts", "tree-nuts", "milk", "eggs", "wheat", "soy", "fish", "shellfish", "sesame",
]


class PreferenceStore:
    """Reads and writes the settings file."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else get_config().preferences.settings_path

    def load(self) -> dict[str, Any]:
        """All settings, with defaults for anything missing."""
        settings = dict(DEFAULT_SETTINGS)
        if not self.path.exists():
            return settings

        try:
            stored = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read settings from {self.path}: {e}")
            return settings

        if not isinstance(stored, dict):
            logger.warning(f"Ignoring malformed settings file {self.path}")
            return settings

        for key in DEFAULT_SETTINGS:
            if stored.get(key) is not None:
                settings[key] = stored[key]
        return settings

    def load_profile(self) -> UserProfile:
        return UserProfile.from_settings(self.load())

    def save(self, **changes: Any) -> dict[str, Any]:
        """
        Merge changes into the stored settings and write them back.

        Raises:
            ValueError: If the result is a custom condition with no text,
                or contains an unknown key
        """
        unknown = set(changes) - set(DEFAULT_SETTINGS)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")

        settings = self.load()
        settings.update(changes)

        if settings["condition"] == CUSTOM_CONDITION and not str(settings["customCondition"]).strip():
            raise ValueError("Please enter your custom condition")
        if settings["condition"] != CUSTOM_CONDITION:
            settings["customCondition"] = ""

        settings["customAllergies"] = _dedupe_lower(settings["customAllergies"], settings["allergies"])

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(settings, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info(
            f"Settings saved for {settings['customCondition'] or settings['condition']}, "
            f"{len(settings['allergies']) + len(settings['customAllergies'])} allergens monitored"
        )
        return settings


def _dedupe_lower(custom: list[str], common: list[str]) -> list[str]:
    """Custom allergies lowercased, without repeats or overlap with common ones."""
    result: list[str] = []
    for name in custom:
        allergen = str(name).strip().lower()
        if allergen and allergen not in result and allergen not in common:
            result.append(allergen)
    return result
