"""
Configuration and environment handling for Shop Well.
"""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables
load_dotenv()


def _env_flag(name: str, default: bool = True) -> bool:
    """Read a boolean toggle; "false", "0" and "no" disable."""
    raw = os.getenv(name, "true" if default else "false")
    return raw.strip().lower() not in ("false", "0", "no")


class CapabilityConfig(BaseModel):
    """On-device model server configuration (OpenAI-compatible API)."""
    base_url: str = Field(
        default_factory=lambda: os.getenv("SHOPWELL_LLM_BASE_URL", "http://localhost:11434/v1")
    )
    api_key: str = Field(default_factory=lambda: os.getenv("SHOPWELL_LLM_API_KEY", "local"))
    summarizer_model: str = Field(
        default_factory=lambda: os.getenv("SHOPWELL_SUMMARIZER_MODEL", "gemma3:1b")
    )
    prompt_model: str = Field(
        default_factory=lambda: os.getenv("SHOPWELL_PROMPT_MODEL", "gemma3:4b")
    )
    max_tokens: int = Field(default=512)
    temperature: float = Field(default=0.2)
    call_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("SHOPWELL_CALL_TIMEOUT", "30")),
        gt=0,
        description="Upper bound for a single capability call before falling back",
    )
    enable_summarizer: bool = Field(default_factory=lambda: _env_flag("SHOPWELL_ENABLE_SUMMARIZER"))
    enable_prompt: bool = Field(default_factory=lambda: _env_flag("SHOPWELL_ENABLE_PROMPT"))


class PipelineConfig(BaseModel):
    """Input budget for the summarization document."""
    max_bullets: int = Field(default=5, description="Feature bullets included in the document")
    description_limit: int = Field(default=800, description="Characters of description kept")
    max_reviews: int = Field(default=3, description="Review snippets included")
    reviews_limit: int = Field(default=400, description="Characters of joined reviews kept")
    document_limit: int = Field(default=2800, description="Hard cap on the assembled document")


class PreferencesConfig(BaseModel):
    """Local preference store location."""
    settings_path: Path = Field(
        default_factory=lambda: Path(
            os.getenv("SHOPWELL_SETTINGS_PATH", str(Path.home() / ".shopwell" / "settings.json"))
        )
    )


class UIConfig(BaseModel):
    """UI configuration."""
    page_title: str = Field(default="Shop Well")
    page_icon: str = Field(default="🛍️")
    theme_primary_color: str = Field(default="#2E7D5B")
    theme_accent_color: str = Field(default="#F2C14E")


class Config(BaseModel):
    """Main configuration."""
    capabilities: CapabilityConfig = Field(default_factory=CapabilityConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    preferences: PreferencesConfig = Field(default_factory=PreferencesConfig)
    ui: UIConfig = Field(default_factory=UIConfig)

    # "auto" or a two-letter code, see ai.prompts.SUPPORTED_LANGUAGES
    language_preference: str = Field(default_factory=lambda: os.getenv("SHOPWELL_LANGUAGE", "auto"))

    # Feature flags
    enable_debug_panel: bool = Field(default=True)


# Singleton config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the singleton config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Drop the cached config so the next get_config() rereads the environment."""
    global _config
    _config = None
