"""
ParentGuidance Backend - Configuration
All settings loaded from environment variables.
"""
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # --- Claude API ---
    # Optional so the structuring engine and tests work without credentials
    ANTHROPIC_API_KEY: Optional[str] = None
    GUIDANCE_MODEL: str = "claude-sonnet-4-5-20250929"
    GUIDANCE_MAX_TOKENS: int = 2000

    # --- Preferences ---
    # JSON file holding the user's guidance preferences; in-memory when unset
    PREFERENCES_PATH: Optional[str] = None
    DEFAULT_STRUCTURE_MODE: str = "fixed"

    # --- Sentry ---
    SENTRY_DSN: Optional[str] = None

    # --- App ---
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
