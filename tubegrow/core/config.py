"""
Configuration module - centralized settings for the entire application.
Uses pydantic-settings to load values from environment variables and .env file.
"""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Pydantic-settings automatically:
    1. Reads from environment variables (highest priority)
    2. Falls back to .env file values
    3. Uses default values if neither exists

    To override in production, set environment variables:
        export GEMINI_API_KEY=AIza...
        export CREDENTIALS_PATH=/var/lib/tubegrow/credentials.json
    """

    # ---------------------------------------------------------------------------
    # PYDANTIC SETTINGS CONFIGURATION
    # ---------------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ---------------------------------------------------------------------------
    # APPLICATION SETTINGS
    # ---------------------------------------------------------------------------
    # APP_NAME: Display name shown in API docs and logging
    APP_NAME: str = "TubeGrow AI"

    # DEBUG: Enable debug mode (more verbose errors, auto-reload in dev)
    DEBUG: bool = False

    # LOG_LEVEL: Level for the tubegrow.* loggers
    LOG_LEVEL: str = "INFO"

    # CORS_ORIGINS: Origins allowed to call the API (the dashboard)
    # Set as JSON in the environment: CORS_ORIGINS='["https://app.example.com"]'
    CORS_ORIGINS: List[str] = ["*"]

    # ---------------------------------------------------------------------------
    # AI PROVIDER KEYS
    # ---------------------------------------------------------------------------
    # These seed the key registry. Keys saved from the dashboard settings form
    # are persisted in CREDENTIALS_PATH and take precedence.
    GEMINI_API_KEY: str = ""
    OPENAI_API_KEY: str = ""
    GROK_API_KEY: str = ""

    # CREDENTIALS_PATH: JSON file holding keys saved from the settings form
    CREDENTIALS_PATH: str = "./data/credentials.json"

    # ---------------------------------------------------------------------------
    # AI MODEL CONFIGURATION
    # ---------------------------------------------------------------------------
    # Gemini handles grounding, multimodal input, speech and video
    GEMINI_TEXT_MODEL: str = "gemini-3-flash-preview"
    GEMINI_PRO_MODEL: str = "gemini-3-pro-preview"
    GEMINI_IMAGE_MODEL: str = "gemini-2.5-flash-image"
    GEMINI_TTS_MODEL: str = "gemini-2.5-flash-preview-tts"
    GEMINI_VIDEO_MODEL: str = "veo-3.1-fast-generate-preview"

    OPENAI_MODEL: str = "gpt-4o"
    OPENAI_IMAGE_MODEL: str = "dall-e-3"

    # Grok speaks the OpenAI wire format at its own base URL
    GROK_MODEL: str = "grok-3"
    GROK_BASE_URL: str = "https://api.x.ai/v1"

    # AI request timeout in seconds (passed to the SDK transports)
    AI_REQUEST_TIMEOUT: int = 60

    # Video generation polling (Veo long-running operations)
    VIDEO_POLL_INTERVAL_SECONDS: float = 5.0
    VIDEO_MAX_POLLS: int = 120

    # ---------------------------------------------------------------------------
    # YOUTUBE DATA API
    # ---------------------------------------------------------------------------
    YOUTUBE_API_BASE_URL: str = "https://www.googleapis.com/youtube/v3"


# ---------------------------------------------------------------------------
# GLOBAL SETTINGS INSTANCE
# ---------------------------------------------------------------------------
# Usage: from tubegrow.core.config import settings
settings = Settings()
