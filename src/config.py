from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # API Keys
    anthropic_api_key: str = ""
    openai_api_key: str = ""
    assemblyai_api_key: str = ""  # Only needed when transcription_provider == "assemblyai"

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""

    # Transcription
    transcription_provider: str = "openai"  # "openai" or "assemblyai"
    transcription_model: str = "whisper-1"
    openai_base_url: str | None = None  # e.g. https://api.groq.com/openai/v1

    # Analysis: accurate model for whole-transcript judgments, fast model for per-segment labels
    llm_model: str = "claude-sonnet-4-20250514"
    fast_llm_model: str = "claude-3-5-haiku-20241022"
    extract_summary: bool = True

    # Timeouts (seconds)
    transcription_timeout_seconds: float = 300.0
    llm_timeout_seconds: float = 60.0
    supabase_timeout_seconds: int = 30

    # App config
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    upload_dir: str = "tmp"
    max_upload_mb: int = 50
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults.
    """
    try:
        return Settings()
    except Exception:
        # If .env is missing or unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()
