from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # Speech-to-text (Whisper behind DeepInfra's OpenAI-compatible API)
    deepinfra_api_key: str = ""
    whisper_base_url: str = "https://api.deepinfra.com/v1/openai"
    whisper_model: str = "openai/whisper-large-v3"

    # Classification LLM
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    media_bucket: str = "media"
    analytics_bucket: str = "analytics"
    history_path: str = "history/results.json"

    # Pipeline behaviour
    ledger_backend: str = "supabase"  # "supabase" or "memory"
    ledger_max_retries: int = 5
    taxonomy_policy: str = "drop_triple"
    request_timeout_seconds: float = 120.0
    max_upload_bytes: int = 50 * 1024 * 1024

    # App config
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"

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
