"""Application settings loaded from environment variables via pydantic-settings.

Two sources, in priority order:

  1. Environment variables, e.g. ``GEMINI_API_KEY=...`` (always win)
  2. ``.env`` file in the working directory (local development)

Field ``gemini_api_key`` maps to env var ``GEMINI_API_KEY``.  Defaults apply
when neither source sets a value.  Retrieval tuning fields left unset here
fall back to ``config/config.yaml`` (see :mod:`brandrag.config.loader`).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """brandrag application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Providers ===
    # Empty string = "not configured"; provider selection in main.py skips it.
    gemini_api_key: str = ""
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_embedding_model: str = "embedding-001"
    gemini_text_model: str = "gemini-2.5-flash"
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoints (TogetherAI, etc.)
    openai_embedding_model: str = ""
    openai_text_model: str = ""

    # === Chunk Store ===
    database_path: str = "data/brandrag.db"

    # === Retrieval tuning ===
    chunk_size: int = 1000
    chunk_overlap: int = 150
    rag_top_k: int = 12
    rag_fallback_limit: int = 10
    master_source_bonus: float = 0.15
    embedding_timeout_seconds: float = 20.0
    embedding_concurrency: int = 8

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
