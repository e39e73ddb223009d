"""YAML defaults layered under environment settings.

Configuration is resolved in layers (later layers override earlier):

  1. ``RAGConfig`` field defaults
  2. ``rag:`` section of ``config/config.yaml`` (checked into the repo)
  3. Environment variables / ``.env`` values that were explicitly set
"""

from pathlib import Path

import yaml
from pydantic import ValidationError

from brandrag.config.rag_config import RAGConfig
from brandrag.config.settings import Settings
from brandrag.utils.errors import ConfigurationError

# Settings field -> RAGConfig field.
_SETTINGS_TO_RAG = {
    "chunk_size": "chunk_size",
    "chunk_overlap": "chunk_overlap",
    "rag_top_k": "top_k",
    "rag_fallback_limit": "fallback_limit",
    "master_source_bonus": "master_source_bonus",
    "embedding_timeout_seconds": "embedding_timeout_seconds",
    "embedding_concurrency": "embedding_concurrency",
}


def load_yaml_config(path: str = "config/config.yaml") -> dict:
    """Read the YAML file at *path*, returning ``{}`` when it does not exist."""
    config_path = Path(path)
    if not config_path.exists():
        return {}
    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def load_rag_config(
    path: str = "config/config.yaml",
    settings: Settings | None = None,
) -> RAGConfig:
    """Build the :class:`RAGConfig` from YAML defaults plus env overrides.

    Only settings present in ``settings.model_fields_set`` (i.e. supplied by
    the environment, ``.env`` or the constructor) override the YAML values.

    Raises:
        ConfigurationError: If the merged values fail validation.
    """
    settings = settings or Settings()
    merged: dict = dict(load_yaml_config(path).get("rag") or {})

    for settings_field, rag_field in _SETTINGS_TO_RAG.items():
        if settings_field in settings.model_fields_set:
            merged[rag_field] = getattr(settings, settings_field)

    try:
        return RAGConfig(**merged)
    except ValidationError as exc:
        raise ConfigurationError(message=f"Invalid RAG configuration: {exc}") from exc
