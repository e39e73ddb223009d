"""Configuration module: Settings, RAGConfig and the layered loader."""

from brandrag.config.loader import load_rag_config
from brandrag.config.rag_config import RAGConfig
from brandrag.config.settings import Settings

__all__ = ["RAGConfig", "Settings", "load_rag_config"]
