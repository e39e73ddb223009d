"""Unit tests for RAGConfig validation and YAML/env layering."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from brandrag.config.loader import load_rag_config, load_yaml_config
from brandrag.config.rag_config import RAGConfig
from brandrag.config.settings import Settings
from brandrag.utils.errors import ConfigurationError


def _write_yaml(tmp_path: Path, body: str) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(body, encoding="utf-8")
    return str(path)


class TestRAGConfig:
    def test_defaults(self) -> None:
        config = RAGConfig()

        assert config.chunk_size == 1000
        assert config.chunk_overlap == 150
        assert config.top_k == 12
        assert config.fallback_limit == 10
        assert config.master_source_bonus == pytest.approx(0.15)

    def test_overlap_must_be_below_chunk_size(self) -> None:
        with pytest.raises(ValidationError):
            RAGConfig(chunk_size=100, chunk_overlap=100)

    @pytest.mark.parametrize("field", ["top_k", "fallback_limit", "embedding_concurrency"])
    def test_counts_must_be_positive(self, field: str) -> None:
        with pytest.raises(ValidationError):
            RAGConfig(**{field: 0})

    def test_is_frozen(self) -> None:
        config = RAGConfig()
        with pytest.raises(ValidationError):
            config.top_k = 3  # type: ignore[misc]


class TestLoader:
    def test_missing_yaml_returns_empty_dict(self, tmp_path: Path) -> None:
        assert load_yaml_config(str(tmp_path / "nope.yaml")) == {}

    def test_yaml_overrides_defaults(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path, "rag:\n  top_k: 5\n  master_source_bonus: 0.3\n")

        config = load_rag_config(path, settings=Settings())

        assert config.top_k == 5
        assert config.master_source_bonus == pytest.approx(0.3)
        assert config.chunk_size == 1000

    def test_explicit_settings_override_yaml(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path, "rag:\n  top_k: 5\n  chunk_size: 800\n")

        config = load_rag_config(path, settings=Settings(rag_top_k=7))

        assert config.top_k == 7
        assert config.chunk_size == 800

    def test_invalid_merge_raises_configuration_error(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path, "rag:\n  chunk_size: 100\n  chunk_overlap: 200\n")

        with pytest.raises(ConfigurationError):
            load_rag_config(path, settings=Settings())

    def test_repository_config_file_is_valid(self) -> None:
        path = Path(__file__).resolve().parents[2] / "config" / "config.yaml"

        config = load_rag_config(str(path), settings=Settings())

        assert config.chunk_overlap < config.chunk_size
