"""
Tests for configuration handling.
"""

import json

import pytest

from firm_normalizer.config import Config
from firm_normalizer.utils.error_handler import ConfigurationError


class TestConfig:
    def test_defaults_without_file(self, tmp_path):
        config = Config(tmp_path / "config.json")
        assert config.get("matching.threshold") == 0.4
        assert config.get("matching.confidence_threshold") == 0.35
        assert config.get("matching.max_candidates") is None
        assert config.get("batch.chunk_size") == 1000
        assert config.get("display.max_variants") == 100
        assert config.get("export.filename") == "normalized_firms.csv"

    def test_missing_key_returns_default(self, tmp_path):
        config = Config(tmp_path / "config.json")
        assert config.get("matching.nope", "fallback") == "fallback"
        assert config.get("matching.threshold.deeper") is None

    def test_file_overrides_are_merged(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"matching": {"confidence_threshold": 0.2}}), encoding="utf-8")

        config = Config(path)

        assert config.get("matching.confidence_threshold") == 0.2
        assert config.get("matching.threshold") == 0.4

    def test_set_and_save_round_trip(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        config = Config(path)
        config.set("knowledge_base.source", "https://example.com/kb.json")
        config.set("new.section.value", 3)
        config.save()

        reloaded = Config(path)
        assert reloaded.get("knowledge_base.source") == "https://example.com/kb.json"
        assert reloaded.get("new.section.value") == 3

    def test_defaults_are_not_shared(self, tmp_path):
        first = Config(tmp_path / "a.json")
        first.set("matching.threshold", 0.1)
        assert Config(tmp_path / "b.json").get("matching.threshold") == 0.4

    @pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
    def test_invalid_file(self, tmp_path, content):
        path = tmp_path / "config.json"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ConfigurationError):
            Config(path)
