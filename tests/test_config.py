import os
from unittest.mock import patch

import pytest

from signaldesk.config import Settings, load_config


class TestSettings:
    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            s = Settings()

        assert s.polygon_api_key == ""
        assert s.openai_model == "gpt-4o-mini"
        assert s.binance_base_url == "https://api.binance.com"
        assert s.indicator_cache_ttl == 30.0
        assert s.log_level == "INFO"

    def test_reads_environment(self) -> None:
        env = {
            "POLYGON_API_KEY": "pk",
            "OPENAI_API_KEY": "ok",
            "OPENAI_MODEL": "gpt-x",
            "OPENAI_BASE_URL": "https://llm.example/v1/",
            "INDICATOR_CACHE_TTL": "12.5",
            "LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env, clear=True):
            s = Settings()

        assert s.polygon_api_key == "pk"
        assert s.openai_api_key == "ok"
        assert s.openai_model == "gpt-x"
        assert s.openai_base_url == "https://llm.example/v1"
        assert s.indicator_cache_ttl == 12.5
        assert s.log_level == "DEBUG"

    def test_non_numeric_ttl(self) -> None:
        with patch.dict(os.environ, {"INDICATOR_CACHE_TTL": "soon"}, clear=True):
            with pytest.raises(ValueError, match="INDICATOR_CACHE_TTL"):
                Settings()


class TestValidate:
    def _settings(self, **env: str) -> Settings:
        with patch.dict(os.environ, env, clear=True):
            return Settings()

    def test_polygon_requires_key(self) -> None:
        with pytest.raises(ValueError, match="POLYGON_API_KEY"):
            self._settings().validate("polygon")

    def test_binance_needs_no_key(self) -> None:
        self._settings().validate("binance")

    def test_analysis_requires_openai_key(self) -> None:
        s = self._settings(POLYGON_API_KEY="pk")
        s.validate("polygon")
        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            s.validate("polygon", analysis=True)

    def test_unknown_provider(self) -> None:
        with pytest.raises(ValueError, match="provider"):
            self._settings().validate("ig")

    def test_negative_ttl(self) -> None:
        s = self._settings(INDICATOR_CACHE_TTL="-1")
        with pytest.raises(ValueError, match=">= 0"):
            s.validate("binance")


class TestApply:
    def test_known_keys(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            s = Settings()
        s.apply({"openai_model": "other", "indicator_cache_ttl": 5})

        assert s.openai_model == "other"
        assert s.indicator_cache_ttl == 5

    def test_unknown_key(self) -> None:
        with pytest.raises(ValueError, match="Unknown setting"):
            Settings().apply({"nope": 1})


class TestLoadConfig:
    def test_loads_mapping(self, tmp_path) -> None:
        path = tmp_path / "signaldesk.yaml"
        path.write_text("openai_model: gpt-test\nindicator_cache_ttl: 10\n")

        assert load_config(path) == {"openai_model": "gpt-test", "indicator_cache_ttl": 10}

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("key: [unclosed\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config(path)

    def test_empty_file(self, tmp_path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        with pytest.raises(ValueError, match="Empty config"):
            load_config(path)

    def test_non_mapping(self, tmp_path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(path)
