# =============================================================================
# tests/test_config.py - Settings Tests
# =============================================================================
# Run with: pytest tests/test_config.py -v
# =============================================================================

import json

import pytest
from pydantic import ValidationError

from app.config import BaseUrlConfiguration, load_settings, read_config_file


class TestLoadSettings:
    """Environment, JSON overlay and explicit overrides."""

    def test_base_urls_from_environment(self):
        settings = load_settings(config_file=None)

        assert settings.BASE_URLS.web_base == "http://localhost:44315/"
        assert settings.DATABASE.use_only_in_memory is True
        assert settings.SEQ.enabled is False

    def test_missing_base_urls(self, monkeypatch):
        monkeypatch.delenv("BASE_URLS__API_BASE", raising=False)
        monkeypatch.delenv("BASE_URLS__WEB_BASE", raising=False)

        with pytest.raises(ValidationError):
            load_settings(config_file=None)

    def test_json_overlay(self, tmp_path):
        config_file = tmp_path / "appsettings.test.json"
        config_file.write_text(
            json.dumps(
                {
                    "CATALOG_BASE_URL": "https://cdn.example.com",
                    "DATABASE": {"seed_retry_attempts": 5},
                }
            )
        )

        settings = load_settings(config_file)

        assert settings.CATALOG_BASE_URL == "https://cdn.example.com"
        assert settings.DATABASE.seed_retry_attempts == 5

    def test_overrides_win(self, tmp_path):
        config_file = tmp_path / "appsettings.test.json"
        config_file.write_text(json.dumps({"API_PORT": 9000}))

        settings = load_settings(config_file, API_PORT=9100)

        assert settings.API_PORT == 9100

    def test_short_secret_key_is_rejected(self):
        with pytest.raises(ValidationError):
            load_settings(config_file=None, SECRET_KEY="too-short")

    def test_environment_flags(self):
        assert load_settings(config_file=None, ENVIRONMENT="development").is_development
        assert load_settings(config_file=None, ENVIRONMENT="production").is_production


class TestReadConfigFile:
    def test_missing_file_is_empty(self, tmp_path):
        assert read_config_file(tmp_path / "missing.json") == {}

    def test_none_is_empty(self):
        assert read_config_file(None) == {}

    def test_non_object_is_rejected(self, tmp_path):
        config_file = tmp_path / "appsettings.json"
        config_file.write_text("[1, 2, 3]")

        with pytest.raises(ValueError):
            read_config_file(config_file)


class TestCorsOrigins:
    def test_web_origin_normalised(self):
        urls = BaseUrlConfiguration(
            api_base="http://localhost:5099/api/",
            web_base="http://host.docker.internal:44315/",
        )

        assert urls.web_origin == "http://localhost:44315"

    def test_extra_origins(self):
        settings = load_settings(
            config_file=None,
            CORS_ORIGINS="https://admin.example.com/, http://localhost:44315",
        )

        assert settings.cors_origins_list == [
            "http://localhost:44315",
            "https://admin.example.com",
        ]
