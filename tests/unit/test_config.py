"""Tests for configuration."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from ridejob.config import Environment, Settings


class TestSettings:
    """Tests for Settings class."""

    def test_default_values(self):
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings()

        assert settings.app_env == Environment.DEVELOPMENT
        assert settings.debug is True
        assert settings.log_level == "INFO"
        assert settings.lark_send_base_only is False
        assert settings.webhook_timeout == 10.0
        assert settings.zipcloud_enabled is True
        assert settings.lark_webhook_url is None

    def test_environment_override(self):
        """Test environment variable overrides."""
        env_vars = {
            "APP_ENV": "production",
            "DEBUG": "false",
            "LARK_SEND_BASE_ONLY": "true",
            "LARK_WEBHOOK_URL_PROD": "https://lark.example/prod",
        }

        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings()

        assert settings.app_env == Environment.PRODUCTION
        assert settings.debug is False
        assert settings.lark_send_base_only is True
        assert settings.lark_webhook_url_prod == "https://lark.example/prod"

    def test_is_production_property(self):
        """Test is_production property."""
        with patch.dict(os.environ, {"APP_ENV": "production"}, clear=True):
            settings = Settings()
            assert settings.is_production is True

        with patch.dict(os.environ, {"APP_ENV": "staging"}, clear=True):
            settings = Settings()
            assert settings.is_production is False

    def test_is_development_property(self):
        """Test is_development property."""
        with patch.dict(os.environ, {"APP_ENV": "development"}, clear=True):
            settings = Settings()
            assert settings.is_development is True

        with patch.dict(os.environ, {"APP_ENV": "production"}, clear=True):
            settings = Settings()
            assert settings.is_development is False

    def test_microcms_base_url(self):
        """Test microCMS endpoint derived from the service domain."""
        with patch.dict(os.environ, {"MICROCMS_SERVICE_DOMAIN": "ridejob"}, clear=True):
            settings = Settings()
        assert settings.microcms_base_url == "https://ridejob.microcms.io/api/v1"

        with patch.dict(os.environ, {}, clear=True):
            settings = Settings()
        assert settings.microcms_base_url is None

    def test_webhook_timeout_bounds(self):
        """Test webhook timeout is bounded."""
        with patch.dict(os.environ, {"WEBHOOK_TIMEOUT": "120"}, clear=True):
            with pytest.raises(ValidationError):
                Settings()
