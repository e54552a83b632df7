"""Tests for config secret validation."""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from focusflow.core.config import Settings

BASE_ENV = {
    "SUPABASE_URL": "https://test.supabase.co",
    "SUPABASE_SERVICE_ROLE_KEY": "test-service-key",
}


class TestSecretValidation:
    """Test that required secrets are validated at startup."""

    @pytest.mark.unit
    def test_missing_single_secret_raises_error(self):
        env = {**BASE_ENV, "SUPABASE_URL": ""}
        with patch.dict("os.environ", env, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings(_env_file=None)

            assert "SUPABASE_URL" in str(exc_info.value)

    @pytest.mark.unit
    def test_missing_multiple_secrets_lists_all(self):
        with patch.dict("os.environ", {}, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings(_env_file=None)

            error_str = str(exc_info.value)
            assert "SUPABASE_URL" in error_str
            assert "SUPABASE_SERVICE_ROLE_KEY" in error_str

    @pytest.mark.unit
    def test_whitespace_secret_counts_as_missing(self):
        env = {**BASE_ENV, "SUPABASE_SERVICE_ROLE_KEY": "   "}
        with patch.dict("os.environ", env, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    @pytest.mark.unit
    def test_all_secrets_present_succeeds(self):
        with patch.dict("os.environ", BASE_ENV, clear=True):
            settings = Settings(_env_file=None)

            assert settings.supabase_url == "https://test.supabase.co"
            assert settings.app_name == "FocusFlow API"
            assert settings.api_prefix == "/api/v1"


class TestDefaults:
    @pytest.mark.unit
    def test_slack_and_ticker_defaults(self):
        with patch.dict("os.environ", BASE_ENV, clear=True):
            settings = Settings(_env_file=None)

            assert settings.slack_api_base_url == "https://slack.com/api"
            assert settings.slack_timeout_seconds == 10.0
            assert settings.tick_interval_seconds == 1.0
            assert settings.redis_url == "redis://localhost:6379"

    @pytest.mark.unit
    def test_env_overrides(self):
        env = {**BASE_ENV, "TICK_INTERVAL_SECONDS": "0.5", "SLACK_TIMEOUT_SECONDS": "3"}
        with patch.dict("os.environ", env, clear=True):
            settings = Settings(_env_file=None)

            assert settings.tick_interval_seconds == 0.5
            assert settings.slack_timeout_seconds == 3.0


class TestCorsValidation:
    """Production rejects wildcard and localhost origins."""

    @pytest.mark.unit
    def test_wildcard_rejected_in_production(self):
        env = {**BASE_ENV, "ENVIRONMENT": "production", "CORS_ORIGINS": '["*"]'}
        with patch.dict("os.environ", env, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings(_env_file=None)

            assert "Wildcard" in str(exc_info.value)

    @pytest.mark.unit
    def test_localhost_rejected_in_production(self):
        env = {
            **BASE_ENV,
            "ENVIRONMENT": "production",
            "CORS_ORIGINS": '["http://localhost:3000"]',
        }
        with patch.dict("os.environ", env, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings(_env_file=None)

            assert "localhost" in str(exc_info.value)

    @pytest.mark.unit
    def test_https_origin_allowed_in_production(self):
        env = {
            **BASE_ENV,
            "ENVIRONMENT": "production",
            "CORS_ORIGINS": '["https://focusflow.example.com"]',
        }
        with patch.dict("os.environ", env, clear=True):
            settings = Settings(_env_file=None)

            assert settings.cors_origins == ["https://focusflow.example.com"]

    @pytest.mark.unit
    def test_localhost_allowed_in_development(self):
        with patch.dict("os.environ", BASE_ENV, clear=True):
            settings = Settings(_env_file=None)

            assert settings.cors_origins == ["http://localhost:3000"]
