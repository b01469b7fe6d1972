"""Tests for environment-backed settings."""

import pytest

from clients import settings


@pytest.fixture(autouse=True)
def clean_cache():
    settings.reset_settings_cache()
    yield
    settings.reset_settings_cache()


class TestRequired:

    def test_missing_raises(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)

        with pytest.raises(settings.ConfigError, match="DATABASE_URL"):
            settings.get_database_url()

    def test_value_cached(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "first")
        assert settings.get_jwt_secret() == "first"

        monkeypatch.setenv("JWT_SECRET", "second")
        assert settings.get_jwt_secret() == "first"


class TestMsg91Config:

    def test_template_defaults(self, monkeypatch):
        monkeypatch.setenv("MSG91_AUTHKEY", "key")
        monkeypatch.setenv("MSG91_INTEGRATED_NUMBER", "919000000000")
        monkeypatch.delenv("MSG91_SMS_TEMPLATE_ID", raising=False)
        monkeypatch.setenv("MSG91_WHATSAPP_NAMESPACE", "  ")

        config = settings.get_msg91_config()

        assert config["sms_template_id"] == settings.DEFAULT_SMS_TEMPLATE_ID
        assert config["whatsapp_namespace"] == settings.DEFAULT_WHATSAPP_NAMESPACE


class TestStorageConfig:

    def test_trailing_slash_removed(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://proj.supabase.co/")
        monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-key")

        config = settings.get_storage_config()

        assert config["supabase_url"] == "https://proj.supabase.co"
        assert config["document_bucket"] == "merchant-documents"


class TestFrontendUrl:

    @pytest.mark.parametrize("raw,expected", [
        (None, "http://localhost:5173"),
        ("   ", "http://localhost:5173"),
        ("app.sabbpe.com/", "https://app.sabbpe.com"),
        (" http://localhost:3000// ", "http://localhost:3000"),
        ("https://app.sabbpe.com", "https://app.sabbpe.com"),
    ])
    def test_normalize(self, raw, expected):
        assert settings.normalize_frontend_url(raw) == expected

    def test_reads_env(self, monkeypatch):
        monkeypatch.setenv("VITE_FRONTEND_URL", "merchant.sabbpe.com")

        assert settings.get_frontend_url() == "https://merchant.sabbpe.com"


class TestEnvironment:

    @pytest.mark.parametrize("value,expected", [
        ("development", True),
        ("Development", True),
        ("production", False),
        (None, False),
    ])
    def test_is_development(self, monkeypatch, value, expected):
        if value is None:
            monkeypatch.delenv("APP_ENV", raising=False)
        else:
            monkeypatch.setenv("APP_ENV", value)

        assert settings.is_development() is expected
