"""
Environment-backed configuration for SabbPe services.

Every accessor fails fast on a missing required variable. Values are cached
after first read; tests call reset_settings_cache() after changing the env.
"""

import logging
import os
from typing import Dict

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_FRONTEND_URL = "http://localhost:5173"
DEFAULT_SMS_TEMPLATE_ID = "694e236ec594fc01ba61af73"
DEFAULT_WHATSAPP_NAMESPACE = "b893736c_3468_4686_bdc8_462e51c78510"
DEFAULT_DOCUMENT_BUCKET = "merchant-documents"

_settings_cache: Dict[str, str] = {}


class ConfigError(Exception):
    """Required configuration missing. Fatal - the app cannot start without it."""


def load_env_file(path: str | None = None) -> None:
    """Load a .env file into the process environment (existing vars win)."""
    if load_dotenv(path):
        logger.info("Loaded environment from .env")


def reset_settings_cache() -> None:
    _settings_cache.clear()


def _require(name: str) -> str:
    if name in _settings_cache:
        return _settings_cache[name]

    value = os.getenv(name)
    if not value:
        raise ConfigError(f"{name} environment variable is required")

    _settings_cache[name] = value
    return value


def _optional(name: str, default: str) -> str:
    value = os.getenv(name)
    return value.strip() if value and value.strip() else default


def get_database_url() -> str:
    """Postgres DSN of the Supabase database."""
    return _require("DATABASE_URL")


def get_valkey_url() -> str:
    """Valkey (Redis) connection URL used for OTPs and rate limits."""
    return _require("VALKEY_URL")


def get_jwt_secret() -> str:
    return _require("JWT_SECRET")


def get_email_config() -> Dict[str, str]:
    """SMTP credentials.

    Returns:
        Dict with keys: user, password, host, port
    """
    return {
        "user": _require("EMAIL_USER"),
        "password": _require("EMAIL_PASS"),
        "host": _optional("EMAIL_HOST", "smtp.gmail.com"),
        "port": _optional("EMAIL_PORT", "587"),
    }


def get_msg91_config() -> Dict[str, str]:
    """MSG91 credentials and template identifiers.

    Returns:
        Dict with keys: authkey, integrated_number, sms_template_id, whatsapp_namespace
    """
    return {
        "authkey": _require("MSG91_AUTHKEY"),
        "integrated_number": _require("MSG91_INTEGRATED_NUMBER"),
        "sms_template_id": _optional("MSG91_SMS_TEMPLATE_ID", DEFAULT_SMS_TEMPLATE_ID),
        "whatsapp_namespace": _optional("MSG91_WHATSAPP_NAMESPACE", DEFAULT_WHATSAPP_NAMESPACE),
    }


def get_storage_config() -> Dict[str, str]:
    """Supabase storage settings for building public document URLs."""
    return {
        "supabase_url": _require("SUPABASE_URL").rstrip("/"),
        "service_role_key": _require("SUPABASE_SERVICE_ROLE_KEY"),
        "document_bucket": _optional("DOCUMENT_BUCKET", DEFAULT_DOCUMENT_BUCKET),
    }


def normalize_frontend_url(url: str | None) -> str:
    """
    Clean up a configured frontend base URL.

    Strips whitespace and trailing slashes, adds https:// when the scheme
    is missing. Empty input falls back to the local dev server.
    """
    if not url or not url.strip():
        return DEFAULT_FRONTEND_URL

    cleaned = url.strip().rstrip("/")
    if not cleaned.startswith(("http://", "https://")):
        cleaned = f"https://{cleaned}"
    return cleaned


def get_frontend_url() -> str:
    """Base URL of the merchant web app, used in invite links."""
    return normalize_frontend_url(os.getenv("VITE_FRONTEND_URL"))


def is_development() -> bool:
    return _optional("APP_ENV", "production").lower() == "development"
