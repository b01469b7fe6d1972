"""Tests for AuthConfig and OTPConfig bounds."""

import pytest
from pydantic import ValidationError

from auth.config import AuthConfig, OTPConfig


class TestAuthConfig:

    def test_defaults(self):
        config = AuthConfig()

        assert config.jwt_algorithm == "HS256"
        assert config.token_expiry_hours == 24
        assert config.min_password_length == 6

    @pytest.mark.parametrize("field,value", [
        ("token_expiry_hours", 0),
        ("min_password_length", 5),
        ("rate_limit_attempts", 0),
        ("rate_limit_window_minutes", 61),
    ])
    def test_out_of_bounds(self, field, value):
        with pytest.raises(ValidationError):
            AuthConfig(**{field: value})


class TestOTPConfig:

    def test_defaults(self):
        config = OTPConfig()

        assert config.code_length == 4
        assert config.ttl_seconds == 300

    def test_ttl_floor(self):
        with pytest.raises(ValidationError):
            OTPConfig(ttl_seconds=30)
