"""Tests for RateLimiter - login attempt throttling."""

import pytest

from auth.config import AuthConfig
from auth.exceptions import RateLimitedError
from auth.rate_limiter import RateLimiter


@pytest.fixture
def config():
    return AuthConfig(rate_limit_attempts=3, rate_limit_window_minutes=5)


@pytest.fixture
def rate_limiter(valkey, config):
    return RateLimiter(valkey, config)


class TestCheckRateLimit:

    def test_within_limit_passes(self, rate_limiter, config):
        for _ in range(config.rate_limit_attempts):
            rate_limiter.check_rate_limit("user@example.com")

    def test_over_limit_raises_with_retry_after(self, rate_limiter, config):
        for _ in range(config.rate_limit_attempts):
            rate_limiter.check_rate_limit("user@example.com")

        with pytest.raises(RateLimitedError) as exc_info:
            rate_limiter.check_rate_limit("user@example.com")

        assert 0 < exc_info.value.retry_after_seconds <= 300

    def test_email_normalized(self, rate_limiter, config):
        for _ in range(config.rate_limit_attempts):
            rate_limiter.check_rate_limit("User@Example.com")

        with pytest.raises(RateLimitedError):
            rate_limiter.check_rate_limit(" user@example.com ")

    def test_emails_counted_separately(self, rate_limiter, config):
        for _ in range(config.rate_limit_attempts):
            rate_limiter.check_rate_limit("a@example.com")

        rate_limiter.check_rate_limit("b@example.com")


class TestResetAndRemaining:

    def test_reset_clears_counter(self, rate_limiter, config):
        for _ in range(config.rate_limit_attempts):
            rate_limiter.check_rate_limit("user@example.com")

        rate_limiter.reset_rate_limit("user@example.com")

        assert rate_limiter.get_remaining_attempts("user@example.com") == config.rate_limit_attempts
        rate_limiter.check_rate_limit("user@example.com")

    def test_remaining_counts_down(self, rate_limiter):
        rate_limiter.check_rate_limit("user@example.com")

        assert rate_limiter.get_remaining_attempts("user@example.com") == 2
