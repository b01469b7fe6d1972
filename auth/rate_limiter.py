"""Rate limiting for password logins.

Uses Valkey with sliding window TTL - each attempt resets the expiry.
Credential stuffing against one email hits an ever-extending lockout.
"""

from clients.valkey_client import ValkeyClient
from auth.config import AuthConfig
from auth.exceptions import RateLimitedError


class RateLimiter:
    """Per-email login attempt limiter backed by Valkey."""

    KEY_PREFIX = "ratelimit:login:"

    def __init__(self, valkey: ValkeyClient, config: AuthConfig):
        self._valkey = valkey
        self._config = config
        self._window_seconds = config.rate_limit_window_minutes * 60

    def _key(self, email: str) -> str:
        """Rate limit key for email (normalized to lowercase)."""
        return f"{self.KEY_PREFIX}{email.strip().lower()}"

    def check_rate_limit(self, email: str) -> None:
        """Count an attempt and raise once over the limit.

        Raises:
            RateLimitedError: If rate limit exceeded.
        """
        key = self._key(email)
        count = self._valkey.incr(key)

        # Reset TTL on every attempt (sliding window)
        self._valkey.expire(key, self._window_seconds)

        if count > self._config.rate_limit_attempts:
            ttl = self._valkey.ttl(key)
            raise RateLimitedError(retry_after_seconds=max(ttl, 1))

    def reset_rate_limit(self, email: str) -> None:
        """Clear the counter after a successful login."""
        self._valkey.delete(self._key(email))

    def get_remaining_attempts(self, email: str) -> int:
        current = self._valkey.get(self._key(email))
        if current is None:
            return self._config.rate_limit_attempts
        return max(self._config.rate_limit_attempts - int(current), 0)
