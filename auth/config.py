"""Authentication configuration."""

from pydantic import BaseModel, Field


class AuthConfig(BaseModel):
    """
    Authentication configuration.

    Durations are in their natural units (hours for tokens, minutes for
    rate-limit windows). The signing secret is not here; it comes from
    clients.settings.get_jwt_secret().
    """

    # Token settings
    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm",
    )
    token_expiry_hours: int = Field(
        default=24,
        description="Lifetime of access tokens for every portal",
        ge=1,
        le=168,
    )

    # Password policy
    min_password_length: int = Field(
        default=6,
        description="Minimum accepted password length",
        ge=6,
        le=128,
    )

    # Rate limiting
    rate_limit_attempts: int = Field(
        default=5,
        description="Max failed login attempts per email per window",
        ge=1,
        le=20,
    )
    rate_limit_window_minutes: int = Field(
        default=15,
        description="Rate limit window duration",
        ge=5,
        le=60,
    )


class OTPConfig(BaseModel):
    """One-time codes sent over WhatsApp for phone verification."""

    code_length: int = Field(
        default=4,
        description="Number of digits in a code",
        ge=4,
        le=8,
    )
    ttl_seconds: int = Field(
        default=300,
        description="How long a code stays valid",
        ge=60,
        le=1800,
    )
