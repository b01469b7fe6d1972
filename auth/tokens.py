"""Password hashing (passlib) and access tokens (python-jose)."""

from datetime import datetime, timedelta
from typing import Any, Dict
from uuid import UUID

from jose import jwt, JWTError
from passlib.context import CryptContext

from auth.config import AuthConfig
from auth.exceptions import InvalidTokenError
from utils.timezone import now_utc
from utils.user_context import CurrentUser

pwd_context = CryptContext(
    schemes=["bcrypt", "pbkdf2_sha256"],
    deprecated="auto",
)


# -----------------------
# Password hashing
# -----------------------
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        # unrecognised hash format
        return False


# -----------------------
# Access tokens (JWT)
# -----------------------
class TokenIssuer:
    """Signs and verifies HS256 access tokens carrying `{id, role}`."""

    def __init__(self, secret: str, config: AuthConfig):
        if not secret:
            raise ValueError("JWT secret is required")
        self._secret = secret
        self._config = config

    def issue(
        self,
        user_id: UUID,
        role: str,
        extra_claims: Dict[str, Any] | None = None,
    ) -> tuple[str, datetime]:
        """Return (token, expires_at)."""
        now = now_utc()
        expires_at = now + timedelta(hours=self._config.token_expiry_hours)
        payload = {
            "id": str(user_id),
            "role": role,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        if extra_claims:
            payload.update({k: v for k, v in extra_claims.items() if v is not None})
        token = jwt.encode(payload, self._secret, algorithm=self._config.jwt_algorithm)
        return token, expires_at

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Verify signature and expiry.

        Raises:
            InvalidTokenError: On any verification failure.
        """
        try:
            return jwt.decode(token, self._secret, algorithms=[self._config.jwt_algorithm])
        except JWTError as e:
            raise InvalidTokenError(str(e))

    def to_current_user(self, token: str) -> CurrentUser:
        """Decode token into the request's CurrentUser.

        Accepts `id` or the portal-style `userId` claim.
        """
        claims = self.decode(token)
        raw_id = claims.get("id") or claims.get("userId")
        role = claims.get("role")
        if not raw_id or not role:
            raise InvalidTokenError("Token missing id or role claim")

        try:
            user_id = UUID(str(raw_id))
            staff_id = UUID(str(claims["staffId"])) if claims.get("staffId") else None
        except ValueError:
            raise InvalidTokenError("Token carries a malformed id")

        return CurrentUser(
            id=user_id,
            role=role,
            email=claims.get("email"),
            staff_id=staff_id,
        )
