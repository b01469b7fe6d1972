"""Authentication service - password logins, registration, support-user admin."""

import logging
from uuid import UUID

from auth.config import AuthConfig
from auth.database import AuthDatabase
from auth.rate_limiter import RateLimiter
from auth.tokens import TokenIssuer, hash_password, verify_password
from auth.types import (
    IssuedToken,
    Role,
    User,
    SUPPORT_PORTAL_ROLES,
    BANK_PORTAL_ROLES,
)
from auth.exceptions import (
    InvalidCredentialsError,
    PermissionDeniedError,
    UserAlreadyExistsError,
    UserInactiveError,
    WeakPasswordError,
)

logger = logging.getLogger(__name__)

_PORTAL_ROLES = {
    "support": SUPPORT_PORTAL_ROLES,
    "bank": BANK_PORTAL_ROLES,
}


class AuthService:
    """Orchestrates credential checks and token issuance.

    Handles:
    - Admin backend register/login (users table)
    - Support and bank portal logins (users + staff tables)
    - Support-user management for admins
    """

    def __init__(
        self,
        config: AuthConfig,
        auth_db: AuthDatabase,
        rate_limiter: RateLimiter,
        token_issuer: TokenIssuer,
    ):
        self._config = config
        self._auth_db = auth_db
        self._rate_limiter = rate_limiter
        self._tokens = token_issuer

    def validate_password(self, password: str) -> None:
        """
        Raises:
            WeakPasswordError: If shorter than the configured minimum.
        """
        if not password or len(password) < self._config.min_password_length:
            raise WeakPasswordError(
                f"Password must be at least {self._config.min_password_length} characters"
            )

    def create_user(self, name: str | None, email: str, password: str, role: Role) -> User:
        """Create an active user after policy and duplicate checks.

        Raises:
            WeakPasswordError: Password too short.
            UserAlreadyExistsError: Email already registered.
        """
        email = email.strip().lower()
        self.validate_password(password)

        if self._auth_db.get_user_by_email(email) is not None:
            raise UserAlreadyExistsError(f"User with email {email} already exists")

        user = self._auth_db.create_user(name, email, hash_password(password), role)
        logger.info(f"Created {role.value} user {user.id}")
        return user

    def create_role_user(self, name: str | None, email: str, password: str, role: Role) -> User:
        """create_user plus the matching user_roles row.

        The user is deleted again if the role row cannot be written.
        """
        user = self.create_user(name, email, password, role)
        try:
            self._auth_db.add_user_role(user.id, role)
        except Exception:
            logger.error(f"Failed to add {role.value} role for {user.id}, removing user")
            self._auth_db.delete_user(user.id)
            raise
        return user

    def remove_user(self, user_id: UUID) -> bool:
        """Delete an account created during a flow that later failed."""
        deleted = self._auth_db.delete_user(user_id)
        if deleted:
            logger.info(f"Removed user {user_id}")
        return deleted

    def register(self, name: str, email: str, password: str, role: Role = Role.SUPPORT) -> User:
        """Self-registration for the admin backend.

        Raises:
            PermissionDeniedError: If asking for super_admin.
        """
        if role == Role.SUPER_ADMIN:
            raise PermissionDeniedError("super_admin accounts cannot be self-registered")
        return self.create_user(name, email, password, role)

    def _check_credentials(self, email: str, password: str) -> User:
        """Rate-limit, then verify the password.

        Raises:
            RateLimitedError: Too many attempts for this email.
            InvalidCredentialsError: Unknown email or wrong password.
            UserInactiveError: Account disabled.
        """
        email = email.strip().lower()
        self._rate_limiter.check_rate_limit(email)

        user = self._auth_db.get_user_by_email(email)
        if user is None:
            logger.warning(f"Login failed for {email}: unknown email")
            raise InvalidCredentialsError("Invalid email or password")

        if not verify_password(password, self._auth_db.get_password_hash(user.id)):
            logger.warning(f"Login failed for {email}: wrong password")
            raise InvalidCredentialsError("Invalid email or password")

        if not user.is_active:
            logger.warning(f"Login refused for {email}: account disabled")
            raise UserInactiveError("Account disabled")

        self._rate_limiter.reset_rate_limit(email)
        self._auth_db.update_last_login(user.id)
        return user

    def login(self, email: str, password: str) -> IssuedToken:
        """Admin backend login. Token claims: {id, role}."""
        user = self._check_credentials(email, password)
        token, expires_at = self._tokens.issue(user.id, user.role.value)
        logger.info(f"User {user.id} logged in as {user.role.value}")
        return IssuedToken(token=token, expires_at=expires_at, user=user)

    def staff_login(self, portal: str, email: str, password: str) -> IssuedToken:
        """Support or bank portal login.

        The user must have an active row in the portal's staff table with
        one of the portal roles; the token carries the staff role.

        Raises:
            PermissionDeniedError: Not staff of this portal, or wrong role.
            UserInactiveError: Staff row not active.
        """
        if portal not in _PORTAL_ROLES:
            raise ValueError(f"Unknown portal '{portal}'")

        user = self._check_credentials(email, password)

        staff = self._auth_db.get_staff_member(portal, user.id)
        if staff is None:
            logger.warning(f"User {user.id} is not {portal} staff")
            raise PermissionDeniedError(f"Not authorized as {portal} staff")

        if staff.status != "active":
            raise UserInactiveError(f"Account is {staff.status}. Contact administrator.")

        if staff.role not in _PORTAL_ROLES[portal]:
            logger.warning(f"User {user.id} has invalid {portal} role {staff.role}")
            raise PermissionDeniedError("Insufficient permissions")

        token, expires_at = self._tokens.issue(
            user.id,
            staff.role,
            {"email": user.email, "staffId": str(staff.id)},
        )
        logger.info(f"{portal.capitalize()} staff {staff.id} logged in as {staff.role}")
        return IssuedToken(token=token, expires_at=expires_at, user=user, staff_id=staff.id)

    # -------------------------------------------------------------------------
    # Support-user management (admin / super_admin)
    # -------------------------------------------------------------------------

    def list_support_users(self) -> list[User]:
        return self._auth_db.list_users_by_role(Role.SUPPORT)

    def create_support_user(self, name: str, email: str, password: str) -> User:
        return self.create_user(name, email, password, Role.SUPPORT)

    def toggle_support_user(self, user_id: UUID) -> User:
        """Flip is_active.

        Raises:
            ValueError: If no support user has this id.
        """
        user = self._auth_db.get_user_by_id(user_id)
        if user is None or user.role != Role.SUPPORT:
            raise ValueError(f"Support user {user_id} not found")

        updated = self._auth_db.set_active(user_id, not user.is_active)
        logger.info(f"User {user_id} is_active set to {updated.is_active}")
        return updated

    def delete_support_user(self, user_id: UUID) -> None:
        """Delete a support user. Other roles are never deleted here.

        Raises:
            ValueError: If no support user has this id.
        """
        if not self._auth_db.delete_user(user_id, role=Role.SUPPORT):
            raise ValueError(f"Support user {user_id} not found")
        logger.info(f"Deleted support user {user_id}")
