"""Database operations for authentication.

Tables: users (admin backend accounts), user_roles, support_staff, bank_staff.
Password hashes never leave this module.
"""

from uuid import UUID

from clients.postgres_client import PostgresClient
from auth.types import User, StaffMember, Role
from utils.timezone import now_utc

_USER_COLUMNS = "id, name, email, role, is_active, created_at, last_login_at"

# Portal name -> staff table. Never interpolate user input here.
_STAFF_TABLES = {
    "support": "support_staff",
    "bank": "bank_staff",
}


class AuthDatabase:
    """Database operations for authentication."""

    def __init__(self, postgres: PostgresClient):
        self._db = postgres

    def get_user_by_email(self, email: str) -> User | None:
        """Find user by email (case-insensitive)."""
        row = self._db.execute_single(
            f"SELECT {_USER_COLUMNS} FROM users WHERE email = lower(%s)",
            (email,),
        )
        return User.model_validate(row) if row else None

    def get_user_by_id(self, user_id: UUID) -> User | None:
        row = self._db.execute_single(
            f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s",
            (user_id,),
        )
        return User.model_validate(row) if row else None

    def get_password_hash(self, user_id: UUID) -> str | None:
        return self._db.execute_scalar(
            "SELECT password_hash FROM users WHERE id = %s",
            (user_id,),
        )

    def create_user(self, name: str | None, email: str, password_hash: str, role: Role) -> User:
        """Create user with email lowercased."""
        rows = self._db.execute_returning(
            f"""INSERT INTO users (name, email, password_hash, role, is_active, created_at)
                VALUES (%s, lower(%s), %s, %s, true, %s)
                RETURNING {_USER_COLUMNS}""",
            (name, email, password_hash, role.value, now_utc()),
        )
        return User.model_validate(rows[0])

    def add_user_role(self, user_id: UUID, role: Role) -> None:
        self._db.execute_returning(
            "INSERT INTO user_roles (user_id, role) VALUES (%s, %s) RETURNING user_id",
            (user_id, role.value),
        )

    def update_last_login(self, user_id: UUID) -> None:
        self._db.execute_returning(
            "UPDATE users SET last_login_at = %s WHERE id = %s RETURNING id",
            (now_utc(), user_id),
        )

    def list_users_by_role(self, role: Role) -> list[User]:
        rows = self._db.execute(
            f"SELECT {_USER_COLUMNS} FROM users WHERE role = %s ORDER BY created_at DESC",
            (role.value,),
        )
        return [User.model_validate(row) for row in rows]

    def set_active(self, user_id: UUID, is_active: bool) -> User | None:
        rows = self._db.execute_returning(
            f"UPDATE users SET is_active = %s WHERE id = %s RETURNING {_USER_COLUMNS}",
            (is_active, user_id),
        )
        return User.model_validate(rows[0]) if rows else None

    def delete_user(self, user_id: UUID, role: Role | None = None) -> bool:
        """Permanently delete user, optionally only when it has the given role.

        Returns:
            True if a row was deleted.
        """
        if role is None:
            rows = self._db.execute_returning(
                "DELETE FROM users WHERE id = %s RETURNING id",
                (user_id,),
            )
        else:
            rows = self._db.execute_returning(
                "DELETE FROM users WHERE id = %s AND role = %s RETURNING id",
                (user_id, role.value),
            )
        return len(rows) > 0

    def get_staff_member(self, portal: str, user_id: UUID) -> StaffMember | None:
        """Look up the support_staff/bank_staff row for a user."""
        table = _STAFF_TABLES[portal]
        row = self._db.execute_single(
            f"SELECT id, user_id, name, role, status FROM {table} WHERE user_id = %s",
            (user_id,),
        )
        return StaffMember.model_validate(row) if row else None
