"""Pydantic models for auth domain."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class Role(str, Enum):
    """Roles carried in the JWT `role` claim."""

    MERCHANT = "merchant"
    DISTRIBUTOR = "distributor"
    SUPPORT = "support"
    SUPPORT_STAFF = "support_staff"
    SUPPORT_ADMIN = "support_admin"
    BANK_STAFF = "bank_staff"
    BANK_ADMIN = "bank_admin"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


ADMIN_ROLES = (Role.ADMIN.value, Role.SUPER_ADMIN.value)
SUPPORT_PORTAL_ROLES = (Role.SUPPORT_ADMIN.value, Role.SUPPORT_STAFF.value)
BANK_PORTAL_ROLES = (Role.BANK_ADMIN.value, Role.BANK_STAFF.value)


class User(BaseModel):
    """A user of the admin backend (never includes the password hash)."""

    id: UUID
    name: str | None = None
    email: EmailStr
    role: Role
    is_active: bool = True
    created_at: datetime | None = None
    last_login_at: datetime | None = None

    model_config = {"from_attributes": True}


class StaffMember(BaseModel):
    """Row of support_staff or bank_staff linking a user to a portal role."""

    id: UUID
    user_id: UUID
    name: str | None = None
    role: str
    status: str

    model_config = {"from_attributes": True}


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str
    role: Role = Role.SUPPORT


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class CreateSupportRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str


class SupportUserAction(BaseModel):
    """Body for toggle/delete of a support user."""

    userId: UUID


class IssuedToken(BaseModel):
    """Access token returned by every login flow."""

    token: str
    expires_at: datetime
    user: User
    staff_id: UUID | None = None
