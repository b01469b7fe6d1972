"""HTTP routes for authentication and support-user management."""

from fastapi import APIRouter, Request

from auth.service import AuthService
from auth.permissions import require_roles
from auth.types import (
    ADMIN_ROLES,
    CreateSupportRequest,
    IssuedToken,
    LoginRequest,
    RegisterRequest,
    SupportUserAction,
)
from api.base import success_response, created_response
from utils.user_context import get_current_user


def _token_payload(issued: IssuedToken) -> dict:
    return {
        "token": issued.token,
        "expiresAt": issued.expires_at.isoformat(),
        "user": issued.user.model_dump(mode="json"),
        "staffId": str(issued.staff_id) if issued.staff_id else None,
    }


def create_auth_router(auth_service: AuthService) -> APIRouter:
    """Admin backend auth router, mounted at /api/auth."""
    router = APIRouter(tags=["auth"])

    @router.post("/register")
    async def register(request: Request, body: RegisterRequest):
        """Create an account. Role defaults to support."""
        user = auth_service.register(body.name, body.email, body.password, body.role)
        return created_response(user.model_dump(mode="json"))

    @router.post("/login")
    async def login(request: Request, body: LoginRequest):
        """Password login. Returns a bearer token valid for 24 hours."""
        issued = auth_service.login(body.email, body.password)
        return success_response(_token_payload(issued))

    @router.get("/me")
    async def me(request: Request):
        user = get_current_user()
        return success_response({
            "id": str(user.id),
            "role": user.role,
            "email": user.email,
        })

    @router.get("/support-users")
    async def list_support_users(request: Request):
        require_roles(*ADMIN_ROLES)
        users = auth_service.list_support_users()
        return success_response([u.model_dump(mode="json") for u in users])

    @router.post("/create-support")
    async def create_support_user(request: Request, body: CreateSupportRequest):
        require_roles(*ADMIN_ROLES)
        user = auth_service.create_support_user(body.name, body.email, body.password)
        return created_response(user.model_dump(mode="json"))

    @router.post("/support-toggle")
    async def toggle_support_user(request: Request, body: SupportUserAction):
        require_roles(*ADMIN_ROLES)
        user = auth_service.toggle_support_user(body.userId)
        return success_response(user.model_dump(mode="json"))

    @router.post("/support-delete")
    async def delete_support_user(request: Request, body: SupportUserAction):
        require_roles(*ADMIN_ROLES)
        auth_service.delete_support_user(body.userId)
        return success_response({"deleted": True})

    return router


def create_portal_auth_router(auth_service: AuthService, portal: str) -> APIRouter:
    """Staff portal login, mounted at /api/support/auth or /api/bank/auth."""
    router = APIRouter(tags=[f"{portal}-auth"])

    @router.post("/login")
    async def portal_login(request: Request, body: LoginRequest):
        issued = auth_service.staff_login(portal, body.email, body.password)
        return success_response(_token_payload(issued))

    return router
