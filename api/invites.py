"""Merchant invitation routes, mounted at /api/invites."""

from fastapi import APIRouter, Request

from api.base import success_response
from auth.permissions import require_roles
from auth.types import Role
from core.models import BulkInviteRequest


def create_invites_router(invite_service) -> APIRouter:
    router = APIRouter(tags=["invites"])

    @router.post("/bulk-send")
    async def bulk_send(request: Request, body: BulkInviteRequest):
        """Create and deliver invites. Per-entry failures are reported, not raised."""
        caller = require_roles(Role.DISTRIBUTOR.value)
        return success_response(invite_service.bulk_send(caller.id, body.merchants))

    @router.get("/token/{token}")
    async def resolve_invite(request: Request, token: str):
        invite = invite_service.resolve(token)
        return success_response(invite.prefill())

    @router.post("/token/{token}/accept")
    async def accept_invite(request: Request, token: str):
        invite = invite_service.accept(token)
        return success_response(invite.prefill())

    return router
