"""Bank portal application review, mounted at /api/bank/applications."""

from uuid import UUID

from fastapi import APIRouter, Request

from api.base import success_response
from auth.permissions import require_roles
from auth.types import ADMIN_ROLES, BANK_PORTAL_ROLES
from core.models import BankDecisionRequest

BANK_ROLES = BANK_PORTAL_ROLES + ADMIN_ROLES


def create_bank_router(bank_service) -> APIRouter:
    router = APIRouter(tags=["bank"])

    @router.get("/pending")
    async def pending_applications(request: Request):
        require_roles(*BANK_ROLES)
        merchants = bank_service.list_pending()
        return success_response([m.model_dump(mode="json") for m in merchants])

    @router.get("/{application_id}")
    async def get_application(request: Request, application_id: UUID):
        require_roles(*BANK_ROLES)
        merchant = bank_service.get_application(application_id)
        return success_response(merchant.model_dump(mode="json"))

    @router.post("/decide/{application_id}")
    async def decide_application(request: Request, application_id: UUID, body: BankDecisionRequest):
        """Approve or reject an application awaiting the bank."""
        require_roles(*BANK_ROLES)
        merchant = bank_service.decide(application_id, body.decision, body.notes)
        return success_response(merchant.model_dump(mode="json"))

    return router
