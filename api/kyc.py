"""Support portal KYC queue, mounted at /api/support."""

from uuid import UUID

from fastapi import APIRouter, Request

from api.base import success_response
from auth.permissions import require_roles
from auth.types import ADMIN_ROLES, SUPPORT_PORTAL_ROLES
from core.models import KYCReviewRequest

KYC_ROLES = SUPPORT_PORTAL_ROLES + ADMIN_ROLES


def create_kyc_router(kyc_service) -> APIRouter:
    router = APIRouter(tags=["kyc"])

    @router.get("/kyc/pending")
    async def pending_kyc(request: Request):
        """Submitted merchants with their KYC row and documents."""
        require_roles(*KYC_ROLES)
        return success_response(kyc_service.list_pending())

    @router.post("/kyc/review")
    async def review_kyc(request: Request, body: KYCReviewRequest):
        require_roles(*KYC_ROLES)
        result = kyc_service.review(body.merchantId, body.decision, body.reviewNotes)
        return success_response(result)

    @router.get("/kyc/status/{merchant_id}")
    async def kyc_status(request: Request, merchant_id: UUID):
        require_roles(*KYC_ROLES)
        kyc = kyc_service.get_status(merchant_id)
        return success_response(kyc.model_dump(mode="json"))

    return router
