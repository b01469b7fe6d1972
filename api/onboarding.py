"""Merchant self-service onboarding, mounted at /api/onboarding."""

from typing import Any

from fastapi import APIRouter, Body, Request

from api.base import success_response
from auth.exceptions import PermissionDeniedError
from auth.permissions import require_roles
from auth.types import Role
from core.models import OnboardingSubmission


def create_onboarding_router(onboarding_service, merchant_service) -> APIRouter:
    router = APIRouter(tags=["onboarding"])

    def _own_profile():
        caller = require_roles(Role.MERCHANT.value)
        return merchant_service.require_by_user_id(caller.id)

    @router.get("")
    async def get_onboarding(request: Request):
        """Everything saved so far, grouped by step."""
        profile = _own_profile()
        return success_response(onboarding_service.get_state(profile.id))

    @router.post("/submit")
    async def submit_onboarding(request: Request, body: OnboardingSubmission):
        profile = _own_profile()
        if body.merchantProfileId != profile.id:
            raise PermissionDeniedError("You can only submit your own onboarding")
        return success_response(onboarding_service.submit(body))

    @router.put("/{step}")
    async def save_step(request: Request, step: str, body: dict[str, Any] = Body(...)):
        profile = _own_profile()
        return success_response(onboarding_service.save_step(profile.id, step, body))

    return router
