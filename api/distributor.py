"""Distributor portal routes, mounted at /api/distributor."""

from typing import Any

from fastapi import APIRouter, Body, Request

from api.base import success_response, created_response
from auth.permissions import require_roles
from auth.types import Role
from core.models import AssignProductRequest, CreateMerchantRequest, OnboardingSubmission


def create_distributor_router(distributor_service) -> APIRouter:
    router = APIRouter(tags=["distributor"])

    def _distributor():
        return require_roles(Role.DISTRIBUTOR.value)

    @router.post("/create-merchant")
    async def create_merchant(request: Request, body: CreateMerchantRequest):
        caller = _distributor()
        return created_response(distributor_service.create_merchant(caller.id, body))

    @router.post("/submit-merchant-onboarding")
    async def submit_merchant_onboarding(request: Request, body: OnboardingSubmission):
        """Submit the full onboarding bundle for one of the caller's merchants."""
        caller = _distributor()
        return success_response(distributor_service.submit_onboarding(caller.id, body))

    @router.post("/assign-product")
    async def assign_product(request: Request, body: AssignProductRequest):
        caller = _distributor()
        return success_response(distributor_service.assign_product(caller.id, body))

    @router.get("/merchants")
    async def list_merchants(request: Request):
        caller = _distributor()
        merchants = distributor_service.list_merchants(caller.id)
        return success_response([m.model_dump(mode="json") for m in merchants])

    @router.get("/configs")
    async def get_configs(request: Request):
        caller = _distributor()
        return success_response(distributor_service.get_configs(caller.id))

    @router.get("/configs/{config_type}")
    async def get_config(request: Request, config_type: str):
        caller = _distributor()
        return success_response(distributor_service.get_config(caller.id, config_type))

    @router.put("/configs/{config_type}")
    async def save_config(request: Request, config_type: str, body: dict[str, Any] = Body(...)):
        caller = _distributor()
        return success_response(distributor_service.save_config(caller.id, config_type, body))

    return router
