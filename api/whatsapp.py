"""Public WhatsApp OTP routes, mounted at /api/whatsapp."""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from api.base import success_response


class SendOTPRequest(BaseModel):
    to: str | None = None
    templateName: str | None = None


class VerifyOTPRequest(BaseModel):
    to: str | None = None
    otp: str | None = None


def create_whatsapp_router(otp_service) -> APIRouter:
    router = APIRouter(tags=["whatsapp"])

    @router.post("/send-otp")
    async def send_otp(request: Request, body: SendOTPRequest):
        return success_response(otp_service.send(body.to, body.templateName))

    @router.post("/verify-otp")
    async def verify_otp(request: Request, body: VerifyOTPRequest):
        verified = otp_service.verify(body.to, body.otp)
        return success_response({"verified": verified})

    return router
