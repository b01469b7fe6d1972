"""Merchant invitation models."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class InvitationStatus(str, Enum):
    SENT = "sent"
    FAILED_TO_SEND = "failed_to_send"
    ACCEPTED = "accepted"
    REGISTERED = "registered"
    EXPIRED = "expired"


class SendChannel(str, Enum):
    WHATSAPP = "whatsapp"
    SMS = "sms"


USED_STATUSES = (InvitationStatus.ACCEPTED, InvitationStatus.REGISTERED)


class MerchantInvitation(BaseModel):
    """Row of merchant_invitations."""

    id: UUID
    distributor_id: UUID
    merchant_email: str
    merchant_name: str | None = None
    merchant_mobile: str | None = None
    business_name: str | None = None
    invite_token: str
    invite_link: str | None = None
    status: InvitationStatus = InvitationStatus.SENT
    sent_via: SendChannel | None = None
    whatsapp_message_id: str | None = None
    send_error: str | None = None
    sent_at: datetime | None = None
    accepted_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}

    @property
    def is_used(self) -> bool:
        return self.status in USED_STATUSES

    def prefill(self) -> dict:
        """Contact fields handed to the signup form."""
        return {
            "email": self.merchant_email,
            "fullName": self.merchant_name,
            "mobileNumber": self.merchant_mobile,
            "businessName": self.business_name,
            "distributorId": str(self.distributor_id),
            "status": self.status.value,
        }


class InviteContact(BaseModel):
    """One merchant in a bulk invite. Fields are checked per entry by the service."""

    email: str | None = None
    fullName: str | None = None
    mobileNumber: str | None = None
    businessName: str | None = None


class BulkInviteRequest(BaseModel):
    merchants: list[InviteContact] = Field(..., min_length=1)


class InviteResult(BaseModel):
    email: str
    status: str
    inviteToken: str | None = None
    via: SendChannel | None = None
    messageId: str | None = None
    error: str | None = None
