"""
Admin merchant review.

Admins approve or reject a merchant account. The outcome is stored on the
profile, the merchant's latest onboarding ticket is moved to closed
(approved) or waiting_customer (rejected), and the merchant is emailed
through the MerchantReviewed event. Merchants are addressed by user id.
"""

import logging
from typing import Any
from uuid import UUID

from auth.exceptions import PermissionDeniedError
from auth.types import Role
from core.event_bus import EventBus
from core.events import MerchantReviewed
from core.models import ApprovalStatus, TicketStatus
from core.services.merchant_service import MerchantService
from core.services.ticket_service import TicketService
from utils.user_context import CurrentUser, get_current_user_id
from utils.timezone import now_utc

logger = logging.getLogger(__name__)

_TICKET_STATUS_AFTER_REVIEW = {
    ApprovalStatus.APPROVED: TicketStatus.CLOSED,
    ApprovalStatus.REJECTED: TicketStatus.WAITING_CUSTOMER,
}


def public_document_url(storage_url: str, bucket: str, file_path: str) -> str:
    """Public object URL for a file in a Supabase storage bucket."""
    return f"{storage_url.rstrip('/')}/storage/v1/object/public/{bucket}/{file_path.lstrip('/')}"


class MerchantReviewService:
    """Service for admin review of merchant accounts."""

    def __init__(
        self,
        merchants: MerchantService,
        tickets: TicketService,
        storage_url: str,
        document_bucket: str,
        event_bus: EventBus | None = None,
    ):
        self.merchants = merchants
        self.tickets = tickets
        self.storage_url = storage_url
        self.document_bucket = document_bucket
        self.event_bus = event_bus

    def review(self, merchant_user_id: UUID, status: ApprovalStatus, notes: str | None = None) -> dict[str, Any]:
        """
        Record an approval decision.

        Raises:
            ValueError: If merchant not found
        """
        status = ApprovalStatus(status)
        profile = self.merchants.get_by_user_id(merchant_user_id)
        if profile is None:
            raise ValueError(f"Merchant {merchant_user_id} not found")

        profile = self.merchants.update(profile.id, {
            "approval_status": status,
            "review_notes": notes,
            "reviewed_by": get_current_user_id(),
            "reviewed_at": now_utc(),
        })

        ticket = self.tickets.latest_onboarding_ticket(merchant_user_id)
        if ticket is not None:
            self.tickets.set_status_direct(ticket.id, _TICKET_STATUS_AFTER_REVIEW[status])
            logger.info(f"Onboarding ticket {ticket.id} moved to {_TICKET_STATUS_AFTER_REVIEW[status].value}")
        else:
            logger.warning(f"No onboarding ticket for merchant {merchant_user_id}, skipping ticket update")

        if self.event_bus is not None:
            self.event_bus.publish(MerchantReviewed.create(profile, status.value, notes))

        logger.info(f"Merchant {merchant_user_id} {status.value}")
        return {
            "message": f"Merchant {status.value} successfully",
            "merchant": profile.model_dump(mode="json"),
        }

    def get_review_data(self, merchant_user_id: UUID, caller: CurrentUser) -> dict[str, Any]:
        """
        Profile plus documents (with public URLs) for the review screen.

        Support agents may only open merchants whose onboarding ticket is
        assigned to them.

        Raises:
            PermissionDeniedError: Support caller without an assigned ticket
            ValueError: If merchant not found
        """
        if caller.role == Role.SUPPORT.value:
            if not self.tickets.has_assigned_onboarding_ticket(merchant_user_id, caller.id):
                raise PermissionDeniedError("You are not authorized to view this merchant")

        profile = self.merchants.get_by_user_id(merchant_user_id)
        if profile is None:
            raise ValueError(f"Merchant {merchant_user_id} not found")

        documents = []
        for document in self.merchants.list_documents(profile.id):
            entry = document.model_dump(mode="json")
            entry["public_url"] = public_document_url(
                self.storage_url, self.document_bucket, document.file_path
            )
            documents.append(entry)

        return {
            "profile": profile.model_dump(mode="json"),
            "documents": documents,
        }

    def kyc_list(self) -> list[dict[str, Any]]:
        return self.merchants.list_summaries()

    def assigned_kyc(self, support_user_id: UUID) -> list[dict[str, Any]]:
        """Merchants whose onboarding tickets are assigned to this support user."""
        merchant_ids = self.tickets.assigned_onboarding_merchants(support_user_id)
        if not merchant_ids:
            return []
        return self.merchants.list_summaries(merchant_ids)
