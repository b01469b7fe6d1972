"""Bank-side approval of KYC-verified merchant applications."""

import logging
from uuid import UUID

from core.models import KYCDecision, MerchantProfile, OnboardingStatus
from core.services.merchant_service import MerchantService
from core.services.kyc_service import parse_decision
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class BankService:
    """Service for the bank approval queue."""

    def __init__(self, merchants: MerchantService):
        self.merchants = merchants

    def list_pending(self) -> list[MerchantProfile]:
        """Applications awaiting the bank, most recently updated first."""
        return self.merchants.list_by_status(
            OnboardingStatus.PENDING_BANK_APPROVAL, order_by="updated_at"
        )

    def get_application(self, application_id: UUID) -> MerchantProfile:
        """
        Raises:
            ValueError: If application not found
        """
        profile = self.merchants.get_by_id(application_id)
        if profile is None:
            raise ValueError(f"Application {application_id} not found")
        return profile

    def decide(self, application_id: UUID, decision: str | None, notes: str | None = None) -> MerchantProfile:
        """
        Approve or reject an application.

        approve -> approved, bank_approved_at stamped
        reject  -> bank_rejected

        Raises:
            ValueError: If decision is invalid or application not found
        """
        parsed = parse_decision(decision)
        self.get_application(application_id)

        approved = parsed == KYCDecision.APPROVE
        profile = self.merchants.update(application_id, {
            "onboarding_status": OnboardingStatus.APPROVED if approved else OnboardingStatus.BANK_REJECTED,
            "bank_decision_notes": notes,
            "bank_approved_at": now_utc() if approved else None,
        })

        logger.info(f"Bank {parsed.value}d application {application_id}")
        return profile
