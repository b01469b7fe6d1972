"""
Support KYC review.

Support staff approve or reject a submitted merchant. Approval derives the
merchant's UPI credentials (once) and hands the application to the bank;
rejection records the reason. Each decision is appended to the KYC audit
trail on a best-effort basis.
"""

import logging
from typing import Any
from urllib.parse import quote
from uuid import UUID

from clients.postgres_client import PostgresClient
from core.audit import KYCAuditLogger
from core.models import (
    KYCDecision, KYCStatus, MerchantKYC, MerchantProfile, OnboardingStatus,
)
from core.services.merchant_service import MerchantService
from utils.user_context import get_current_user
from utils.timezone import now_utc

logger = logging.getLogger(__name__)

UPI_HANDLE = "@nsdl"

# Characters a browser's encodeURIComponent leaves alone
URI_COMPONENT_SAFE = "!'()*~"


def derive_upi_vpa(full_name: str, mobile_number: str) -> str:
    """'Anand Traders', '9876543210' -> 'anan3210@nsdl'"""
    return f"{full_name[:4].lower()}{mobile_number[-4:]}{UPI_HANDLE}"


def build_upi_qr_string(vpa: str, payee_name: str, reference: str) -> str:
    """UPI deep link encoded into the merchant's static QR."""
    return (
        f"upi://pay?pa={vpa}"
        f"&pn={quote(payee_name, safe=URI_COMPONENT_SAFE)}"
        f"&tr={reference}&cu=INR"
    )


def _check_upi_inputs(merchant: MerchantProfile) -> None:
    """
    Raises:
        ValueError: If the merchant lacks what the missing UPI credentials are built from
    """
    if not merchant.upi_vpa and not (merchant.full_name and merchant.mobile_number):
        raise ValueError(
            f"Merchant {merchant.id} needs a full name and mobile number before approval"
        )
    if not merchant.upi_qr_string and not merchant.full_name:
        raise ValueError(f"Merchant {merchant.id} needs a full name before approval")


def parse_decision(decision: str | None) -> KYCDecision:
    """
    Raises:
        ValueError: If decision is missing or not approve/reject
    """
    if not decision:
        raise ValueError("decision is required")
    try:
        return KYCDecision(decision)
    except ValueError:
        raise ValueError("Decision must be approve or reject")


class KYCService:
    """Service for the support KYC queue and decisions."""

    def __init__(self, postgres: PostgresClient, merchants: MerchantService, audit: KYCAuditLogger):
        self.postgres = postgres
        self.merchants = merchants
        self.audit = audit

    def list_pending(self) -> list[dict[str, Any]]:
        """
        Submitted merchants that have a KYC record, newest first, with the
        KYC row and documents embedded.
        """
        pending = []
        for merchant in self.merchants.list_by_status(OnboardingStatus.SUBMITTED):
            kyc = self.merchants.get_kyc(merchant.id)
            if kyc is None:
                continue

            documents = self.merchants.list_documents(merchant.id)
            pending.append({
                "id": str(merchant.id),
                "full_name": merchant.full_name,
                "email": merchant.email,
                "mobile_number": merchant.mobile_number,
                "business_name": merchant.business_name,
                "pan_number": merchant.pan_number,
                "aadhaar_number": merchant.aadhaar_number,
                "created_at": merchant.created_at.isoformat() if merchant.created_at else None,
                "merchant_kyc": kyc.model_dump(mode="json"),
                "merchant_documents": [d.model_dump(mode="json") for d in documents],
            })

        logger.info(f"Found {len(pending)} pending KYC applications")
        return pending

    def get_status(self, merchant_id: UUID) -> MerchantKYC:
        """
        Raises:
            ValueError: If no KYC record exists for the merchant
        """
        kyc = self.merchants.get_kyc(merchant_id)
        if kyc is None:
            raise ValueError(f"KYC record for merchant {merchant_id} not found")
        return kyc

    def review(self, merchant_id: UUID | None, decision: str | None, notes: str | None = None) -> dict[str, Any]:
        """
        Apply a support decision to a merchant's KYC.

        All input and existence checks run before the first write. The
        remaining writes are independent; a retry repeats them safely.

        Args:
            merchant_id: merchant_profiles.id
            decision: "approve" or "reject"
            notes: Reviewer notes (stored as rejection reason on reject)

        Returns:
            {"decision", "kycStatus", "merchantId", "merchant"}

        Raises:
            ValueError: On missing/invalid input, unknown merchant or missing KYC record
        """
        if merchant_id is None:
            raise ValueError("merchantId is required")
        parsed = parse_decision(decision)

        merchant = self.merchants.require(merchant_id)
        if self.merchants.get_kyc(merchant_id) is None:
            raise ValueError(f"KYC record for merchant {merchant_id} not found")
        if parsed == KYCDecision.APPROVE:
            _check_upi_inputs(merchant)

        reviewer = get_current_user()
        kyc_status = KYCStatus.VERIFIED if parsed == KYCDecision.APPROVE else KYCStatus.REJECTED
        now = now_utc()

        self.postgres.execute(
            """
            UPDATE merchant_kyc
            SET kyc_status = %s, review_notes = %s, reviewed_by_admin = %s,
                verified_at = %s, updated_at = %s
            WHERE merchant_id = %s
            """,
            (
                kyc_status.value, notes, reviewer.id,
                now if parsed == KYCDecision.APPROVE else None, now,
                merchant_id
            )
        )
        logger.info(f"KYC for merchant {merchant_id} set to {kyc_status.value} by {reviewer.id}")

        self.audit.log_action(
            merchant_id=merchant_id,
            decision=kyc_status.value,
            notes=notes,
            support_staff_id=reviewer.staff_id,
        )

        if parsed == KYCDecision.APPROVE:
            merchant = self._ensure_upi_credentials(merchant)
            merchant = self.merchants.set_onboarding_status(
                merchant_id, OnboardingStatus.PENDING_BANK_APPROVAL
            )
            logger.info(f"Merchant {merchant_id} sent to bank for approval")
        else:
            merchant = self.merchants.update(merchant_id, {
                "onboarding_status": OnboardingStatus.REJECTED,
                "rejection_reason": notes,
            })
            logger.info(f"Merchant {merchant_id} rejected at KYC")

        return {
            "decision": parsed.value,
            "kycStatus": kyc_status.value,
            "merchantId": str(merchant_id),
            "merchant": merchant.model_dump(mode="json"),
        }

    def _ensure_upi_credentials(self, merchant: MerchantProfile) -> MerchantProfile:
        """Fill in whichever of VPA and QR string is missing. A stored VPA is never replaced."""
        if merchant.upi_vpa and merchant.upi_qr_string:
            return merchant

        fields = {}
        vpa = merchant.upi_vpa
        if not vpa:
            vpa = derive_upi_vpa(merchant.full_name, merchant.mobile_number)
            fields["upi_vpa"] = vpa
            logger.info(f"Generated UPI VPA {vpa} for merchant {merchant.id}")
        if not merchant.upi_qr_string:
            fields["upi_qr_string"] = build_upi_qr_string(
                vpa, merchant.full_name, merchant.application_id or str(merchant.id)
            )
        return self.merchants.update(merchant.id, fields)
