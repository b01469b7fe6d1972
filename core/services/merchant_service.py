"""
Merchant profile reads and writes shared by the onboarding, KYC, bank,
review and distributor services.
"""

import logging
from typing import Any
from uuid import UUID

from clients.postgres_client import PostgresClient
from core.models import (
    MerchantProfile, MerchantKYC, MerchantDocument, MerchantBankDetails, MerchantProduct,
    OnboardingStatus,
)
from utils.timezone import now_utc

logger = logging.getLogger(__name__)

_UPDATABLE_COLUMNS = {
    "full_name", "mobile_number", "email", "business_name", "entity_type",
    "pan_number", "aadhaar_number", "gst_number",
    "onboarding_status", "upi_vpa", "upi_qr_string", "rejection_reason",
    "approval_status", "review_notes", "reviewed_by", "reviewed_at",
    "bank_decision_notes", "bank_approved_at",
}

SUMMARY_COLUMNS = "id, user_id, full_name, email, approval_status"


class MerchantService:
    """Service for merchant profile operations."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def get_by_id(self, merchant_id: UUID) -> MerchantProfile | None:
        row = self.postgres.execute_single(
            "SELECT * FROM merchant_profiles WHERE id = %s",
            (merchant_id,)
        )
        return MerchantProfile.model_validate(row) if row else None

    def get_by_user_id(self, user_id: UUID) -> MerchantProfile | None:
        row = self.postgres.execute_single(
            "SELECT * FROM merchant_profiles WHERE user_id = %s",
            (user_id,)
        )
        return MerchantProfile.model_validate(row) if row else None

    def require(self, merchant_id: UUID) -> MerchantProfile:
        """
        Raises:
            ValueError: If merchant not found
        """
        profile = self.get_by_id(merchant_id)
        if profile is None:
            raise ValueError(f"Merchant {merchant_id} not found")
        return profile

    def require_by_user_id(self, user_id: UUID) -> MerchantProfile:
        profile = self.get_by_user_id(user_id)
        if profile is None:
            raise ValueError(f"Merchant for user {user_id} not found")
        return profile

    def update(self, merchant_id: UUID, fields: dict[str, Any]) -> MerchantProfile:
        """
        Update profile columns and stamp updated_at.

        Unknown columns are dropped with a warning. Enum values are written
        as their string value.

        Raises:
            ValueError: If merchant not found
        """
        for field in fields:
            if field not in _UPDATABLE_COLUMNS:
                logger.warning(
                    f"Attempted to update unknown field '{field}' on merchant {merchant_id}"
                )

        valid = {
            k: (v.value if hasattr(v, "value") else v)
            for k, v in fields.items() if k in _UPDATABLE_COLUMNS
        }
        if not valid:
            return self.require(merchant_id)

        set_parts = [f"{column} = %s" for column in valid]
        set_parts.append("updated_at = %s")
        params = tuple(valid.values()) + (now_utc(), merchant_id)

        rows = self.postgres.execute_returning(
            f"""
            UPDATE merchant_profiles
            SET {', '.join(set_parts)}
            WHERE id = %s
            RETURNING *
            """,
            params
        )

        if not rows:
            raise ValueError(f"Merchant {merchant_id} not found")

        return MerchantProfile.model_validate(rows[0])

    def set_onboarding_status(self, merchant_id: UUID, status: OnboardingStatus) -> MerchantProfile:
        return self.update(merchant_id, {"onboarding_status": status})

    def list_by_status(self, status: OnboardingStatus, order_by: str = "created_at") -> list[MerchantProfile]:
        """Profiles in one onboarding status, newest first by order_by."""
        if order_by not in ("created_at", "updated_at"):
            raise ValueError(f"Cannot order merchants by {order_by}")

        rows = self.postgres.execute(
            f"""
            SELECT * FROM merchant_profiles
            WHERE onboarding_status = %s
            ORDER BY {order_by} DESC
            """,
            (OnboardingStatus(status).value,)
        )
        return [MerchantProfile.model_validate(row) for row in rows]

    def list_for_distributor(self, distributor_id: UUID) -> list[MerchantProfile]:
        rows = self.postgres.execute(
            """
            SELECT * FROM merchant_profiles
            WHERE distributor_id = %s
            ORDER BY created_at DESC
            """,
            (distributor_id,)
        )
        return [MerchantProfile.model_validate(row) for row in rows]

    def list_summaries(self, user_ids: list[UUID] | None = None) -> list[dict[str, Any]]:
        """
        Short rows (id, user_id, full_name, email, approval_status) for review lists.

        Args:
            user_ids: Restrict to these merchant user ids; None for all merchants
        """
        if user_ids is None:
            return self.postgres.execute(
                f"SELECT {SUMMARY_COLUMNS} FROM merchant_profiles ORDER BY created_at DESC"
            )
        if not user_ids:
            return []
        return self.postgres.execute(
            f"""
            SELECT {SUMMARY_COLUMNS} FROM merchant_profiles
            WHERE user_id::text = ANY(%s)
            ORDER BY created_at DESC
            """,
            ([str(user_id) for user_id in user_ids],)
        )

    def get_kyc(self, merchant_id: UUID) -> MerchantKYC | None:
        row = self.postgres.execute_single(
            "SELECT * FROM merchant_kyc WHERE merchant_id = %s",
            (merchant_id,)
        )
        return MerchantKYC.model_validate(row) if row else None

    def list_documents(self, merchant_id: UUID) -> list[MerchantDocument]:
        rows = self.postgres.execute(
            "SELECT * FROM merchant_documents WHERE merchant_id = %s",
            (merchant_id,)
        )
        return [MerchantDocument.model_validate(row) for row in rows]

    def list_products(self, merchant_id: UUID) -> list[MerchantProduct]:
        rows = self.postgres.execute(
            "SELECT * FROM merchant_products WHERE merchant_id = %s",
            (merchant_id,)
        )
        return [MerchantProduct.model_validate(row) for row in rows]

    def get_bank_details(self, merchant_id: UUID) -> MerchantBankDetails | None:
        row = self.postgres.execute_single(
            "SELECT * FROM merchant_bank_details WHERE merchant_id = %s",
            (merchant_id,)
        )
        return MerchantBankDetails.model_validate(row) if row else None
