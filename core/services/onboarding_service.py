"""
Merchant onboarding persistence.

Each wizard step is saved independently and every write is idempotent
(update, upsert keyed on merchant_id, or delete-then-insert), so a
resubmission repairs a partially applied one. Submission runs the steps in
order and stops at the first failure without undoing earlier steps.
"""

import logging
from typing import Any, Callable
from uuid import UUID, uuid4

from pydantic import ValidationError

from clients.postgres_client import PostgresClient
from core.models import (
    BankDetailsInput, DocumentInput, DocumentsInput, DocumentType, KYCInput, KYCStatus,
    OnboardingStatus, OnboardingSubmission, ProductsInput, ProfileInput,
)
from core.services.merchant_service import MerchantService
from utils.timezone import now_utc

logger = logging.getLogger(__name__)

DEFAULT_SETTLEMENT_TYPE = "next_day"

DOCUMENT_TYPES = {
    "panCard": DocumentType.PAN_CARD,
    "aadhaarCard": DocumentType.AADHAAR_CARD,
    "cancelledCheque": DocumentType.CANCELLED_CHEQUE,
    "businessProof": DocumentType.BUSINESS_PROOF,
}

_PROFILE_COLUMNS = {
    "fullName": "full_name",
    "mobileNumber": "mobile_number",
    "email": "email",
    "businessName": "business_name",
    "panNumber": "pan_number",
    "aadhaarNumber": "aadhaar_number",
    "gstNumber": "gst_number",
}


def _values_placeholders(row_count: int, width: int) -> str:
    """'(%s, %s), (%s, %s)' for a multi-row INSERT."""
    row = "(" + ", ".join(["%s"] * width) + ")"
    return ", ".join([row] * row_count)

def document_rows(merchant_id: UUID, documents: dict[str, DocumentInput]) -> list[dict[str, Any]]:
    """
    Rows for merchant_documents.

    Entries with an unknown key, no storage path or a blank file name are skipped.
    """
    rows = []
    for key, document in documents.items():
        document_type = DOCUMENT_TYPES.get(key)
        file_name = document.file.name.strip() if document.file and document.file.name else ""

        if document_type is None or not document.path or not file_name:
            logger.warning(f"Skipping document '{key}' for merchant {merchant_id}: incomplete")
            continue

        rows.append({
            "merchant_id": merchant_id,
            "document_type": document_type.value,
            "file_name": file_name,
            "file_path": document.path,
            "file_size": document.file.size,
            "mime_type": document.file.type,
        })
    return rows


class OnboardingService:
    """Service for the merchant onboarding wizard and its final submission."""

    def __init__(self, postgres: PostgresClient, merchants: MerchantService):
        self.postgres = postgres
        self.merchants = merchants
        self._steps: dict[str, tuple[type, Callable]] = {
            "profile": (ProfileInput, self.save_profile),
            "bank-details": (BankDetailsInput, self.save_bank_details),
            "documents": (DocumentsInput, self._save_documents_step),
            "kyc": (KYCInput, self.save_kyc),
            "products": (ProductsInput, self.save_products),
        }

    def get_state(self, merchant_id: UUID) -> dict[str, Any]:
        """
        Everything saved so far for a merchant.

        Raises:
            ValueError: If merchant not found
        """
        profile = self.merchants.require(merchant_id)
        kyc = self.merchants.get_kyc(merchant_id)
        bank = self.merchants.get_bank_details(merchant_id)
        return {
            "profile": profile.model_dump(mode="json"),
            "bankDetails": bank.model_dump(mode="json") if bank else None,
            "documents": [d.model_dump(mode="json") for d in self.merchants.list_documents(merchant_id)],
            "kyc": kyc.model_dump(mode="json") if kyc else None,
            "products": [p.model_dump(mode="json") for p in self.merchants.list_products(merchant_id)],
        }

    def save_step(self, merchant_id: UUID, step: str, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Save one wizard step and move a pending merchant to in_progress.

        Raises:
            ValueError: Unknown step, invalid payload or merchant not found
        """
        if step not in self._steps:
            raise ValueError(f"Unknown onboarding step '{step}'. Expected one of: {', '.join(self._steps)}")

        model, save = self._steps[step]
        try:
            data = model.model_validate(payload)
        except ValidationError as e:
            raise ValueError(f"Invalid {step} payload: {e.errors(include_url=False)}") from e

        profile = self.merchants.require(merchant_id)
        save(merchant_id, data)

        if profile.onboarding_status == OnboardingStatus.PENDING:
            self.merchants.set_onboarding_status(merchant_id, OnboardingStatus.IN_PROGRESS)

        logger.info(f"Saved onboarding step '{step}' for merchant {merchant_id}")
        return self.get_state(merchant_id)

    def save_profile(self, merchant_id: UUID, data: ProfileInput) -> None:
        fields = {
            column: getattr(data, key)
            for key, column in _PROFILE_COLUMNS.items()
            if getattr(data, key) is not None
        }
        if fields:
            self.merchants.update(merchant_id, fields)

    def save_bank_details(self, merchant_id: UUID, data: BankDetailsInput) -> None:
        self.postgres.execute(
            """
            INSERT INTO merchant_bank_details (
                merchant_id, account_number, ifsc_code, bank_name, account_holder_name, updated_at
            ) VALUES (%s, %s, %s, %s, %s, %s)
            ON CONFLICT (merchant_id) DO UPDATE SET
                account_number = EXCLUDED.account_number,
                ifsc_code = EXCLUDED.ifsc_code,
                bank_name = EXCLUDED.bank_name,
                account_holder_name = EXCLUDED.account_holder_name,
                updated_at = EXCLUDED.updated_at
            """,
            (
                merchant_id, data.accountNumber, data.ifscCode.upper(),
                data.bankName, data.accountHolderName, now_utc()
            )
        )

    def save_documents(self, merchant_id: UUID, documents: dict[str, DocumentInput]) -> int:
        """
        Replace the merchant's document records.

        Nothing is deleted when no entry survives filtering.

        Returns:
            Number of document rows written
        """
        rows = document_rows(merchant_id, documents)
        if not rows:
            return 0

        now = now_utc()
        self.postgres.execute(
            "DELETE FROM merchant_documents WHERE merchant_id = %s",
            (merchant_id,)
        )
        params = []
        for row in rows:
            params.extend([
                uuid4(), row["merchant_id"], row["document_type"], row["file_name"],
                row["file_path"], row["file_size"], row["mime_type"], "uploaded", now
            ])
        self.postgres.execute(
            f"""
            INSERT INTO merchant_documents (
                id, merchant_id, document_type, file_name, file_path,
                file_size, mime_type, status, uploaded_at
            ) VALUES {_values_placeholders(len(rows), 9)}
            """,
            tuple(params)
        )
        return len(rows)

    def _save_documents_step(self, merchant_id: UUID, data: DocumentsInput) -> None:
        self.save_documents(merchant_id, data.documents)

    def save_kyc(self, merchant_id: UUID, data: KYCInput) -> None:
        """Upsert KYC capture results. Review status is reset to pending."""
        self.postgres.execute(
            """
            INSERT INTO merchant_kyc (
                merchant_id, video_kyc_completed, selfie_file_path, location_captured,
                latitude, longitude, kyc_status, updated_at
            ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            ON CONFLICT (merchant_id) DO UPDATE SET
                video_kyc_completed = EXCLUDED.video_kyc_completed,
                selfie_file_path = EXCLUDED.selfie_file_path,
                location_captured = EXCLUDED.location_captured,
                latitude = EXCLUDED.latitude,
                longitude = EXCLUDED.longitude,
                kyc_status = EXCLUDED.kyc_status,
                updated_at = EXCLUDED.updated_at
            """,
            (
                merchant_id, data.isVideoCompleted, data.selfieUrl, data.locationVerified,
                data.latitude, data.longitude, KYCStatus.PENDING.value, now_utc()
            )
        )

    def save_products(self, merchant_id: UUID, data: ProductsInput) -> int:
        """
        Replace the merchant's product selections.

        Returns:
            Number of products written (existing rows are kept when none are selected)
        """
        if not data.selectedProducts:
            return 0

        settlement_type = data.settlementType or DEFAULT_SETTLEMENT_TYPE
        self.postgres.execute(
            "DELETE FROM merchant_products WHERE merchant_id = %s",
            (merchant_id,)
        )
        params = []
        for product in data.selectedProducts:
            params.extend([uuid4(), merchant_id, product, settlement_type, "pending"])
        self.postgres.execute(
            f"""
            INSERT INTO merchant_products (id, merchant_id, product_type, settlement_type, status)
            VALUES {_values_placeholders(len(data.selectedProducts), 5)}
            """,
            tuple(params)
        )
        return len(data.selectedProducts)

    def submit(self, submission: OnboardingSubmission) -> dict[str, Any]:
        """
        Persist a complete onboarding bundle and mark it submitted.

        Steps: profile, bank details, documents, KYC, products, status.

        Raises:
            ValueError: If merchant not found
        """
        merchant_id = submission.merchantProfileId
        self.merchants.require(merchant_id)

        self.save_profile(merchant_id, submission)
        self.save_bank_details(merchant_id, submission.bankDetails)
        documents = self.save_documents(merchant_id, submission.documents)
        self.save_kyc(merchant_id, submission.kycData)
        products = self.save_products(merchant_id, ProductsInput(
            selectedProducts=submission.selectedProducts,
            settlementType=submission.settlementType,
        ))
        self.merchants.set_onboarding_status(merchant_id, OnboardingStatus.SUBMITTED)

        logger.info(
            f"Onboarding submitted for merchant {merchant_id} "
            f"({documents} documents, {products} products)"
        )
        return {
            "merchantProfileId": str(merchant_id),
            "onboardingStatus": OnboardingStatus.SUBMITTED.value,
            "documents": documents,
            "products": products,
        }

