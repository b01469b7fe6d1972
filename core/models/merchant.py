"""Merchant onboarding domain models: profile, KYC, bank, documents, products."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class OnboardingStatus(str, Enum):
    """Merchant progress from signup to bank approval."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    VERIFIED = "verified"
    PENDING_BANK_APPROVAL = "pending_bank_approval"
    APPROVED = "approved"
    REJECTED = "rejected"
    BANK_REJECTED = "bank_rejected"


class KYCStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class KYCDecision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class ApprovalStatus(str, Enum):
    """Admin merchant-review outcome."""

    APPROVED = "approved"
    REJECTED = "rejected"


class EntityType(str, Enum):
    PROPRIETORSHIP = "proprietorship"
    PARTNERSHIP = "partnership"
    PVT_LTD_LLP = "pvt_ltd_llp"
    GOVERNMENT_PSU = "government_psu"


class DocumentType(str, Enum):
    PAN_CARD = "pan_card"
    AADHAAR_CARD = "aadhaar_card"
    CANCELLED_CHEQUE = "cancelled_cheque"
    BUSINESS_PROOF = "business_proof"


class MerchantProfile(BaseModel):
    """Row of merchant_profiles."""

    id: UUID
    user_id: UUID | None = None
    full_name: str | None = None
    mobile_number: str | None = None
    email: str | None = None
    business_name: str | None = None
    entity_type: EntityType | None = None
    pan_number: str | None = None
    aadhaar_number: str | None = None
    gst_number: str | None = None
    distributor_id: UUID | None = None
    application_id: str | None = None
    onboarding_status: OnboardingStatus = OnboardingStatus.PENDING
    upi_vpa: str | None = None
    upi_qr_string: str | None = None
    rejection_reason: str | None = None
    approval_status: ApprovalStatus | None = None
    review_notes: str | None = None
    reviewed_by: UUID | None = None
    reviewed_at: datetime | None = None
    bank_decision_notes: str | None = None
    bank_approved_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class MerchantKYC(BaseModel):
    """Row of merchant_kyc (one per merchant)."""

    merchant_id: UUID
    video_kyc_completed: bool = False
    selfie_file_path: str | None = None
    location_captured: bool = False
    latitude: float | None = None
    longitude: float | None = None
    kyc_status: KYCStatus = KYCStatus.PENDING
    review_notes: str | None = None
    reviewed_by_admin: UUID | None = None
    verified_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class MerchantDocument(BaseModel):
    id: UUID | None = None
    merchant_id: UUID
    document_type: DocumentType
    file_name: str
    file_path: str
    file_size: int | None = None
    mime_type: str | None = None
    status: str = "uploaded"
    uploaded_at: datetime | None = None

    model_config = {"from_attributes": True}


class MerchantBankDetails(BaseModel):
    """Row of merchant_bank_details (one per merchant)."""

    merchant_id: UUID
    account_number: str
    ifsc_code: str
    bank_name: str | None = None
    account_holder_name: str | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class MerchantProduct(BaseModel):
    id: UUID | None = None
    merchant_id: UUID
    product_type: str
    settlement_type: str = "next_day"
    status: str = "pending"

    model_config = {"from_attributes": True}


# =============================================================================
# ONBOARDING INPUT (camelCase, as posted by the web app)
# =============================================================================


class BankDetailsInput(BaseModel):
    accountNumber: str = Field(..., min_length=1)
    ifscCode: str = Field(..., min_length=1)
    bankName: str | None = None
    accountHolderName: str | None = None


class UploadedFile(BaseModel):
    name: str | None = None
    size: int | None = None
    type: str | None = None


class DocumentInput(BaseModel):
    """A file already uploaded to object storage."""

    path: str | None = None
    file: UploadedFile | None = None


class DocumentsInput(BaseModel):
    documents: dict[str, DocumentInput] = Field(default_factory=dict)


class KYCInput(BaseModel):
    isVideoCompleted: bool = False
    selfieUrl: str | None = None
    locationVerified: bool = False
    latitude: float | None = None
    longitude: float | None = None


class ProfileInput(BaseModel):
    fullName: str | None = None
    mobileNumber: str | None = None
    email: EmailStr | None = None
    businessName: str | None = None
    panNumber: str | None = None
    aadhaarNumber: str | None = None
    gstNumber: str | None = None


class ProductsInput(BaseModel):
    selectedProducts: list[str] = Field(default_factory=list)
    settlementType: str | None = None


class OnboardingSubmission(ProfileInput):
    """Full bundle for one-shot submission."""

    merchantProfileId: UUID
    bankDetails: BankDetailsInput
    documents: dict[str, DocumentInput] = Field(default_factory=dict)
    kycData: KYCInput = Field(default_factory=KYCInput)
    selectedProducts: list[str] = Field(default_factory=list)
    settlementType: str | None = None


class KYCReviewRequest(BaseModel):
    """Body of POST /api/support/kyc/review. Checked by the service, not here."""

    merchantId: UUID | None = None
    decision: str | None = None
    reviewNotes: str | None = None


class MerchantReviewRequest(BaseModel):
    merchantId: UUID
    status: ApprovalStatus
    notes: str | None = None


class BankDecisionRequest(BaseModel):
    decision: str
    notes: str | None = None


class CreateMerchantRequest(BaseModel):
    email: EmailStr
    password: str
    fullName: str = Field(..., min_length=1)
    mobileNumber: str = Field(..., min_length=1)
    distributorId: UUID
    businessName: str | None = None
    entityType: str | None = None
    panNumber: str | None = None
    gstNumber: str | None = None


class AssignProductRequest(BaseModel):
    productType: str = Field(..., min_length=1)
    settlementType: str | None = None
    assignTo: str = "merchant"
    merchantId: UUID | None = None
