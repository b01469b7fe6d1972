"""Core domain models."""

from core.models.ticket import (
    Ticket, TicketCreate, MerchantTicketCreate, TicketAssign, TicketStatusUpdate,
    TicketStatus, TicketPriority, TicketModule, TicketPage,
    TicketMessage, TicketMessageCreate,
)
from core.models.merchant import (
    OnboardingStatus, KYCStatus, KYCDecision, ApprovalStatus, EntityType, DocumentType,
    MerchantProfile, MerchantKYC, MerchantDocument, MerchantBankDetails, MerchantProduct,
    BankDetailsInput, DocumentInput, DocumentsInput, UploadedFile, KYCInput, ProfileInput, ProductsInput,
    OnboardingSubmission, KYCReviewRequest, MerchantReviewRequest, BankDecisionRequest,
    CreateMerchantRequest, AssignProductRequest,
)
from core.models.invitation import (
    InvitationStatus, SendChannel, MerchantInvitation, InviteContact, BulkInviteRequest,
    InviteResult,
)

__all__ = [
    # Ticket
    "Ticket", "TicketCreate", "MerchantTicketCreate", "TicketAssign", "TicketStatusUpdate",
    "TicketStatus", "TicketPriority", "TicketModule", "TicketPage",
    "TicketMessage", "TicketMessageCreate",
    # Merchant
    "OnboardingStatus", "KYCStatus", "KYCDecision", "ApprovalStatus", "EntityType", "DocumentType",
    "MerchantProfile", "MerchantKYC", "MerchantDocument", "MerchantBankDetails", "MerchantProduct",
    "BankDetailsInput", "DocumentInput", "DocumentsInput", "UploadedFile", "KYCInput", "ProfileInput", "ProductsInput",
    "OnboardingSubmission", "KYCReviewRequest", "MerchantReviewRequest", "BankDecisionRequest",
    "CreateMerchantRequest", "AssignProductRequest",
    # Invitation
    "InvitationStatus", "SendChannel", "MerchantInvitation", "InviteContact", "BulkInviteRequest",
    "InviteResult",
]
