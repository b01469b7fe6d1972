"""Support ticket domain models."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class TicketStatus(str, Enum):
    """Ticket lifecycle status. Edges live in core.transitions."""

    OPEN = "open"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    WAITING_CUSTOMER = "waiting_customer"
    CLOSED = "closed"


class TicketPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TicketModule(str, Enum):
    """Product area a ticket is filed against."""

    MERCHANT_ONBOARDING = "merchant_onboarding"
    PAYMENTS = "payments"
    AUTHENTICATION = "authentication"
    INVENTORY = "inventory"
    ORDERS = "orders"
    REPORTS = "reports"
    KYC = "kyc"
    SETTLEMENT = "settlement"
    CUSTOMER_PORTAL = "customer_portal"


class TicketCreate(BaseModel):
    """Data required for a staff-created ticket."""

    module: TicketModule
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    priority: TicketPriority = TicketPriority.MEDIUM
    reference_id: str | None = None


class MerchantTicketCreate(BaseModel):
    """Public ticket raised by a merchant from the onboarding app."""

    merchant_id: UUID
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    priority: TicketPriority = TicketPriority.MEDIUM
    reference_id: str | None = None


class TicketAssign(BaseModel):
    ticketId: UUID
    assignedTo: UUID


class TicketStatusUpdate(BaseModel):
    ticketId: UUID
    status: TicketStatus


class Ticket(BaseModel):
    """Full ticket entity as stored."""

    id: UUID
    module: TicketModule
    reference_id: str | None = None
    title: str
    description: str
    priority: TicketPriority
    status: TicketStatus
    created_by: UUID
    assigned_to: UUID | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @property
    def is_closed(self) -> bool:
        return self.status == TicketStatus.CLOSED


class TicketPage(BaseModel):
    """One page of the role-scoped ticket list."""

    total: int
    page: int
    pages: int
    tickets: list[Ticket]


class TicketMessageCreate(BaseModel):
    message: str = Field(..., min_length=1)


class TicketMessage(BaseModel):
    """Chat message on a ticket."""

    id: UUID
    ticket_id: UUID
    sender_id: UUID
    sender_role: str
    message: str
    created_at: datetime

    model_config = {"from_attributes": True}
