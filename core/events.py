"""
Domain events for the merchant platform.

Immutable event objects describing state changes. Services publish what
happened; handlers (notifications) react without the publisher knowing
who is listening.

Event Categories:
- TicketEvent: ticket lifecycle (create, status change)
- MerchantEvent: merchant review outcome

Events carry the full domain object so handlers don't need to re-fetch state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from utils.timezone import now_utc


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """Base class for all domain events."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=now_utc)


# =============================================================================
# TICKET EVENTS
# =============================================================================


@dataclass(frozen=True)
class TicketEvent(DomainEvent):
    """Events related to ticket lifecycle."""
    pass


@dataclass(frozen=True)
class TicketCreated(TicketEvent):
    """A ticket was raised, in OPEN status."""
    ticket: Any = None  # Ticket, using Any to avoid circular import

    @classmethod
    def create(cls, ticket: Any) -> "TicketCreated":
        return cls(ticket=ticket)


@dataclass(frozen=True)
class TicketStatusChanged(TicketEvent):
    """Ticket moved along the transition table."""
    ticket: Any = None
    previous_status: str | None = None

    @classmethod
    def create(cls, ticket: Any, previous_status: str) -> "TicketStatusChanged":
        return cls(ticket=ticket, previous_status=previous_status)


# =============================================================================
# MERCHANT EVENTS
# =============================================================================


@dataclass(frozen=True)
class MerchantEvent(DomainEvent):
    """Events related to merchant accounts."""
    pass


@dataclass(frozen=True)
class MerchantReviewed(MerchantEvent):
    """Admin approved or rejected a merchant."""
    merchant: Any = None  # MerchantProfile
    status: str = ""
    notes: str | None = None

    @classmethod
    def create(cls, merchant: Any, status: str, notes: str | None = None) -> "MerchantReviewed":
        return cls(merchant=merchant, status=status, notes=notes)
