"""Ticket routes: staff desk, public merchant tickets, merchant review and chat."""

from uuid import UUID

from fastapi import APIRouter, Query, Request

from api.base import success_response, created_response
from auth.permissions import require_roles
from auth.types import ADMIN_ROLES, Role
from core.models import (
    MerchantReviewRequest,
    MerchantTicketCreate,
    TicketAssign,
    TicketCreate,
    TicketMessageCreate,
    TicketModule,
    TicketStatus,
    TicketStatusUpdate,
)
from utils.user_context import get_current_user

REVIEW_READ_ROLES = ADMIN_ROLES + (Role.SUPPORT.value,)


def create_tickets_router(services: dict) -> APIRouter:
    """Ticket router, mounted at /api/tickets."""
    router = APIRouter(tags=["tickets"])

    ticket_svc = services["ticket"]
    message_svc = services["message"]
    review_svc = services["merchant_review"]

    # -------------------------------------------------------------------------
    # Staff desk
    # -------------------------------------------------------------------------

    @router.get("")
    async def list_tickets(
        request: Request,
        status: TicketStatus | None = Query(None),
        module: TicketModule | None = Query(None),
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
    ):
        """Admins see every ticket, other roles only tickets assigned to them."""
        result = ticket_svc.list_for_user(get_current_user(), status, module, page, limit)
        return success_response(result.model_dump(mode="json"))

    @router.post("")
    async def create_ticket(request: Request, body: TicketCreate):
        ticket = ticket_svc.create(body)
        return created_response(ticket.model_dump(mode="json"))

    @router.post("/assign")
    async def assign_ticket(request: Request, body: TicketAssign):
        require_roles(*ADMIN_ROLES)
        ticket = ticket_svc.assign(body.ticketId, body.assignedTo)
        return success_response(ticket.model_dump(mode="json"))

    @router.post("/status")
    async def update_status(request: Request, body: TicketStatusUpdate):
        ticket = ticket_svc.update_status(body.ticketId, body.status)
        return success_response(ticket.model_dump(mode="json"))

    @router.get("/stats")
    async def ticket_stats(request: Request, module: TicketModule | None = Query(None)):
        require_roles(*ADMIN_ROLES)
        return success_response(ticket_svc.stats(module))

    # -------------------------------------------------------------------------
    # Public merchant tickets
    # -------------------------------------------------------------------------

    @router.post("/merchant")
    async def create_merchant_ticket(request: Request, body: MerchantTicketCreate):
        ticket = ticket_svc.create_merchant_ticket(body)
        return created_response(ticket.model_dump(mode="json"))

    @router.get("/merchant/{merchant_id}")
    async def merchant_tickets(request: Request, merchant_id: UUID):
        tickets = ticket_svc.list_for_merchant(merchant_id)
        return success_response([t.model_dump(mode="json") for t in tickets])

    # -------------------------------------------------------------------------
    # Merchant review
    # -------------------------------------------------------------------------

    @router.post("/merchant-review")
    async def review_merchant(request: Request, body: MerchantReviewRequest):
        require_roles(*ADMIN_ROLES)
        result = review_svc.review(body.merchantId, body.status, body.notes)
        return success_response(result)

    @router.get("/merchant-review/{merchant_id}")
    async def merchant_review_data(request: Request, merchant_id: UUID):
        caller = require_roles(*REVIEW_READ_ROLES)
        return success_response(review_svc.get_review_data(merchant_id, caller))

    @router.get("/kyc-list")
    async def kyc_list(request: Request):
        require_roles(*REVIEW_READ_ROLES)
        return success_response(review_svc.kyc_list())

    @router.get("/support/assigned-kyc")
    async def assigned_kyc(request: Request):
        caller = require_roles(Role.SUPPORT.value)
        return success_response(review_svc.assigned_kyc(caller.id))

    # -------------------------------------------------------------------------
    # Ticket chat (registered last so the static paths above win)
    # -------------------------------------------------------------------------

    @router.get("/{ticket_id}/messages")
    async def list_messages(request: Request, ticket_id: UUID):
        messages = message_svc.list_for_ticket(ticket_id)
        return success_response([m.model_dump(mode="json") for m in messages])

    @router.post("/{ticket_id}/messages")
    async def send_message(request: Request, ticket_id: UUID, body: TicketMessageCreate):
        message = message_svc.send(ticket_id, body)
        return created_response(message.model_dump(mode="json"))

    return router
