"""
Handlers for TicketCreated and TicketStatusChanged events.

Email the merchant who raised the ticket. Tickets raised by staff have no
merchant profile behind created_by and are skipped.
"""

import logging
from typing import Callable

from core.events import TicketCreated, TicketStatusChanged
from core.handlers import email_templates

logger = logging.getLogger(__name__)

TICKET_CREATED_SUBJECT = "Your Support Ticket Has Been Created - SabbPe"
TICKET_STATUS_SUBJECT = "Your Ticket Status Has Been Updated"


def _merchant_for(merchant_service, ticket):
    merchant = merchant_service.get_by_user_id(ticket.created_by)
    if merchant is None or not merchant.email:
        logger.info(f"No merchant email for ticket {ticket.id}, skipping notification")
        return None
    return merchant


def handle_ticket_created(email_client, merchant_service) -> Callable:
    """
    Factory that returns a TicketCreated handler.

    Args:
        email_client: EmailClient instance
        merchant_service: MerchantService instance

    Returns:
        Handler that emails a confirmation to the merchant
    """

    def handler(event: TicketCreated):
        ticket = event.ticket
        merchant = _merchant_for(merchant_service, ticket)
        if merchant is None:
            return

        email_client.send_email(
            merchant.email,
            TICKET_CREATED_SUBJECT,
            email_templates.ticket_created(merchant.full_name, str(ticket.id), ticket.title),
        )
        logger.info(f"Ticket confirmation for {ticket.id} sent to {merchant.email}")

    return handler


def handle_ticket_status_changed(email_client, merchant_service) -> Callable:
    """Factory that returns a TicketStatusChanged handler (merchant email)."""

    def handler(event: TicketStatusChanged):
        ticket = event.ticket
        merchant = _merchant_for(merchant_service, ticket)
        if merchant is None:
            return

        email_client.send_email(
            merchant.email,
            TICKET_STATUS_SUBJECT,
            email_templates.ticket_status_changed(
                merchant.full_name, ticket.title, ticket.status.value, event.occurred_at
            ),
        )
        logger.info(f"Status update for ticket {ticket.id} sent to {merchant.email}")

    return handler
