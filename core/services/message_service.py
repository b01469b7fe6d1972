"""
Ticket chat messages.

Messages are appended by whoever is working the ticket (staff or merchant)
and read back oldest first.
"""

import logging
from uuid import UUID, uuid4

from clients.postgres_client import PostgresClient
from core.models import TicketMessage, TicketMessageCreate
from core.services.ticket_service import TicketService
from utils.user_context import get_current_user
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class MessageService:
    """Service for ticket message operations."""

    def __init__(self, postgres: PostgresClient, ticket_service: TicketService):
        self.postgres = postgres
        self.ticket_service = ticket_service

    def _require_ticket(self, ticket_id: UUID) -> None:
        if self.ticket_service.get_by_id(ticket_id) is None:
            raise ValueError(f"Ticket {ticket_id} not found")

    def list_for_ticket(self, ticket_id: UUID) -> list[TicketMessage]:
        """
        Raises:
            ValueError: If ticket not found
        """
        self._require_ticket(ticket_id)

        rows = self.postgres.execute(
            """
            SELECT * FROM ticket_messages
            WHERE ticket_id = %s
            ORDER BY created_at ASC
            """,
            (ticket_id,)
        )
        return [TicketMessage.model_validate(row) for row in rows]

    def send(self, ticket_id: UUID, data: TicketMessageCreate) -> TicketMessage:
        """
        Append a message from the current user.

        Raises:
            ValueError: If ticket not found
        """
        self._require_ticket(ticket_id)
        user = get_current_user()

        row = self.postgres.execute_returning(
            """
            INSERT INTO ticket_messages (id, ticket_id, sender_id, sender_role, message, created_at)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING *
            """,
            (uuid4(), ticket_id, user.id, user.role, data.message, now_utc())
        )[0]

        message = TicketMessage.model_validate(row)
        logger.info(f"Message {message.id} posted on ticket {ticket_id} by {user.role}")
        return message
