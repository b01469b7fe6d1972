"""
Ticket service for the support desk.

Handles creation (staff and public merchant), role-scoped listing, stats,
assignment and the guarded status workflow. Tickets are never deleted.
"""

import logging
import math
from uuid import UUID, uuid4

from auth.types import ADMIN_ROLES
from clients.postgres_client import PostgresClient
from core.event_bus import EventBus
from core.events import TicketCreated, TicketStatusChanged
from core.models import (
    Ticket, TicketCreate, MerchantTicketCreate, TicketStatus, TicketModule, TicketPage,
)
from core.transitions import validate_transition
from utils.user_context import CurrentUser, get_current_user_id
from utils.timezone import now_utc

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class TicketService:
    """Service for ticket operations."""

    def __init__(self, postgres: PostgresClient, event_bus: EventBus | None = None):
        self.postgres = postgres
        self.event_bus = event_bus

    def _publish(self, event) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event)

    def _insert(
        self,
        module: TicketModule,
        title: str,
        description: str,
        priority: str,
        reference_id: str | None,
        created_by: UUID,
    ) -> Ticket:
        now = now_utc()
        row = self.postgres.execute_returning(
            """
            INSERT INTO tickets (
                id, module, reference_id, title, description,
                priority, status, created_by, assigned_to,
                created_at, updated_at
            ) VALUES (
                %s, %s, %s, %s, %s,
                %s, %s, %s, NULL,
                %s, %s
            )
            RETURNING *
            """,
            (
                uuid4(), module.value, reference_id, title, description,
                priority, TicketStatus.OPEN.value, created_by,
                now, now
            )
        )[0]

        ticket = Ticket.model_validate(row)
        logger.info(f"Ticket {ticket.id} created in {ticket.module.value} by {created_by}")
        self._publish(TicketCreated.create(ticket))
        return ticket

    def create(self, data: TicketCreate) -> Ticket:
        """
        Create a ticket attributed to the current (staff) user.

        Returns:
            Created ticket in OPEN status, unassigned
        """
        return self._insert(
            data.module,
            data.title,
            data.description,
            data.priority.value,
            data.reference_id,
            get_current_user_id(),
        )

    def create_merchant_ticket(self, data: MerchantTicketCreate) -> Ticket:
        """Public ticket raised by a merchant. Always filed under merchant_onboarding."""
        return self._insert(
            TicketModule.MERCHANT_ONBOARDING,
            data.title,
            data.description,
            data.priority.value,
            data.reference_id,
            data.merchant_id,
        )

    def get_by_id(self, ticket_id: UUID) -> Ticket | None:
        row = self.postgres.execute_single(
            "SELECT * FROM tickets WHERE id = %s",
            (ticket_id,)
        )

        if row is None:
            return None

        return Ticket.model_validate(row)

    def list_for_user(
        self,
        user: CurrentUser,
        status: TicketStatus | None = None,
        module: TicketModule | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> TicketPage:
        """
        Paginated ticket list, newest first.

        Admins see every ticket; everyone else only the tickets assigned to them.

        Args:
            user: Caller
            status: Optional status filter
            module: Optional module filter
            page: 1-based page number
            limit: Page size (capped at MAX_PAGE_SIZE)
        """
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)

        conditions = []
        params: list = []

        if not user.has_role(*ADMIN_ROLES):
            conditions.append("assigned_to = %s")
            params.append(user.id)

        if status is not None:
            conditions.append("status = %s")
            params.append(TicketStatus(status).value)

        if module is not None:
            conditions.append("module = %s")
            params.append(TicketModule(module).value)

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        total = self.postgres.execute_scalar(
            f"SELECT COUNT(*) FROM tickets {where}",
            tuple(params)
        ) or 0

        rows = self.postgres.execute(
            f"""
            SELECT * FROM tickets
            {where}
            ORDER BY created_at DESC
            LIMIT %s OFFSET %s
            """,
            tuple(params) + (limit, (page - 1) * limit)
        )

        return TicketPage(
            total=total,
            page=page,
            pages=math.ceil(total / limit),
            tickets=[Ticket.model_validate(row) for row in rows],
        )

    def list_for_merchant(self, merchant_user_id: UUID) -> list[Ticket]:
        """Tickets a merchant raised, newest first."""
        rows = self.postgres.execute(
            """
            SELECT * FROM tickets
            WHERE created_by = %s
            ORDER BY created_at DESC
            """,
            (merchant_user_id,)
        )
        return [Ticket.model_validate(row) for row in rows]

    def stats(self, module: TicketModule | None = None) -> dict[str, int]:
        """
        Count of tickets per status plus total.

        Every status is present in the result, zero when no ticket has it.
        """
        if module is not None:
            rows = self.postgres.execute(
                "SELECT status, COUNT(*) AS count FROM tickets WHERE module = %s GROUP BY status",
                (TicketModule(module).value,)
            )
        else:
            rows = self.postgres.execute(
                "SELECT status, COUNT(*) AS count FROM tickets GROUP BY status"
            )

        stats = {status.value: 0 for status in TicketStatus}
        for row in rows:
            stats[row["status"]] = int(row["count"])
        stats["total"] = sum(stats.values())
        return stats

    def assign(self, ticket_id: UUID, assigned_to: UUID) -> Ticket:
        """
        Assign a ticket and force its status to ASSIGNED.

        Not subject to the transition table: re-assigning an in-flight
        ticket moves it back to ASSIGNED.

        Raises:
            ValueError: If ticket not found
        """
        rows = self.postgres.execute_returning(
            """
            UPDATE tickets
            SET assigned_to = %s, status = %s, updated_at = %s
            WHERE id = %s
            RETURNING *
            """,
            (assigned_to, TicketStatus.ASSIGNED.value, now_utc(), ticket_id)
        )

        if not rows:
            raise ValueError(f"Ticket {ticket_id} not found")

        logger.info(f"Ticket {ticket_id} assigned to {assigned_to}")
        return Ticket.model_validate(rows[0])

    def update_status(self, ticket_id: UUID, status: TicketStatus) -> Ticket:
        """
        Move a ticket one step along the workflow.

        Raises:
            ValueError: If ticket not found
            InvalidTransitionError: If status is not reachable from the current status
        """
        current = self.get_by_id(ticket_id)
        if current is None:
            raise ValueError(f"Ticket {ticket_id} not found")

        requested = validate_transition(current.status, status)

        rows = self.postgres.execute_returning(
            """
            UPDATE tickets
            SET status = %s, updated_at = %s
            WHERE id = %s
            RETURNING *
            """,
            (requested.value, now_utc(), ticket_id)
        )

        if not rows:
            raise ValueError(f"Ticket {ticket_id} not found")

        ticket = Ticket.model_validate(rows[0])
        logger.info(f"Ticket {ticket_id} moved {current.status.value} -> {ticket.status.value}")
        self._publish(TicketStatusChanged.create(ticket, current.status.value))
        return ticket

    def set_status_direct(self, ticket_id: UUID, status: TicketStatus) -> Ticket:
        """Write a status without the workflow guard. Used by merchant review only."""
        rows = self.postgres.execute_returning(
            """
            UPDATE tickets
            SET status = %s, updated_at = %s
            WHERE id = %s
            RETURNING *
            """,
            (TicketStatus(status).value, now_utc(), ticket_id)
        )

        if not rows:
            raise ValueError(f"Ticket {ticket_id} not found")

        return Ticket.model_validate(rows[0])

    def latest_onboarding_ticket(self, merchant_user_id: UUID) -> Ticket | None:
        """Most recent merchant_onboarding ticket raised by the merchant."""
        row = self.postgres.execute_single(
            """
            SELECT * FROM tickets
            WHERE created_by = %s AND module = %s
            ORDER BY created_at DESC
            LIMIT 1
            """,
            (merchant_user_id, TicketModule.MERCHANT_ONBOARDING.value)
        )
        return Ticket.model_validate(row) if row else None

    def has_assigned_onboarding_ticket(self, merchant_user_id: UUID, assignee_id: UUID) -> bool:
        row = self.postgres.execute_single(
            """
            SELECT id FROM tickets
            WHERE created_by = %s AND assigned_to = %s AND module = %s
            LIMIT 1
            """,
            (merchant_user_id, assignee_id, TicketModule.MERCHANT_ONBOARDING.value)
        )
        return row is not None

    def assigned_onboarding_merchants(self, assignee_id: UUID) -> list[UUID]:
        """User ids of merchants whose onboarding tickets are assigned to assignee_id."""
        rows = self.postgres.execute(
            """
            SELECT DISTINCT created_by FROM tickets
            WHERE module = %s AND assigned_to = %s
            """,
            (TicketModule.MERCHANT_ONBOARDING.value, assignee_id)
        )
        return [row["created_by"] for row in rows]
