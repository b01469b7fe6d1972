"""Tests for TicketService."""

from unittest.mock import Mock
from uuid import uuid4

import pytest

from core.event_bus import EventBus
from core.events import TicketCreated, TicketStatusChanged
from core.models import (
    MerchantTicketCreate,
    TicketCreate,
    TicketModule,
    TicketStatus,
)
from core.services.ticket_service import TicketService
from core.transitions import InvalidTransitionError
from tests.factories import ADMIN_ID, MERCHANT_USER_ID, SUPPORT_ID, ticket_row
from utils.timezone import now_utc


@pytest.fixture
def event_bus():
    return Mock(spec=EventBus)


@pytest.fixture
def ticket_service(db, event_bus):
    return TicketService(db, event_bus)


class TestCreate:
    """Ticket creation, staff and public."""

    def test_staff_ticket_attributed_to_caller(self, ticket_service, db, as_admin):
        db.execute_returning.return_value = [ticket_row(created_by=ADMIN_ID, module="payments")]

        ticket = ticket_service.create(TicketCreate(
            module=TicketModule.PAYMENTS, title="Refund", description="Refund missing",
        ))

        params = db.execute_returning.call_args.args[1]
        assert params[1] == "payments"
        assert params[6] == TicketStatus.OPEN.value
        assert params[7] == ADMIN_ID
        assert ticket.created_by == ADMIN_ID

    def test_merchant_ticket_filed_under_onboarding(self, ticket_service, db):
        db.execute_returning.return_value = [ticket_row()]

        ticket_service.create_merchant_ticket(MerchantTicketCreate(
            merchant_id=MERCHANT_USER_ID, title="Stuck", description="Cannot submit",
        ))

        params = db.execute_returning.call_args.args[1]
        assert params[1] == TicketModule.MERCHANT_ONBOARDING.value
        assert params[7] == MERCHANT_USER_ID

    def test_new_ticket_is_open_and_unassigned(self, ticket_service, db):
        db.execute_returning.return_value = [ticket_row()]

        ticket = ticket_service.create_merchant_ticket(MerchantTicketCreate(
            merchant_id=MERCHANT_USER_ID, title="Stuck", description="Cannot submit",
        ))

        assert ticket.status == TicketStatus.OPEN
        assert ticket.assigned_to is None

    def test_publishes_ticket_created(self, ticket_service, db, event_bus):
        db.execute_returning.return_value = [ticket_row()]

        ticket = ticket_service.create_merchant_ticket(MerchantTicketCreate(
            merchant_id=MERCHANT_USER_ID, title="Stuck", description="Cannot submit",
        ))

        event = event_bus.publish.call_args.args[0]
        assert isinstance(event, TicketCreated)
        assert event.ticket == ticket

    def test_works_without_event_bus(self, db):
        db.execute_returning.return_value = [ticket_row()]

        TicketService(db).create_merchant_ticket(MerchantTicketCreate(
            merchant_id=MERCHANT_USER_ID, title="Stuck", description="Cannot submit",
        ))


class TestListForUser:
    """Role-scoped, filtered, paginated listing."""

    def test_admin_sees_all(self, ticket_service, db, admin_user):
        db.execute_scalar.return_value = 1
        db.execute.return_value = [ticket_row()]

        page = ticket_service.list_for_user(admin_user)

        count_query = db.execute_scalar.call_args.args[0]
        assert "assigned_to" not in count_query
        assert page.total == 1
        assert len(page.tickets) == 1

    def test_support_sees_only_assigned(self, ticket_service, db, support_user):
        db.execute_scalar.return_value = 0
        db.execute.return_value = []

        ticket_service.list_for_user(support_user)

        query, params = db.execute_scalar.call_args.args
        assert "assigned_to = %s" in query
        assert params == (SUPPORT_ID,)

    def test_filters_and_pagination(self, ticket_service, db, admin_user):
        db.execute_scalar.return_value = 25
        db.execute.return_value = []

        page = ticket_service.list_for_user(
            admin_user, status=TicketStatus.OPEN, module=TicketModule.KYC, page=3, limit=10,
        )

        query, params = db.execute.call_args.args
        assert "status = %s" in query and "module = %s" in query
        assert params == ("open", "kyc", 10, 20)
        assert page.pages == 3
        assert page.page == 3

    def test_limit_capped(self, ticket_service, db, admin_user):
        db.execute_scalar.return_value = 0
        db.execute.return_value = []

        ticket_service.list_for_user(admin_user, limit=1000)

        assert db.execute.call_args.args[1][-2] == 100

    def test_empty_result_has_zero_pages(self, ticket_service, db, admin_user):
        db.execute_scalar.return_value = None
        db.execute.return_value = []

        page = ticket_service.list_for_user(admin_user)

        assert page.total == 0
        assert page.pages == 0


class TestStats:

    def test_every_status_present(self, ticket_service, db):
        db.execute.return_value = [
            {"status": "open", "count": 3},
            {"status": "closed", "count": 2},
        ]

        stats = ticket_service.stats()

        assert stats["open"] == 3
        assert stats["closed"] == 2
        assert stats["in_progress"] == 0
        assert stats["waiting_customer"] == 0
        assert stats["total"] == 5

    def test_module_filter(self, ticket_service, db):
        db.execute.return_value = []

        ticket_service.stats(TicketModule.SETTLEMENT)

        assert db.execute.call_args.args[1] == ("settlement",)


class TestAssign:
    """Assignment bypasses the transition guard."""

    @pytest.mark.parametrize("previous", ["open", "in_progress", "resolved", "closed"])
    def test_always_forces_assigned(self, ticket_service, db, previous):
        ticket_id = uuid4()
        db.execute_returning.return_value = [
            ticket_row(id=ticket_id, status="assigned", assigned_to=SUPPORT_ID)
        ]

        ticket = ticket_service.assign(ticket_id, SUPPORT_ID)

        params = db.execute_returning.call_args.args[1]
        assert params[0] == SUPPORT_ID
        assert params[1] == TicketStatus.ASSIGNED.value
        assert ticket.status == TicketStatus.ASSIGNED
        assert ticket.assigned_to == SUPPORT_ID

    def test_missing_ticket(self, ticket_service, db):
        db.execute_returning.return_value = []

        with pytest.raises(ValueError, match="not found"):
            ticket_service.assign(uuid4(), SUPPORT_ID)


class TestUpdateStatus:
    """Guarded workflow moves."""

    def test_valid_transition_updates_and_publishes(self, ticket_service, db, event_bus):
        ticket_id = uuid4()
        before = ticket_row(id=ticket_id, status="resolved")
        after = ticket_row(id=ticket_id, status="closed", updated_at=now_utc())
        db.execute_single.return_value = before
        db.execute_returning.return_value = [after]

        ticket = ticket_service.update_status(ticket_id, TicketStatus.CLOSED)

        assert ticket.status == TicketStatus.CLOSED
        assert ticket.updated_at >= before["updated_at"]
        event = event_bus.publish.call_args.args[0]
        assert isinstance(event, TicketStatusChanged)
        assert event.previous_status == "resolved"

    def test_invalid_transition_writes_nothing(self, ticket_service, db, event_bus):
        db.execute_single.return_value = ticket_row(status="open")

        with pytest.raises(InvalidTransitionError, match="from open to in_progress"):
            ticket_service.update_status(uuid4(), TicketStatus.IN_PROGRESS)

        db.execute_returning.assert_not_called()
        event_bus.publish.assert_not_called()

    def test_closed_rejects_everything(self, ticket_service, db):
        db.execute_single.return_value = ticket_row(status="closed")

        with pytest.raises(InvalidTransitionError):
            ticket_service.update_status(uuid4(), TicketStatus.OPEN)

    def test_missing_ticket(self, ticket_service, db):
        db.execute_single.return_value = None

        with pytest.raises(ValueError, match="not found"):
            ticket_service.update_status(uuid4(), TicketStatus.ASSIGNED)


class TestOnboardingTicketLookups:

    def test_set_status_direct_skips_guard(self, ticket_service, db):
        ticket_id = uuid4()
        db.execute_returning.return_value = [ticket_row(id=ticket_id, status="waiting_customer")]

        ticket = ticket_service.set_status_direct(ticket_id, TicketStatus.WAITING_CUSTOMER)

        assert ticket.status == TicketStatus.WAITING_CUSTOMER
        db.execute_single.assert_not_called()

    def test_latest_onboarding_ticket_none(self, ticket_service, db):
        db.execute_single.return_value = None

        assert ticket_service.latest_onboarding_ticket(MERCHANT_USER_ID) is None

    def test_has_assigned_onboarding_ticket(self, ticket_service, db):
        db.execute_single.return_value = {"id": uuid4()}

        assert ticket_service.has_assigned_onboarding_ticket(MERCHANT_USER_ID, SUPPORT_ID)
        assert db.execute_single.call_args.args[1] == (
            MERCHANT_USER_ID, SUPPORT_ID, TicketModule.MERCHANT_ONBOARDING.value,
        )

    def test_assigned_onboarding_merchants(self, ticket_service, db):
        db.execute.return_value = [{"created_by": MERCHANT_USER_ID}]

        assert ticket_service.assigned_onboarding_merchants(SUPPORT_ID) == [MERCHANT_USER_ID]
