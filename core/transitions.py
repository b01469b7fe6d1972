"""
Ticket status transition guard.

Tickets move forward one step at a time along
open -> assigned -> in_progress -> resolved -> closed. Closed is terminal.
waiting_customer has no edges here; merchant review writes it directly.
"""

from core.models.ticket import TicketStatus


ALLOWED_TRANSITIONS: dict[TicketStatus, frozenset[TicketStatus]] = {
    TicketStatus.OPEN: frozenset({TicketStatus.ASSIGNED}),
    TicketStatus.ASSIGNED: frozenset({TicketStatus.IN_PROGRESS}),
    TicketStatus.IN_PROGRESS: frozenset({TicketStatus.RESOLVED}),
    TicketStatus.RESOLVED: frozenset({TicketStatus.CLOSED}),
    TicketStatus.CLOSED: frozenset(),
    TicketStatus.WAITING_CUSTOMER: frozenset(),
}


class InvalidTransitionError(ValueError):
    """Requested status is not reachable from the current one."""

    code = "INVALID_STATUS_TRANSITION"

    def __init__(self, current: TicketStatus, requested: TicketStatus):
        self.current = current
        self.requested = requested
        super().__init__(f"Invalid transition from {current.value} to {requested.value}")


def allowed_next(current: TicketStatus) -> frozenset[TicketStatus]:
    return ALLOWED_TRANSITIONS.get(TicketStatus(current), frozenset())


def is_allowed(current: TicketStatus, requested: TicketStatus) -> bool:
    return TicketStatus(requested) in allowed_next(current)


def validate_transition(current: TicketStatus, requested: TicketStatus) -> TicketStatus:
    """
    Check a single status change.

    Args:
        current: Persisted status, read just before the check
        requested: Target status

    Returns:
        The requested status

    Raises:
        InvalidTransitionError: If requested is not an allowed next status
        ValueError: If either value is not a ticket status
    """
    current = TicketStatus(current)
    requested = TicketStatus(requested)
    if requested not in allowed_next(current):
        raise InvalidTransitionError(current, requested)
    return requested
