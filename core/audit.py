"""
Append-only trail of support KYC decisions.

Every approve/reject is recorded in support_kyc_actions with the reviewing
staff member, merchant, decision and notes. Entries are never modified or
deleted. Writing the trail is best-effort: the KYC decision itself has
already been persisted when the entry is written.
"""

import logging
from uuid import UUID, uuid4

from clients.postgres_client import PostgresClient
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


# support_kyc_actions.action for approve/reject decisions
REVIEW_ACTION = "review"


class KYCAuditLogger:
    """
    Usage:
        audit = KYCAuditLogger(postgres)

        audit.log_action(
            merchant_id=merchant.id,
            decision="verified",
            notes="Documents match",
            support_staff_id=user.staff_id,
        )
    """

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    def log_action(
        self,
        merchant_id: UUID,
        decision: str,
        notes: str | None = None,
        support_staff_id: UUID | None = None,
        action: str = REVIEW_ACTION,
    ) -> bool:
        """
        Record a KYC decision.

        Args:
            merchant_id: Merchant profile reviewed
            decision: Resulting KYC status ("verified" or "rejected")
            notes: Reviewer notes
            support_staff_id: support_staff.id of the reviewer, if any
            action: Action kind

        Returns:
            True if the entry was written, False if the write failed.
        """
        try:
            self.postgres.execute(
                """
                INSERT INTO support_kyc_actions (
                    id, support_staff_id, merchant_id, action, decision, notes, created_at
                ) VALUES (%s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    uuid4(),
                    support_staff_id,
                    merchant_id,
                    action,
                    decision,
                    notes,
                    now_utc(),
                )
            )
        except Exception as e:
            logger.error(f"Failed to write KYC audit entry for merchant {merchant_id}: {e}")
            return False

        return True
