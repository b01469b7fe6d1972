"""
Merchant invitations sent by distributors.

Each invite carries a random single-use token embedded in a signup link.
Delivery tries WhatsApp first and falls back to SMS; when both fail the
invite is kept as failed_to_send with the provider errors for follow-up.
Resolving a token never changes the invite; accepting it does.
"""

import logging
from typing import Any
from uuid import UUID, uuid4

from clients.msg91_client import Msg91Client, Msg91Error
from clients.postgres_client import PostgresClient
from core.models import (
    InvitationStatus, InviteContact, InviteResult, MerchantInvitation, SendChannel,
)
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class InviteUsedError(ValueError):
    code = "INVITE_USED"


class InviteExpiredError(ValueError):
    code = "INVITE_EXPIRED"


def build_invite_link(frontend_url: str, token: str) -> str:
    return f"{frontend_url.rstrip('/')}/invite/{token}"


class InviteService:
    """Service for creating, delivering and resolving invites."""

    def __init__(self, postgres: PostgresClient, msg91: Msg91Client, frontend_url: str):
        self.postgres = postgres
        self.msg91 = msg91
        self.frontend_url = frontend_url

    def create_invite(self, distributor_id: UUID, contact: InviteContact) -> MerchantInvitation:
        """
        Store a new invite in SENT status with a fresh token.

        Raises:
            ValueError: If email, fullName or mobileNumber is missing
        """
        if not contact.email or not contact.fullName or not contact.mobileNumber:
            raise ValueError("Missing required fields: email, fullName, mobileNumber")

        token = str(uuid4())
        now = now_utc()
        row = self.postgres.execute_returning(
            """
            INSERT INTO merchant_invitations (
                id, distributor_id, merchant_email, merchant_name, merchant_mobile,
                business_name, invite_token, invite_link, status, sent_via,
                sent_at, created_at, updated_at
            ) VALUES (
                %s, %s, %s, %s, %s,
                %s, %s, %s, %s, %s,
                %s, %s, %s
            )
            RETURNING *
            """,
            (
                uuid4(), distributor_id, contact.email.strip().lower(), contact.fullName,
                contact.mobileNumber, contact.businessName, token,
                build_invite_link(self.frontend_url, token),
                InvitationStatus.SENT.value, SendChannel.WHATSAPP.value,
                now, now, now
            )
        )[0]
        return MerchantInvitation.model_validate(row)

    def _mark(self, invite_id: UUID, fields: dict[str, Any]) -> None:
        set_parts = [f"{column} = %s" for column in fields] + ["updated_at = %s"]
        self.postgres.execute(
            f"UPDATE merchant_invitations SET {', '.join(set_parts)} WHERE id = %s",
            tuple(fields.values()) + (now_utc(), invite_id)
        )

    def deliver(self, invite: MerchantInvitation) -> InviteResult:
        """Send the invite link: WhatsApp, then SMS. Updates the invite row."""
        try:
            message_id = self.msg91.send_invite_whatsapp(invite.merchant_mobile, invite.invite_link)
        except Msg91Error as e:
            whatsapp_error = str(e)
            logger.warning(f"WhatsApp invite failed for {invite.merchant_mobile}: {e}")
        else:
            self._mark(invite.id, {
                "whatsapp_message_id": message_id,
                "sent_via": SendChannel.WHATSAPP.value,
            })
            logger.info(f"Invite {invite.id} sent via WhatsApp")
            return InviteResult(
                email=invite.merchant_email,
                inviteToken=invite.invite_token,
                status=InvitationStatus.SENT.value,
                via=SendChannel.WHATSAPP,
                messageId=message_id,
            )

        try:
            message_id = self.msg91.send_invite_sms(
                invite.merchant_mobile, invite.invite_link, invite.merchant_name or ""
            )
        except Msg91Error as e:
            send_error = f"{whatsapp_error} / {e}"
            self._mark(invite.id, {
                "status": InvitationStatus.FAILED_TO_SEND.value,
                "send_error": send_error,
            })
            logger.error(f"Invite {invite.id} could not be delivered: {send_error}")
            return InviteResult(
                email=invite.merchant_email,
                inviteToken=invite.invite_token,
                status=InvitationStatus.FAILED_TO_SEND.value,
                error=send_error,
            )

        self._mark(invite.id, {"sent_via": SendChannel.SMS.value})
        logger.info(f"Invite {invite.id} sent via SMS fallback")
        return InviteResult(
            email=invite.merchant_email,
            inviteToken=invite.invite_token,
            status=InvitationStatus.SENT.value,
            via=SendChannel.SMS,
            messageId=message_id or None,
        )

    def bulk_send(self, distributor_id: UUID, contacts: list[InviteContact]) -> dict[str, Any]:
        """
        Create and deliver one invite per contact.

        A bad entry is reported in results and does not stop the batch.

        Returns:
            {"results": [...], "sent": n, "failed": n, "total": n}
        """
        if not contacts:
            raise ValueError("merchants array is required and must not be empty")

        results: list[InviteResult] = []
        for contact in contacts:
            try:
                invite = self.create_invite(distributor_id, contact)
            except ValueError as e:
                results.append(InviteResult(email=contact.email or "unknown", status="failed", error=str(e)))
                continue
            except Exception as e:
                logger.exception(f"Failed to store invite for {contact.email}")
                results.append(InviteResult(
                    email=contact.email or "unknown",
                    status="failed",
                    error=f"Failed to create invite record: {e}",
                ))
                continue

            results.append(self.deliver(invite))

        sent = sum(1 for r in results if r.status == InvitationStatus.SENT.value)
        logger.info(f"Invite batch for distributor {distributor_id}: {sent} sent, {len(results) - sent} failed")
        return {
            "results": [r.model_dump(mode="json", exclude_none=True) for r in results],
            "sent": sent,
            "failed": len(results) - sent,
            "total": len(contacts),
        }

    def get_by_token(self, token: str) -> MerchantInvitation | None:
        row = self.postgres.execute_single(
            "SELECT * FROM merchant_invitations WHERE invite_token = %s",
            (token,)
        )
        return MerchantInvitation.model_validate(row) if row else None

    def resolve(self, token: str) -> MerchantInvitation:
        """
        Look up a usable invite. Read-only.

        Raises:
            ValueError: Token not found
            InviteUsedError: Already accepted or registered
            InviteExpiredError: Expired
        """
        invite = self.get_by_token(token)
        if invite is None:
            raise ValueError("Invite not found. It may not exist or may have expired.")
        if invite.is_used:
            raise InviteUsedError("This invite has already been used.")
        if invite.status == InvitationStatus.EXPIRED:
            raise InviteExpiredError("This invite has expired.")
        return invite

    def accept(self, token: str) -> MerchantInvitation:
        """Mark a resolvable invite ACCEPTED. A second accept fails as already used."""
        invite = self.resolve(token)
        now = now_utc()
        row = self.postgres.execute_returning(
            """
            UPDATE merchant_invitations
            SET status = %s, accepted_at = %s, updated_at = %s
            WHERE id = %s
            RETURNING *
            """,
            (InvitationStatus.ACCEPTED.value, now, now, invite.id)
        )[0]
        logger.info(f"Invite {invite.id} accepted")
        return MerchantInvitation.model_validate(row)
