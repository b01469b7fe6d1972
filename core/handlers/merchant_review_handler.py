"""
Handler for MerchantReviewed events.

Emails the merchant the outcome of the admin review.
"""

import logging
from typing import Callable

from core.events import MerchantReviewed
from core.handlers import email_templates
from core.models import ApprovalStatus

logger = logging.getLogger(__name__)

APPROVED_SUBJECT = "Your Merchant Account Has Been Approved - SabbPe"
REJECTED_SUBJECT = "Merchant Account Review Update - SabbPe"


def handle_merchant_reviewed(email_client) -> Callable:
    """
    Factory that returns a MerchantReviewed handler.

    Args:
        email_client: EmailClient instance
    """

    def handler(event: MerchantReviewed):
        merchant = event.merchant
        if not merchant.email:
            logger.warning(f"Merchant {merchant.id} has no email, review result not sent")
            return

        if event.status == ApprovalStatus.APPROVED.value:
            subject = APPROVED_SUBJECT
            body = email_templates.merchant_approved(merchant.full_name, merchant.business_name)
        else:
            subject = REJECTED_SUBJECT
            body = email_templates.merchant_rejected(merchant.full_name, event.notes)

        email_client.send_email(merchant.email, subject, body)
        logger.info(f"Review result ({event.status}) sent to {merchant.email}")

    return handler
