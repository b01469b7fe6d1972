"""Builders for domain objects used across core tests."""

import pytest

from core.models import MerchantInvitation, MerchantKYC, MerchantProfile, Ticket
from tests.factories import invitation_row, merchant_row, ticket_row


@pytest.fixture
def ticket() -> Ticket:
    return Ticket.model_validate(ticket_row())


@pytest.fixture
def merchant() -> MerchantProfile:
    return MerchantProfile.model_validate(merchant_row())


@pytest.fixture
def kyc(merchant) -> MerchantKYC:
    return MerchantKYC(merchant_id=merchant.id, video_kyc_completed=True, location_captured=True)


@pytest.fixture
def invitation() -> MerchantInvitation:
    return MerchantInvitation.model_validate(invitation_row())
