"""API test fixtures: the real app over mocked services, callers as signed JWTs."""

from unittest.mock import Mock
from uuid import UUID

import pytest
from starlette.testclient import TestClient

from auth.config import AuthConfig
from auth.service import AuthService
from auth.tokens import TokenIssuer
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from core.event_bus import EventBus
from core.services.bank_service import BankService
from core.services.distributor_service import DistributorService
from core.services.invite_service import InviteService
from core.services.kyc_service import KYCService
from core.services.merchant_review_service import MerchantReviewService
from core.services.merchant_service import MerchantService
from core.services.message_service import MessageService
from core.services.onboarding_service import OnboardingService
from core.services.otp_service import OTPService
from core.services.ticket_service import TicketService
from main import create_app
from tests.factories import (
    ADMIN_ID,
    BANK_ID,
    DISTRIBUTOR_ID,
    MERCHANT_USER_ID,
    SUPPORT_ID,
    SUPPORT_STAFF_ID,
)

JWT_SECRET = "api-test-secret"


@pytest.fixture
def token_issuer():
    return TokenIssuer(JWT_SECRET, AuthConfig())


@pytest.fixture
def services(token_issuer):
    """Every service mocked. Tests script the calls they exercise."""
    return {
        "token_issuer": token_issuer,
        "event_bus": EventBus(),
        "postgres": Mock(spec=PostgresClient),
        "valkey": Mock(spec=ValkeyClient),
        "auth": Mock(spec=AuthService),
        "merchant": Mock(spec=MerchantService),
        "ticket": Mock(spec=TicketService),
        "message": Mock(spec=MessageService),
        "merchant_review": Mock(spec=MerchantReviewService),
        "kyc": Mock(spec=KYCService),
        "bank": Mock(spec=BankService),
        "onboarding": Mock(spec=OnboardingService),
        "distributor": Mock(spec=DistributorService),
        "invite": Mock(spec=InviteService),
        "otp": Mock(spec=OTPService),
    }


@pytest.fixture
def app(services):
    return create_app(services)


@pytest.fixture
def client(app):
    """Unauthenticated client. Pass headers=auth_headers(role) per request."""
    return TestClient(app, raise_server_exceptions=False)


_ROLE_IDS = {
    "admin": ADMIN_ID,
    "super_admin": ADMIN_ID,
    "support": SUPPORT_ID,
    "support_staff": SUPPORT_ID,
    "support_admin": SUPPORT_ID,
    "distributor": DISTRIBUTOR_ID,
    "merchant": MERCHANT_USER_ID,
    "bank_staff": BANK_ID,
    "bank_admin": BANK_ID,
}


@pytest.fixture
def auth_headers(token_issuer):
    """Build an Authorization header for a caller with the given role."""

    def _headers(role: str, user_id: UUID | None = None) -> dict:
        claims = {"staffId": str(SUPPORT_STAFF_ID)} if role.startswith(("support_", "bank_")) else None
        token, _ = token_issuer.issue(user_id or _ROLE_IDS[role], role, claims)
        return {"Authorization": f"Bearer {token}"}

    return _headers
