"""
SabbPe merchant platform API.

Run with:
    uvicorn main:create_app --factory
"""

import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from api.base import success_response
from api.bank import create_bank_router
from api.distributor import create_distributor_router
from api.errors import register_error_handlers
from api.invites import create_invites_router
from api.kyc import create_kyc_router
from api.middleware import RequestIDMiddleware
from api.onboarding import create_onboarding_router
from api.tickets import create_tickets_router
from api.whatsapp import create_whatsapp_router
from auth import (
    AuthConfig,
    AuthDatabase,
    AuthMiddleware,
    AuthService,
    OTPConfig,
    RateLimiter,
    TokenIssuer,
    create_auth_router,
    create_portal_auth_router,
)
from clients import settings
from clients.email_client import EmailClient
from clients.msg91_client import Msg91Client
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from core.audit import KYCAuditLogger
from core.event_bus import EventBus
from core.handlers.merchant_review_handler import handle_merchant_reviewed
from core.handlers.ticket_notification_handler import (
    handle_ticket_created,
    handle_ticket_status_changed,
)
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

logger = logging.getLogger(__name__)


def register_notification_handlers(event_bus: EventBus, email_client: EmailClient, merchant_service) -> None:
    """Subscribe the email handlers. Delivery failures are logged by the bus."""
    event_bus.subscribe("TicketCreated", handle_ticket_created(email_client, merchant_service))
    event_bus.subscribe("TicketStatusChanged", handle_ticket_status_changed(email_client, merchant_service))
    event_bus.subscribe("MerchantReviewed", handle_merchant_reviewed(email_client))


def _email_client() -> EmailClient | None:
    try:
        config = settings.get_email_config()
    except settings.ConfigError as e:
        logger.warning(f"Email notifications disabled: {e}")
        return None
    return EmailClient(config["user"], config["password"], config["host"], int(config["port"]))


def build_services(
    postgres: PostgresClient,
    valkey: ValkeyClient,
    msg91: Msg91Client,
    email_client: EmailClient | None = None,
    jwt_secret: str | None = None,
    auth_config: AuthConfig | None = None,
    frontend_url: str | None = None,
    storage: dict | None = None,
    include_debug_otp: bool = False,
) -> dict:
    """
    Wire every service over the given clients.

    Returns:
        Dict of services keyed by name, plus "token_issuer", "event_bus"
        and the "postgres"/"valkey" clients for health checks
    """
    auth_config = auth_config or AuthConfig()
    storage = storage or settings.get_storage_config()

    token_issuer = TokenIssuer(jwt_secret or settings.get_jwt_secret(), auth_config)
    auth_service = AuthService(
        auth_config,
        AuthDatabase(postgres),
        RateLimiter(valkey, auth_config),
        token_issuer,
    )

    event_bus = EventBus()
    merchant_service = MerchantService(postgres)
    if email_client is not None:
        register_notification_handlers(event_bus, email_client, merchant_service)

    ticket_service = TicketService(postgres, event_bus)
    onboarding_service = OnboardingService(postgres, merchant_service)

    return {
        "token_issuer": token_issuer,
        "event_bus": event_bus,
        "postgres": postgres,
        "valkey": valkey,
        "auth": auth_service,
        "merchant": merchant_service,
        "ticket": ticket_service,
        "message": MessageService(postgres, ticket_service),
        "merchant_review": MerchantReviewService(
            merchant_service,
            ticket_service,
            storage["supabase_url"],
            storage["document_bucket"],
            event_bus,
        ),
        "kyc": KYCService(postgres, merchant_service, KYCAuditLogger(postgres)),
        "bank": BankService(merchant_service),
        "onboarding": onboarding_service,
        "distributor": DistributorService(postgres, merchant_service, onboarding_service, auth_service),
        "invite": InviteService(postgres, msg91, frontend_url or settings.get_frontend_url()),
        "otp": OTPService(valkey, msg91, OTPConfig(), include_debug_otp=include_debug_otp),
    }


def _services_from_environment() -> dict:
    msg91_config = settings.get_msg91_config()
    return build_services(
        postgres=PostgresClient(settings.get_database_url()),
        valkey=ValkeyClient(settings.get_valkey_url()),
        msg91=Msg91Client(**msg91_config),
        email_client=_email_client(),
        include_debug_otp=settings.is_development(),
    )


def create_app(services: dict | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        services: Pre-built services (tests). Built from the environment when omitted.
    """
    if services is None:
        settings.load_env_file()
        logging.basicConfig(
            level=os.getenv("LOG_LEVEL", "INFO"),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        services = _services_from_environment()

    app = FastAPI(title="SabbPe Merchant Platform API", version="1.0.0")

    # Starlette runs the last-added middleware first: CORS, request id, then auth
    app.add_middleware(AuthMiddleware, token_issuer=services["token_issuer"])
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    auth_service = services["auth"]
    app.include_router(create_auth_router(auth_service), prefix="/api/auth")
    app.include_router(create_portal_auth_router(auth_service, "support"), prefix="/api/support/auth")
    app.include_router(create_portal_auth_router(auth_service, "bank"), prefix="/api/bank/auth")
    app.include_router(create_tickets_router(services), prefix="/api/tickets")
    app.include_router(create_kyc_router(services["kyc"]), prefix="/api/support")
    app.include_router(create_bank_router(services["bank"]), prefix="/api/bank/applications")
    app.include_router(
        create_onboarding_router(services["onboarding"], services["merchant"]),
        prefix="/api/onboarding",
    )
    app.include_router(create_distributor_router(services["distributor"]), prefix="/api/distributor")
    app.include_router(create_invites_router(services["invite"]), prefix="/api/invites")
    app.include_router(create_whatsapp_router(services["otp"]), prefix="/api/whatsapp")

    @app.get("/health")
    async def health(request: Request):
        """Raises (500) if the database or Valkey is unreachable."""
        services["postgres"].ping()
        services["valkey"].ping()
        return success_response({"status": "ok", "database": "ok", "valkey": "ok"})

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:create_app", factory=True, host="0.0.0.0", port=int(os.getenv("PORT", "5000")))
