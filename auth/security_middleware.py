"""Security middleware for FastAPI - bearer token validation and user context."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from auth.tokens import TokenIssuer
from auth.exceptions import InvalidTokenError
from api.base import error_response, ErrorCodes
from utils.user_context import set_current_user, clear_current_user

logger = logging.getLogger(__name__)


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware that verifies the bearer JWT and sets user context.

    For protected routes:
    1. Extracts the token from 'Authorization: Bearer <token>'
    2. Verifies signature and expiry via TokenIssuer
    3. Sets CurrentUser in request.state and user context
    4. Clears context after request completes

    Public paths bypass authentication entirely. Entries ending in '/'
    match as prefixes, all others match exactly.
    """

    PUBLIC_PATHS = [
        "/api/auth/login",
        "/api/auth/register",
        "/api/support/auth/login",
        "/api/bank/auth/login",
        "/api/tickets/merchant",
        "/api/tickets/merchant/",
        "/api/invites/token/",
        "/api/whatsapp/",
        "/health",
        "/docs",
        "/docs/",
        "/openapi.json",
    ]

    def __init__(self, app, token_issuer: TokenIssuer):
        super().__init__(app)
        self._token_issuer = token_issuer

    def _is_public_path(self, path: str) -> bool:
        for public_path in self.PUBLIC_PATHS:
            if path == public_path:
                return True
            if public_path.endswith("/") and path.startswith(public_path):
                return True
        return False

    def _unauthorized(self, code: str, message: str) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content=error_response(code, message).model_dump(mode="json"),
        )

    async def dispatch(self, request: Request, call_next):
        """Process request through middleware."""
        path = request.url.path

        # CORS preflight and public routes carry no token
        if request.method == "OPTIONS" or self._is_public_path(path):
            return await call_next(request)

        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")

        if scheme.lower() != "bearer" or not token.strip():
            return self._unauthorized(ErrorCodes.NOT_AUTHENTICATED, "Authentication required")

        try:
            user = self._token_issuer.to_current_user(token.strip())
        except InvalidTokenError as e:
            logger.warning(f"Rejected token on {path}: {e}")
            return self._unauthorized(ErrorCodes.INVALID_TOKEN, "Invalid or expired token")

        set_current_user(user)
        request.state.user = user

        try:
            response = await call_next(request)
            return response
        finally:
            # Always clear context
            clear_current_user()
