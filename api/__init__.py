"""API modules for HTTP interface."""

from api.base import (
    APIError,
    APIMeta,
    APIResponse,
    success_response,
    created_response,
    error_response,
    ErrorCodes,
)
