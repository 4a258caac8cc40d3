"""
Error taxonomy and the FastAPI handlers that render it.

Each error carries a fixed, client-safe message. Upstream detail is logged
where the error is raised and never reaches the response body.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("vaultshare.errors")


class VaultShareError(Exception):
    status_code = 500
    message = "Request failed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message is not None:
            self.message = message


class ValidationError(VaultShareError):
    status_code = 400
    message = "Invalid request."


class AuthenticationRequired(VaultShareError):
    status_code = 401
    message = "You must be signed in."


class AuthorizationDenied(VaultShareError):
    status_code = 403
    message = "Not allowed."


class NotFound(VaultShareError):
    status_code = 404
    message = "Not found."


class Conflict(VaultShareError):
    status_code = 409
    message = "Conflict."


class QuotaExceeded(VaultShareError):
    status_code = 413
    message = "Vault size limit exceeded (30 MB)."


class UnsupportedMediaType(VaultShareError):
    status_code = 415
    message = "Unsupported file type."


class RateLimited(VaultShareError):
    status_code = 429
    message = "Rate limit exceeded."

    def __init__(self, retry_after: int = 60):
        super().__init__()
        self.retry_after = retry_after


class UpstreamFailure(VaultShareError):
    status_code = 500
    message = "Service temporarily unavailable. Please retry."


class DeliveryFailure(VaultShareError):
    status_code = 502
    message = "Could not create signed URL."


def register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(VaultShareError)
    async def vaultshare_error_handler(request: Request, exc: VaultShareError) -> JSONResponse:
        headers = None
        if isinstance(exc, RateLimited):
            headers = {"Retry-After": str(exc.retry_after)}
        if exc.status_code >= 500:
            logger.warning("HTTP %d: %s | path=%s", exc.status_code, type(exc).__name__, request.url.path)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message},
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": ValidationError.message})

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        # Never expose internal details
        logger.exception(
            "Unhandled exception | path=%s | type=%s",
            request.url.path,
            type(exc).__name__,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "An unexpected error occurred. Please try again later."},
        )
