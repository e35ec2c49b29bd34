"""
Error taxonomy for the marketplace API.

Services raise these; the handlers registered by
``register_exception_handlers`` turn them into ``{"error": message}`` JSON
bodies with the matching status code.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class MarketplaceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, field: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.field = field
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.field:
            body["field"] = self.field
        return body


class ValidationError(MarketplaceError):
    """Malformed or missing input"""
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(MarketplaceError):
    """Uniqueness violation, e.g. an email that is already registered"""
    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(MarketplaceError):
    """Bad credentials, or a missing/invalid/expired bearer token"""
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthzError(MarketplaceError):
    """Authenticated, but the role or ownership does not allow the action"""
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(MarketplaceError):
    status_code = status.HTTP_404_NOT_FOUND


class ServerError(MarketplaceError):
    """Store or filesystem failure"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    # Integer parts are list indexes or JSON decode offsets, not field names
    location = [
        part for part in first.get("loc", ())
        if isinstance(part, str) and part not in ("body", "query", "path", "form")
    ]
    field = location[-1] if location else None
    message = first.get("msg", "Invalid request")
    if field:
        message = f"{field}: {message}"
    body = {"error": message}
    if field:
        body["field"] = field
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
