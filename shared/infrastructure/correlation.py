"""
Request correlation for logs.

Every request gets an ID, taken from ``X-Request-ID`` or generated, and
carries the principal name forwarded by the upstream authentication layer.
Both live in context variables for the duration of the request, and
``CorrelationIdFilter`` stamps them onto every log record. The CRUD log
lines of one unit of work can then be traced to the request and user that
produced them.
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

REQUEST_ID_HEADER = "X-Request-ID"
PRINCIPAL_HEADER = "X-Authenticated-User"

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
principal_var: ContextVar[str] = ContextVar("principal", default="")


def get_request_id() -> str:
    """Get the current request ID."""
    return request_id_var.get()


def get_principal_name() -> str:
    """Principal forwarded with the current request, or an empty string."""
    return principal_var.get()


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Binds the request ID and the forwarded principal to the request context.

    - Uses the X-Request-ID header when present, otherwise a new UUID
    - Returns the request ID in the response headers
    - The principal is recorded for logging only; authorization happens in
      the service layer
    """

    def __init__(self, app: ASGIApp, principal_header: str = PRINCIPAL_HEADER):
        super().__init__(app)
        self.principal_header = principal_header

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        principal = request.headers.get(self.principal_header) or ""

        request_token = request_id_var.set(request_id)
        principal_token = principal_var.set(principal)
        try:
            request.state.request_id = request_id
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            principal_var.reset(principal_token)
            request_id_var.reset(request_token)


class CorrelationIdFilter(logging.Filter):
    """
    Adds ``request_id`` and ``principal`` to log records ("-" outside a request).

    Usage:
        handler = logging.StreamHandler()
        handler.addFilter(CorrelationIdFilter())
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        record.principal = principal_var.get() or "-"
        return True
