"""
RequestContext Middleware - request tracing for every request.

Adds to ``request.state``:
- request_id: UUID for tracing this request (echoed as X-Request-ID)
- ip_address: Client IP address

Incoming X-Request-ID headers are reused so a proxy's id survives.
The id is also bound into structlog's context variables for the duration
of the request.
"""

import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from nocturna.config import settings
from nocturna.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        request.state.ip_address = self._extract_client_ip(request)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        logger.debug(
            "Request started",
            method=request.method,
            path=request.url.path,
            ip_address=request.state.ip_address,
        )

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    def _extract_client_ip(self, request: Request) -> str | None:
        """
        Client IP, taken from X-Forwarded-For only when the direct peer is a
        trusted proxy and TRUST_X_FORWARDED_FOR is enabled.
        """
        direct_ip = request.client.host if request.client else None
        if not settings.TRUST_X_FORWARDED_FOR or direct_ip not in settings.TRUSTED_PROXY_IPS:
            return direct_ip

        forwarded_for = request.headers.get("x-forwarded-for")
        if not forwarded_for:
            return direct_ip

        # "client, proxy1, proxy2": the first entry is the original client
        return forwarded_for.split(",")[0].strip()
