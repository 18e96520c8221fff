"""
Security Headers Middleware - hardening headers on every response.

The service only ever answers JSON, so the content security policy blocks
everything. HSTS is added only when HTTPS is enforced (production).

Usage:
    app.add_middleware(SecurityHeadersMiddleware, enforce_https=settings.is_production())
"""

from starlette.middleware.base import BaseHTTPMiddleware

from nocturna.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

_STATIC_HEADERS = {
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'; base-uri 'none'",
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, enforce_https: bool = False):
        super().__init__(app)
        self.enforce_https = enforce_https
        logger.info("Security headers middleware initialized", enforce_https=self.enforce_https)

    async def dispatch(self, request, call_next):
        response = await call_next(request)

        for name, value in _STATIC_HEADERS.items():
            response.headers[name] = value

        if self.enforce_https:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        # Session-bound JSON must never be cached by intermediaries
        response.headers.setdefault("Cache-Control", "no-store")
        return response
