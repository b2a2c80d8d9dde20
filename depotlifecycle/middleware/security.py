"""Transport security: HTTPS enforcement and response hardening headers.

The API is meant to be reached over HTTPS only. Behind a TLS-terminating
proxy the original scheme is read from `X-Forwarded-Proto`.
"""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse

from depotlifecycle.config import settings

# Liveness probes usually come over plain http from inside the cluster
HTTPS_EXEMPT_PATHS = ("/health", "/health/ready")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        if settings.environment == "production" or settings.force_https:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Cache-Control"] = "no-store"

        return response


class HTTPSRedirectMiddleware(BaseHTTPMiddleware):
    """Redirect plain-http requests to HTTPS (301) when enforcement is on."""

    def __init__(self, app, force_https: bool = False):
        super().__init__(app)
        self.force_https = force_https or settings.environment == "production"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.force_https or request.url.path in HTTPS_EXEMPT_PATHS:
            return await call_next(request)

        scheme = request.headers.get("x-forwarded-proto", request.url.scheme)
        if scheme.split(",")[0].strip() == "http":
            return RedirectResponse(
                url=str(request.url.replace(scheme="https")),
                status_code=301,
            )

        return await call_next(request)
