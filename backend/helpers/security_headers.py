"""
Security headers middleware.

Every response gets the usual hardening headers. Uploaded chat media is
served from the same origin, so it is marked non-sniffable and may not be
framed by other sites.
"""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from models.config import settings

# Voice notes are recorded in the browser, so the microphone stays allowed
PERMISSIONS_POLICY = (
    "accelerometer=(), camera=(), geolocation=(), gyroscope=(), "
    "magnetometer=(), microphone=(self), payment=(), usb=()"
)

CONTENT_SECURITY_POLICY = (
    "default-src 'self'; "
    "img-src 'self' data: https:; "
    "media-src 'self' blob:; "
    "style-src 'self' 'unsafe-inline'; "
    "connect-src 'self'; "
    "frame-ancestors 'self'"
)

STATIC_PREFIXES = ("/media",)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to every response."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "SAMEORIGIN"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = PERMISSIONS_POLICY
        response.headers["Content-Security-Policy"] = CONTENT_SECURITY_POLICY

        if settings.ENVIRONMENT == "production":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        # API responses are per-user; uploaded media may be cached
        if "Cache-Control" not in response.headers and not request.url.path.startswith(
            STATIC_PREFIXES
        ):
            response.headers["Cache-Control"] = "no-store, max-age=0"

        return response
