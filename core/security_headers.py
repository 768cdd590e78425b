"""
Security Headers Middleware

Adds standard security headers to every API response. The API only serves
JSON and file downloads, so the content policy allows nothing to load.
"""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from core.config import settings


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Headers added:
    - X-Content-Type-Options: no MIME sniffing of downloads
    - X-Frame-Options / frame-ancestors: no framing
    - Referrer-Policy
    - Cache-Control: no-store on /v1/ (plans are client health data)
    - Strict-Transport-Security: production only
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"

        if request.url.path.startswith("/v1/"):
            response.headers["Cache-Control"] = "no-store"

        if not settings.DEBUG and settings.ENVIRONMENT == "production":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response
