from typing import Callable, Dict, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

BASE_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

PRODUCTION_SECURITY_HEADERS = {
    **BASE_SECURITY_HEADERS,
    "X-Frame-Options": "DENY",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    # The API only serves JSON
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none';",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
}

DEVELOPMENT_SECURITY_HEADERS = {
    **BASE_SECURITY_HEADERS,
    "X-Frame-Options": "SAMEORIGIN",
    # Swagger UI loads its assets from a CDN
    "Content-Security-Policy": "default-src 'self' 'unsafe-inline' https:; img-src 'self' data: https:;",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds security headers to every response, stricter in production"""

    def __init__(
        self,
        app,
        environment: str = "development",
        custom_headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(app)
        defaults = (
            PRODUCTION_SECURITY_HEADERS
            if environment == "production"
            else DEVELOPMENT_SECURITY_HEADERS
        )
        self.headers = {**defaults, **(custom_headers or {})}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        for header_name, header_value in self.headers.items():
            response.headers[header_name] = header_value

        return response
