"""
Security headers for API responses

The API only ever answers with JSON, so the Content-Security-Policy denies
every resource type and only the configured front-end origins may frame it.
"""

import logging
from typing import Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from .config import ALLOWED_ORIGINS, IS_PRODUCTION

logger = logging.getLogger(__name__)

DISABLED_BROWSER_FEATURES = ("camera", "geolocation", "microphone", "payment", "usb")
NO_STORE = "no-store, no-cache, must-revalidate"


def build_security_headers(allowed_origins: list[str], production: bool) -> dict[str, str]:
    ancestors = " ".join(["'self'", *allowed_origins])
    headers = {
        "Content-Security-Policy": (
            f"default-src 'none'; frame-ancestors {ancestors}; base-uri 'none'; form-action 'self'"
        ),
        "Permissions-Policy": ", ".join(f"{feature}=()" for feature in DISABLED_BROWSER_FEATURES),
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "SAMEORIGIN",
        "X-Permitted-Cross-Domain-Policies": "none",
    }
    if production:
        headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return headers


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Stamps the security headers on responses, except under ``exclude_paths``"""

    def __init__(self, app, exclude_paths: Optional[list[str]] = None):
        super().__init__(app)
        self.exclude_paths = tuple(exclude_paths or ())
        self.headers = build_security_headers(ALLOWED_ORIGINS, IS_PRODUCTION)
        logger.debug(f"🛡️ Security headers enabled, skipping {self.exclude_paths}")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        # Swagger UI pulls scripts from a CDN that the CSP would block
        if request.url.path.startswith(self.exclude_paths):
            return response

        response.headers.update(self.headers)
        response.headers.setdefault("Cache-Control", NO_STORE)
        return response
