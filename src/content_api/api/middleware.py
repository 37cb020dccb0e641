"""HTTP middleware: CORS for the dashboard front-end and baseline security headers."""

from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from content_api.core.config import Settings

SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Allow the configured dashboard origins (exact list and/or regex)."""
    options: dict[str, Any] = {
        "allow_origins": settings.cors_origin_list,
        "allow_credentials": True,
        "allow_methods": ["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        "allow_headers": ["*"],
    }
    regex = settings.cors_origin_regex.strip()
    if regex:
        options["allow_origin_regex"] = regex
    app.add_middleware(CORSMiddleware, **options)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Stamp ``SECURITY_HEADERS`` onto every response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response
