"""Security headers middleware (Helmet-style)."""

from collections.abc import Iterable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds security headers to every response.

    Responses under ``no_store_prefixes`` (token-bearing routes) also get
    ``Cache-Control: no-store`` so tokens never land in a shared cache.
    """

    # Swagger UI needs inline scripts and CDN assets
    DOCS_CSP = (
        "default-src 'self'; "
        "script-src 'self' 'unsafe-inline' cdn.jsdelivr.net; "
        "style-src 'self' 'unsafe-inline' cdn.jsdelivr.net; "
        "img-src 'self' data: cdn.jsdelivr.net; "
        "frame-ancestors 'none'"
    )
    STRICT_CSP = "default-src 'self'; frame-ancestors 'none'"

    def __init__(
        self,
        app: ASGIApp,
        serve_docs: bool = True,
        no_store_prefixes: Iterable[str] = (),
        strict_transport_security: str = "max-age=31536000; includeSubDomains",
    ):
        super().__init__(app)
        self.no_store_prefixes = tuple(no_store_prefixes)
        self.headers = {
            "Content-Security-Policy": self.DOCS_CSP if serve_docs else self.STRICT_CSP,
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "Referrer-Policy": "strict-origin-when-cross-origin",
            "X-Permitted-Cross-Domain-Policies": "none",
        }
        if strict_transport_security:
            self.headers["Strict-Transport-Security"] = strict_transport_security

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        for header, value in self.headers.items():
            response.headers[header] = value

        if request.url.path.startswith(self.no_store_prefixes):
            response.headers["Cache-Control"] = "no-store"
            response.headers["Pragma"] = "no-cache"
        return response
