"""HTTP middleware: upload size cap and response hardening headers."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Refuse write requests whose declared Content-Length exceeds ``max_bytes``.

    Job descriptions, banner image URLs and forum posts are all small, so
    anything over the cap is rejected before the body is read.
    """

    def __init__(self, app, max_bytes: int) -> None:  # type: ignore[no-untyped-def]
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[no-untyped-def]
        if request.method not in BODY_METHODS:
            return await call_next(request)

        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_bytes:
            logger.warning(
                "Rejected %s %s: body of %s bytes over %d limit",
                request.method, request.url.path, declared, self.max_bytes,
            )
            return JSONResponse(
                status_code=413,
                content={"error": f"Request body too large (max {self.max_bytes} bytes)"},
            )
        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Stamp every response with hardening headers.

    Admin responses also get ``Cache-Control: no-store`` since they list
    user emails.
    """

    headers = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
    }

    def __init__(self, app, admin_prefix: str = "/api/admin") -> None:  # type: ignore[no-untyped-def]
        super().__init__(app)
        self.admin_prefix = admin_prefix

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[no-untyped-def]
        response = await call_next(request)
        response.headers.update(self.headers)
        if request.url.path.startswith(self.admin_prefix):
            response.headers["Cache-Control"] = "no-store"
        return response
