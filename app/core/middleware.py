"""HTTP middleware for request correlation and caller-origin enforcement.

- request_id_middleware: accepts or generates X-Request-ID, stores it in
  contextvars for log correlation, and reports request duration.
- origin_guard_middleware: only the configured browser origin may call the
  API. Other origins (or none) get 403 before any route runs; CORS preflight
  requests from the allowed origin are answered with 204 directly.

Usage:
    app.middleware("http")(origin_guard_middleware)
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response

from app.core.config import settings
from app.core.exception_handlers import general_exception_handler
from app.core.logging import clear_request_id, set_request_id

logger = logging.getLogger(__name__)

ORIGIN_EXEMPT_PATHS = frozenset({"/health"})
PREFLIGHT_MAX_AGE_SECONDS = 3600


async def request_id_middleware(request: Request, call_next) -> Response:
    """Propagate a correlation id through the request and back to the client.

    If the client sends the configured request-id header (X-Request-ID by
    default) it is reused, otherwise a UUID4 is generated.

    Side Effects:
        - Sets request_id in contextvars for the duration of the request
        - Adds the request-id header and X-Request-Duration-ms to the response
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
    finally:
        clear_request_id()

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response


async def origin_guard_middleware(request: Request, call_next) -> Response:
    """Reject foreign origins, answer preflight, and stamp the CORS header.

    Returns:
        403 with an empty body when the Origin header does not exactly match
        ``settings.app.allowed_origin``; 204 for OPTIONS preflight; otherwise
        the downstream response (or the generic 500 for an unhandled error)
        with Access-Control-Allow-Origin added.
    """

    if request.url.path in ORIGIN_EXEMPT_PATHS:
        return await call_next(request)

    allowed_origin = settings.app.allowed_origin
    origin = request.headers.get("Origin", "")
    if origin != allowed_origin:
        logger.warning(
            "origin.rejected",
            extra={
                "origin": origin or None,
                "request_path": request.url.path,
                "request_method": request.method,
            },
        )
        return Response(status_code=403)

    if request.method == "OPTIONS":
        return Response(
            status_code=204,
            headers={
                "Access-Control-Allow-Origin": allowed_origin,
                "Access-Control-Allow-Methods": "GET",
                "Access-Control-Max-Age": str(PREFLIGHT_MAX_AGE_SECONDS),
            },
        )

    try:
        response: Response = await call_next(request)
    except Exception as exc:
        # Error responses carry the CORS header too.
        response = await general_exception_handler(request, exc)
    response.headers["Access-Control-Allow-Origin"] = allowed_origin
    return response
