"""Request-id middleware.

Binds a request id to the structlog context for the duration of the request
and returns it in ``X-Request-ID``. A well-formed id supplied by the caller
(e.g. a load balancer) is reused; otherwise a fresh ULID is generated.
"""

from __future__ import annotations

import re

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from detectsecure.utils.logger import clear_request_id, set_request_id
from detectsecure.utils.ulid import generate_ulid

REQUEST_ID_HEADER = "X-Request-ID"

# Caller-supplied ids end up in logs; accept only short token-like values.
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        incoming = request.headers.get(REQUEST_ID_HEADER, "")
        request_id = incoming if _REQUEST_ID_RE.match(incoming) else generate_ulid()

        set_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            clear_request_id()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
