"""
Request ID middleware.

Every request gets an id: the incoming `X-Request-ID` header when it is a sane
value, otherwise a fresh UUID4. The id is stored in the contextvar read by
RequestIdFilter and echoed back in the `X-Request-ID` response header. It is also
kept on `request.state.request_id` for the unhandled-error handler.
"""

import re
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .filters import set_request_id, reset_request_id

REQUEST_ID_HEADER = "X-Request-ID"

# Upstream ids are copied into logs; keep them short and free of control characters.
_SAFE_REQUEST_ID = re.compile(r"[A-Za-z0-9._:-]{1,128}")


def resolve_request_id(incoming: str | None) -> str:
    if incoming and _SAFE_REQUEST_ID.fullmatch(incoming):
        return incoming
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Starlette / FastAPI middleware that sets a request id for each incoming request.
    """

    async def dispatch(self, request: Request, call_next):
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = set_request_id(rid)
        # the catch-all 500 handler runs outside this middleware, after the contextvar is reset
        request.state.request_id = rid

        try:
            # exceptions propagate to the framework's error handlers
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = rid
            return response
        finally:
            reset_request_id(token)
