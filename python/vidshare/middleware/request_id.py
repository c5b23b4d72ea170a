"""X-Request-ID middleware: request correlation and the access log.

Registered last so it wraps everything else; auth failures and unhandled
errors still get the header and an access-log entry.
"""

import re
import time
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from vidshare.logging import clear_request_context, get_logger, set_request_context

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128

_TOKEN_PATTERN = re.compile(r"[A-Za-z0-9._-]+")
_UUID_PATTERN = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.I)

logger = get_logger(__name__)


def is_valid_request_id(value: str) -> bool:
    """A client id is kept if it is a UUID or a short [A-Za-z0-9._-] token."""
    if not value or len(value.encode("utf-8")) > MAX_REQUEST_ID_LENGTH:
        return False
    return bool(_UUID_PATTERN.fullmatch(value) or _TOKEN_PATTERN.fullmatch(value))


def normalize_request_id(value: str) -> str:
    return value.lower() if _UUID_PATTERN.fullmatch(value) else value


def resolve_request_id(incoming: str | None) -> str:
    """Use the client's id when acceptable, otherwise mint one."""
    if incoming and is_valid_request_id(incoming):
        return normalize_request_id(incoming)
    return str(uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, log_requests: bool = True):
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.monotonic()
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        set_request_context(request_id, path=request.url.path, method=request.method)

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("request_failed")
            clear_request_context()
            raise

        viewer = getattr(request.state, "viewer", None)
        if viewer is not None:
            set_request_context(request_id, user_id=str(viewer.user_id))
        response.headers[REQUEST_ID_HEADER] = request_id

        if self.log_requests:
            logger.info(
                "request_completed",
                status_code=response.status_code,
                duration_ms=round((time.monotonic() - started) * 1000, 2),
            )
        clear_request_context()
        return response
