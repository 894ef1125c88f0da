"""
JobBoard Backend - Request ID Middleware
=========================================

What:  Tags each request with a short correlation ID, exposes it in the
       X-Request-ID response header and stamps it on every log record.
How:   The ID lives in a ContextVar, so concurrent requests on the same event
       loop each see their own value. RequestIdLogFilter copies it onto log
       records for the `%(request_id)s` format field.

A client may supply its own X-Request-ID; it is accepted only when it is a
short token of letters, digits, dashes and underscores, otherwise a fresh ID
is generated (the header value ends up in logs verbatim).
"""

import logging
import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
_CLIENT_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]{1,64}")

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def accept_request_id(candidate: str) -> str:
    """Client-supplied ID if it is a safe token, else a generated one."""
    if candidate and _CLIENT_ID_PATTERN.fullmatch(candidate):
        return candidate
    return new_request_id()


class RequestIdLogFilter(logging.Filter):
    """Adds `request_id` to every record passing through the handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = accept_request_id(request.headers.get(REQUEST_ID_HEADER, ""))
        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
