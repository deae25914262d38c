"""
e-Foncier Backend: Request ID Middleware
=========================================

What:  Assigns an ID to each request and echoes it in `X-Request-ID`.
How:   A client-supplied `X-Request-ID` is reused when it is a plain token
       (letters, digits, `.`, `_`, `-`, at most 64 characters); anything
       else is replaced by a short generated ID.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_VALID_REQUEST_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")

# Read by the access log and the exception handlers.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def accepted_request_id(supplied: Optional[str]) -> str:
    """The client's ID when it is a plain token, otherwise a fresh one."""
    if supplied and _VALID_REQUEST_ID.fullmatch(supplied):
        return supplied
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = accepted_request_id(request.headers.get(REQUEST_ID_HEADER))
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
