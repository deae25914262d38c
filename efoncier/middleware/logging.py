"""
e-Foncier Backend: Access Log Middleware
=========================================

What:  One log line per API request on the `efoncier.access` logger.
How:   Write requests (POST, PUT, DELETE) also name the acting agent from
       `X-User`; listings carry the `X-Total-Count` they returned. The level
       follows the status class: 5xx → ERROR, 4xx → WARNING, otherwise INFO.

Request bodies are never logged: parcel payloads carry owner identity
numbers and uploads carry title deeds.
"""

import logging
import time
from typing import Any, Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from efoncier.config import settings
from efoncier.middleware.request_id import request_id_var

logger = logging.getLogger("efoncier.access")

WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})
UNLOGGED_PATHS = frozenset({"/health"})


def level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def actor_of(request: Request) -> str:
    return (request.headers.get("X-User") or "").strip() or settings.default_actor


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in UNLOGGED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        method = request.method
        status = response.status_code
        rid = request_id_var.get("")
        fields: Dict[str, Any] = {
            "request_id": rid,
            "method": method,
            "path": path,
            "status": status,
            "duration_ms": round(duration_ms, 2),
            "client_ip": request.client.host if request.client else "unknown",
        }

        message = "%s %s %d %.1fms [%s]"
        args = [method, path, status, duration_ms, rid]
        if method in WRITE_METHODS:
            fields["actor"] = actor_of(request)
            message += " by %s"
            args.append(fields["actor"])
        total = response.headers.get("X-Total-Count")
        if total is not None:
            fields["total"] = int(total)
            message += " total=%s"
            args.append(total)

        logger.log(level_for(status), message, *args, extra=fields)
        return response
