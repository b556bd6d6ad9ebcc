# src/combatstats/middleware/logging.py

"""Request/response logging middleware for the Combat Stats API."""

import logging
import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("combatstats.api")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request with its outcome and latency.

    A caller-supplied X-Request-ID is reused so traces can be joined across
    services; otherwise a short random one is generated. The ID is echoed
    back on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        start_time = time.perf_counter()
        client_host = request.client.host if request.client else "unknown"

        logger.info(
            "[%s] %s %s%s",
            request_id,
            request.method,
            request.url.path,
            f"?{request.query_params}" if request.query_params else "",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "query_params": str(request.query_params),
                "client_ip": client_host,
            },
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "[%s] %s %s -> ERROR (%.2fms): %s",
                request_id,
                request.method,
                request.url.path,
                duration_ms,
                e,
                extra={
                    "request_id": request_id,
                    "path": request.url.path,
                    "error": str(e),
                    "duration_ms": round(duration_ms, 2),
                },
                exc_info=True,
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        log = logger.warning if response.status_code >= 400 else logger.info
        log(
            "[%s] %s %s -> %d (%.2fms)",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "request_id": request_id,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response  # type: ignore[no-any-return]
