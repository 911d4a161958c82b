"""Middleware for logging HTTP requests and responses."""

import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from common.core.request_context import RequestContext
from common.utils.utils import get_logger

logger = get_logger()

# Raw bodies of these paths are never logged: webhook payloads carry buyer details
_UNLOGGED_BODY_PATHS = ("/api/webhook/",)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Opens a fresh RequestContext so every log line of the request shares its id."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        with RequestContext.context() as request_context:
            request_context.endpoint = f"{request.method} {request.url.path}"
            response = await call_next(request)
            response.headers["X-Request-ID"] = str(request_context.request_id)
            return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses.
    Logs request details, response status, and timing information.
    """

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        client_host = request.client.host if request.client else "unknown"
        request_path = request.url.path
        request_method = request.method

        log_data: dict[str, object] = {
            "type": "request_started",
            "client_ip": client_host,
            "method": request_method,
            "path": request_path,
            "query_params": str(request.query_params),
        }
        if request_method in ("POST", "PUT", "PATCH") and not request_path.startswith(_UNLOGGED_BODY_PATHS):
            body_bytes = await request.body()
            if body_bytes:
                body_str = body_bytes.decode("utf-8", errors="replace")
                log_data["request_body"] = body_str[:1000] + "..." if len(body_str) > 1000 else body_str

        # GET requests are mostly page views and health checks
        if request_method == "GET":
            logger.debug(f"Request started: {request_method} {request_path}", **log_data)
        else:
            logger.info(f"Request started: {request_method} {request_path}", **log_data)

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"Request failed: {request_method} {request_path}",
                type="request_failed",
                method=request_method,
                path=request_path,
                error=str(e),
                process_time_ms=int((time.perf_counter() - start_time) * 1000),
                exc_info=True,
            )
            raise

        response_log_data = {
            "type": "request_completed",
            "method": request_method,
            "path": request_path,
            "status_code": response.status_code,
            "process_time_ms": int((time.perf_counter() - start_time) * 1000),
        }
        if request_method == "GET" and 200 <= response.status_code < 300:
            logger.debug(f"Request completed: {request_method} {request_path} - {response.status_code}", **response_log_data)
        else:
            logger.info(f"Request completed: {request_method} {request_path} - {response.status_code}", **response_log_data)
        return response
