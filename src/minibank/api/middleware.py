import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from minibank.infrastructure.metrics import HTTP_REQUEST_DURATION, HTTP_REQUESTS_TOTAL


logger = structlog.get_logger()


class MetricsMiddleware(BaseHTTPMiddleware):
    """HTTP middleware that collects Prometheus metrics per route."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        start_time = time.perf_counter()
        status_code = "500"

        try:
            response = await call_next(request)
            status_code = str(response.status_code)
            return response
        except Exception:
            logger.exception("unhandled_request_error", method=request.method, url=str(request.url))
            raise
        finally:
            duration = time.perf_counter() - start_time
            path = self._route_path(request)
            HTTP_REQUEST_DURATION.labels(method=request.method, path=path, status_code=status_code).observe(duration)
            HTTP_REQUESTS_TOTAL.labels(method=request.method, path=path, status_code=status_code).inc()

    @staticmethod
    def _route_path(request: Request) -> str:
        """Use the route template so ids do not explode label cardinality."""
        route = request.scope.get("route")
        return getattr(route, "path", "unmatched")
