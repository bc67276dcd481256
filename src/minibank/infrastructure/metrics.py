import time
from collections.abc import Awaitable, Callable
from functools import wraps

from prometheus_client import Counter, Histogram


TRANSFERS_TOTAL = Counter(
    "minibank_transfers_total",
    "Total number of transfer attempts",
    ["status", "error_code"],
)

TRANSFER_DURATION_SECONDS = Histogram(
    "minibank_transfer_duration_seconds",
    "Transfer processing duration",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

COMMISSION_COLLECTED_TOTAL = Counter(
    "minibank_commission_collected_total",
    "Commission withheld from transfers, in destination currency units",
    ["currency"],
)

EXCHANGE_RATE_LOOKUPS_TOTAL = Counter(
    "minibank_exchange_rate_lookups_total",
    "Exchange rate lookups by source and outcome",
    ["source", "status"],
)

HTTP_REQUEST_DURATION = Histogram(
    "minibank_http_request_duration_seconds",
    "HTTP request duration",
    ["method", "path", "status_code"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

HTTP_REQUESTS_TOTAL = Counter(
    "minibank_http_requests_total",
    "Total number of HTTP requests",
    ["method", "path", "status_code"],
)


def track_transfer_duration[**P, R](
    func: Callable[P, Awaitable[R]],
) -> Callable[P, Awaitable[R]]:
    @wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        start = time.perf_counter()
        try:
            return await func(*args, **kwargs)
        finally:
            duration = time.perf_counter() - start
            TRANSFER_DURATION_SECONDS.observe(duration)

    return wrapper
