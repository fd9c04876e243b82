from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import Counter, Histogram

# 低基数标签：backend/operation 取值固定，bucket 与 key 只进日志不进标签
OPERATIONS = Counter(
    "storage_operations_total",
    "Total storage operations",
    ["backend", "operation", "outcome"],
)

LATENCY = Histogram(
    "storage_operation_duration_seconds",
    "Storage operation latency in seconds",
    ["backend", "operation"],
)

_metrics_enabled = True


def set_metrics_enabled(enabled: bool) -> None:
    global _metrics_enabled
    _metrics_enabled = enabled


@contextmanager
def observe_operation(
    backend: str,
    operation: str,
    *,
    bucket: str = "",
    key: str = "",
) -> Iterator[None]:
    """Record metrics and one structured log line around a backend call.

    Exceptions are logged and re-raised untouched.
    """
    logger = logging.getLogger("storage")
    start = time.perf_counter()
    try:
        yield
    except Exception as exc:
        elapsed = time.perf_counter() - start
        if _metrics_enabled:
            OPERATIONS.labels(backend, operation, "error").inc()
            LATENCY.labels(backend, operation).observe(elapsed)
        logger.warning(
            "storage_error backend=%s operation=%s bucket=%s key=%s duration_ms=%.3f error=%r",
            backend,
            operation,
            bucket or "-",
            key or "-",
            round(elapsed * 1000, 3),
            exc,
            extra={
                "extra": {
                    "backend": backend,
                    "operation": operation,
                    "bucket": bucket,
                    "key": key,
                    "duration_ms": round(elapsed * 1000, 3),
                    "exception": repr(exc),
                }
            },
        )
        raise

    elapsed = time.perf_counter() - start
    if _metrics_enabled:
        OPERATIONS.labels(backend, operation, "success").inc()
        LATENCY.labels(backend, operation).observe(elapsed)
    logger.debug(
        "storage_call backend=%s operation=%s bucket=%s key=%s duration_ms=%.3f",
        backend,
        operation,
        bucket or "-",
        key or "-",
        round(elapsed * 1000, 3),
        extra={
            "extra": {
                "backend": backend,
                "operation": operation,
                "bucket": bucket,
                "key": key,
                "duration_ms": round(elapsed * 1000, 3),
            }
        },
    )
