"""
Module: observability.py
Description: Logging and metrics tracking for the SmartFin demo API.

Features:
    - key=value structured logging with per-request context
    - Counters, gauges and timings kept in memory
    - Timing decorator and context manager
    - Request and upload reporting

Metric keys are built from route templates, never raw URLs, so the number
of keys stays bounded by the number of routes.

Usage:
    from services.observability import logger, metrics, timed

    @timed("summarize")
    def summarize(transactions):
        logger.info("Summarizing", count=len(transactions))
        ...

Author: SmartFin Team
"""

import time
import logging
import functools
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Dict, Any, Optional, Callable
from collections import defaultdict
from contextlib import contextmanager

from config import LOG_LEVEL

# Label for requests that matched no API route (static files, 404s)
UNMATCHED_ROUTE = "unmatched"
MAX_TIMING_SAMPLES = 1000

_log_context: ContextVar[Optional[Dict[str, Any]]] = ContextVar("log_context", default=None)


# =============================================================================
# Structured Logger
# =============================================================================

class StructuredLogger:
    """
    Logger that appends ``key=value`` fields to every message.

    Context set with ``set_context`` lives in a ContextVar, so concurrent
    requests each see only their own fields.
    """

    def __init__(self, name: str = "smartfin", level: str = "INFO"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level, logging.INFO))

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(
                '%(asctime)s | %(levelname)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            self.logger.addHandler(handler)

    @property
    def context(self) -> Dict[str, Any]:
        return dict(_log_context.get() or {})

    def set_context(self, **fields) -> None:
        """Attach fields to every log line in the current request."""
        _log_context.set({**self.context, **fields})

    def clear_context(self) -> None:
        _log_context.set(None)

    def _render(self, message: str, fields: Dict[str, Any]) -> str:
        merged = {**self.context, **fields}
        if not merged:
            return message
        return message + " | " + " | ".join(f"{k}={v}" for k, v in merged.items())

    def debug(self, message: str, **fields) -> None:
        self.logger.debug(self._render(message, fields))

    def info(self, message: str, **fields) -> None:
        self.logger.info(self._render(message, fields))

    def warning(self, message: str, **fields) -> None:
        self.logger.warning(self._render(message, fields))

    def exception(self, message: str, **fields) -> None:
        """Log at ERROR level with the active traceback."""
        self.logger.exception(self._render(message, fields))


# =============================================================================
# Metrics Collector
# =============================================================================

class MetricsCollector:
    """
    In-memory metrics exposed through ``/api/metrics``.

    Collects:
        - Counters (requests, errors, uploads)
        - Gauges (dataset size)
        - Timings (latency samples, last 1000 per key)
    """

    def __init__(self):
        self.counters: Dict[str, int] = defaultdict(int)
        self.gauges: Dict[str, float] = {}
        self.timings: Dict[str, list] = defaultdict(list)
        self._start_time = datetime.now(timezone.utc)

    @property
    def uptime_seconds(self) -> float:
        return (datetime.now(timezone.utc) - self._start_time).total_seconds()

    @staticmethod
    def key(name: str, tags: Optional[Dict[str, str]] = None) -> str:
        """``name`` or ``name:k1=v1,k2=v2`` with tags in sorted order."""
        if not tags:
            return name
        return name + ":" + ",".join(f"{k}={v}" for k, v in sorted(tags.items()))

    def increment(self, name: str, value: int = 1, tags: Dict[str, str] = None) -> None:
        self.counters[self.key(name, tags)] += value

    def gauge(self, name: str, value: float, tags: Dict[str, str] = None) -> None:
        self.gauges[self.key(name, tags)] = value

    def timing(self, name: str, duration_ms: float, tags: Dict[str, str] = None) -> None:
        samples = self.timings[self.key(name, tags)]
        samples.append(duration_ms)
        if len(samples) > MAX_TIMING_SAMPLES:
            del samples[:-MAX_TIMING_SAMPLES]

    def get_summary(self) -> Dict[str, Any]:
        """Counters, gauges and per-key timing statistics."""
        timings = {}
        for name, values in self.timings.items():
            if not values:
                continue
            ordered = sorted(values)
            timings[name] = {
                "count": len(ordered),
                "avg_ms": sum(ordered) / len(ordered),
                "min_ms": ordered[0],
                "max_ms": ordered[-1],
                "p50_ms": ordered[len(ordered) // 2],
                "p95_ms": ordered[int(len(ordered) * 0.95)] if len(ordered) >= 20 else None,
            }

        return {
            "uptime_seconds": self.uptime_seconds,
            "counters": dict(self.counters),
            "gauges": dict(self.gauges),
            "timings": timings,
        }


# =============================================================================
# Timing Helpers
# =============================================================================

@contextmanager
def timed_block(name: str):
    """
    Record success/error counts and duration for a block.

    Example:
        with timed_block("startup.dataset"):
            generate()
    """
    start = time.perf_counter()
    try:
        yield
        metrics.increment(f"{name}.success")
    except Exception:
        metrics.increment(f"{name}.error")
        raise
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        metrics.timing(name, duration_ms)
        logger.debug(f"{name} completed", duration_ms=f"{duration_ms:.2f}")


def timed(name: str = None):
    """
    Decorator form of ``timed_block`` for analytics functions.

    Example:
        @timed("derive_insights")
        def generate(self, transactions):
            ...
    """
    def decorator(func: Callable) -> Callable:
        metric_name = name or func.__name__

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with timed_block(metric_name):
                return func(*args, **kwargs)

        return wrapper

    return decorator


# =============================================================================
# Global Instances
# =============================================================================

logger = StructuredLogger(level=LOG_LEVEL)

metrics = MetricsCollector()


# =============================================================================
# Convenience Functions
# =============================================================================

def route_template(scope: Dict[str, Any]) -> str:
    """Path template of the matched API route, e.g. ``/api/summary``."""
    route = scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE


def log_request(route: str, status_code: int, duration_ms: float) -> None:
    """Log a completed HTTP request; method and path come from the log context."""
    logger.info("Request", route=route, status=status_code, duration_ms=f"{duration_ms:.2f}")
    metrics.increment("http.requests", tags={"route": route, "status": str(status_code)})
    metrics.timing("http.latency", duration_ms, tags={"route": route})


def log_upload(rows_added: int, rows_skipped: int, dataset_size: int) -> None:
    """Log a CSV upload."""
    logger.info("CSV uploaded", added=rows_added, skipped=rows_skipped, dataset_size=dataset_size)
    metrics.increment("uploads.completed")
    metrics.increment("uploads.rows", rows_added)
    metrics.gauge("dataset.size", dataset_size)
