"""
Request logging and in-memory traffic metrics.

LoggingMiddleware wraps every request: it assigns (or echoes) an X-Request-ID,
logs start and completion, and feeds MetricsCollector, which backs the
/metrics and /metrics/json endpoints.

Besides status classes and latency, the collector answers the questions a
hospital ops dashboard asks: which resources are busy, which roles generate
the traffic, and how often callers are turned away by the token (401) or role
(403) checks.

Middleware order (main.py):
    LoggingMiddleware  (outermost)
    CORSMiddleware
    routes
"""

import logging
import re
import time
import uuid
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Deque, Dict, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from core.logging_config import clear_request_context, set_request_id

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1/"

# Requests slower than this are logged at WARNING
SLOW_REQUEST_MS = 1000.0

# Traffic from callers that never presented a valid token
ANONYMOUS = "anonymous"


def resource_for_path(path: str) -> str:
    """
    Map a request path to the API resource it targets.

    "/api/v1/lab/inventory/3" -> "lab", "/health" -> "operational".
    """
    if not path.startswith(API_PREFIX):
        return "operational"
    return path[len(API_PREFIX):].split("/", 1)[0] or "operational"


# =============================================================================
# METRICS
# =============================================================================

@dataclass
class RequestMetrics:
    """One finished request."""
    timestamp: datetime
    method: str
    path: str
    status_code: int
    duration_ms: float
    request_id: str
    role: Optional[str] = None


@dataclass
class MetricsCollector:
    """
    Counters since process start plus a bounded window of recent requests.

    Latency percentiles are computed over the last ``max_history`` requests;
    every other figure is a running total.
    """
    max_history: int = 1000

    total_requests: int = 0
    status_classes: Counter = field(default_factory=Counter)
    auth_unauthenticated: int = 0
    auth_forbidden: int = 0
    by_resource: Counter = field(default_factory=Counter)
    by_role: Counter = field(default_factory=Counter)

    def __post_init__(self) -> None:
        self._recent: Deque[RequestMetrics] = deque(maxlen=self.max_history)

    def record_request(self, metrics: RequestMetrics) -> None:
        self._recent.append(metrics)
        self.total_requests += 1
        self.status_classes[f"{metrics.status_code // 100}xx"] += 1
        self.by_resource[resource_for_path(metrics.path)] += 1

        if metrics.path.startswith(API_PREFIX):
            self.by_role[metrics.role or ANONYMOUS] += 1

        if metrics.status_code == 401:
            self.auth_unauthenticated += 1
        elif metrics.status_code == 403:
            self.auth_forbidden += 1

    def get_latency_percentiles(self) -> Dict[str, float]:
        """p50/p95/p99 over the recent window, in milliseconds (0 when empty)."""
        if not self._recent:
            return {"p50": 0, "p95": 0, "p99": 0}

        durations: List[float] = sorted(r.duration_ms for r in self._recent)
        last = len(durations) - 1
        return {
            f"p{p}": round(durations[min(int(len(durations) * p / 100), last)], 2)
            for p in (50, 95, 99)
        }

    def get_summary(self) -> Dict:
        latencies = self.get_latency_percentiles()
        return {
            "http_requests_total": self.total_requests,
            "http_requests_2xx_total": self.status_classes["2xx"],
            "http_requests_4xx_total": self.status_classes["4xx"],
            "http_requests_5xx_total": self.status_classes["5xx"],
            "http_request_duration_ms_p50": latencies["p50"],
            "http_request_duration_ms_p95": latencies["p95"],
            "http_request_duration_ms_p99": latencies["p99"],
            "auth_rejections_401_total": self.auth_unauthenticated,
            "auth_rejections_403_total": self.auth_forbidden,
            "http_requests_by_resource": dict(sorted(self.by_resource.items())),
            "http_requests_by_role": dict(sorted(self.by_role.items())),
        }

    def get_prometheus_format(self) -> str:
        """Prometheus text exposition of get_summary()."""
        summary = self.get_summary()
        lines = [
            "# HELP http_requests_total Total HTTP requests",
            "# TYPE http_requests_total counter",
            f"http_requests_total {summary['http_requests_total']}",
            "",
            "# HELP http_requests_by_status HTTP requests by status category",
            "# TYPE http_requests_by_status counter",
        ]
        for status_class in ("2xx", "4xx", "5xx"):
            lines.append(
                f'http_requests_by_status{{status="{status_class}"}} '
                f"{summary[f'http_requests_{status_class}_total']}"
            )

        lines += [
            "",
            "# HELP http_request_duration_ms Request duration in milliseconds",
            "# TYPE http_request_duration_ms gauge",
        ]
        for quantile, key in (("0.5", "p50"), ("0.95", "p95"), ("0.99", "p99")):
            lines.append(
                f'http_request_duration_ms{{quantile="{quantile}"}} '
                f"{summary[f'http_request_duration_ms_{key}']}"
            )

        lines += [
            "",
            "# HELP auth_rejections_total Requests rejected by bearer token checks",
            "# TYPE auth_rejections_total counter",
            f'auth_rejections_total{{reason="unauthenticated"}} {summary["auth_rejections_401_total"]}',
            f'auth_rejections_total{{reason="forbidden"}} {summary["auth_rejections_403_total"]}',
        ]

        for metric, label, counts in (
            ("http_requests_by_resource", "resource", summary["http_requests_by_resource"]),
            ("http_requests_by_role", "role", summary["http_requests_by_role"]),
        ):
            lines += ["", f"# HELP {metric} HTTP requests by {label}", f"# TYPE {metric} counter"]
            lines += [f'{metric}{{{label}="{name}"}} {count}' for name, count in counts.items()]

        return "\n".join(lines) + "\n"


metrics_collector = MetricsCollector()


def get_metrics_collector() -> MetricsCollector:
    return metrics_collector


# =============================================================================
# LOGGING MIDDLEWARE
# =============================================================================

# Incoming ids end up in log lines and the response header
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9-]{1,64}$")


def request_id_from(header: Optional[str]) -> str:
    """Use a well-formed X-Request-ID as is; anything else gets a fresh id."""
    if header and _REQUEST_ID_PATTERN.match(header):
        return header
    return uuid.uuid4().hex[:8]


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Log and measure every request.

    The request id comes from the incoming X-Request-ID header when it is
    a short token of letters, digits and hyphens (so a front-end or gateway
    can correlate), else a short random id. The caller's role is read from
    ``request.state.caller_role``, which core.auth sets once the token has
    been verified.
    """

    QUIET_PATHS = {"/health", "/ready", "/metrics", "/metrics/json", "/docs", "/redoc", "/openapi.json"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request_id_from(request.headers.get("X-Request-ID"))
        set_request_id(request_id)

        method = request.method
        path = request.url.path
        quiet = path in self.QUIET_PATHS
        started = time.perf_counter()

        if not quiet:
            logger.info(
                "Request started",
                extra={
                    "method": method,
                    "path": path,
                    "query": str(request.query_params) if request.query_params else None,
                }
            )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "Request failed with exception",
                extra={"method": method, "path": path, "error": str(e)}
            )
            raise
        finally:
            duration_ms = (time.perf_counter() - started) * 1000
            clear_request_context()

        role = getattr(request.state, "caller_role", None)
        metrics_collector.record_request(RequestMetrics(
            timestamp=datetime.now(timezone.utc),
            method=method,
            path=path,
            status_code=response.status_code,
            duration_ms=duration_ms,
            request_id=request_id,
            role=role,
        ))

        if not quiet:
            slow = duration_ms >= SLOW_REQUEST_MS
            logger.log(
                logging.WARNING if response.status_code >= 400 or slow else logging.INFO,
                "Slow request completed" if slow else "Request completed",
                extra={
                    "request_id": request_id,
                    "method": method,
                    "path": path,
                    "role": role,
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                }
            )

        response.headers["X-Request-ID"] = request_id
        return response
