"""
Liveness, readiness and metrics endpoints.

- /health        process is up (no dependency checks)
- /ready         database answers, schema is complete, permission registry loads
- /metrics       Prometheus text
- /metrics/json  same figures as JSON

None of these require a bearer token; they are scraped by infrastructure.
"""
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from core.datetime_utils import utc_now
from core.dependencies import get_database
from core.middleware import get_metrics_collector
from core.permission_registry import list_permissions, list_roles
from repositories.base import Database

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health & Observability"])

SERVICE_NAME = "Hospital Service API"
SERVICE_VERSION = "1.0.0"


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: str


class DependencyStatus(BaseModel):
    name: str
    status: str  # "ok" | "unavailable"
    latency_ms: Optional[float] = None
    message: Optional[str] = None


class ReadyResponse(BaseModel):
    status: str  # "ready" | "not_ready"
    dependencies: List[DependencyStatus]
    timestamp: str


class MetricsResponse(BaseModel):
    http_requests_total: int
    http_requests_2xx_total: int
    http_requests_4xx_total: int
    http_requests_5xx_total: int
    http_request_duration_ms_p50: float
    http_request_duration_ms_p95: float
    http_request_duration_ms_p99: float
    auth_rejections_401_total: int
    auth_rejections_403_total: int
    http_requests_by_resource: Dict[str, int]
    http_requests_by_role: Dict[str, int]


def _timestamp() -> str:
    return utc_now().strftime("%Y-%m-%dT%H:%M:%SZ")


def _probe(name: str, check: Callable[[], str]) -> DependencyStatus:
    """
    Run one readiness check and time it.

    ``check`` returns a short success message or raises; any exception marks
    the dependency unavailable.
    """
    start = time.perf_counter()
    try:
        message = check()
        status = "ok"
    except Exception as e:
        logger.error(f"Readiness check '{name}' failed", extra={"error": str(e)})
        message = f"{type(e).__name__}: {e}"
        status = "unavailable"
    return DependencyStatus(
        name=name,
        status=status,
        latency_ms=round((time.perf_counter() - start) * 1000, 2),
        message=message,
    )


def _database_check(db: Database) -> Callable[[], str]:
    def check() -> str:
        missing = db.missing_tables()
        if missing:
            raise RuntimeError(f"missing tables: {', '.join(missing)}")
        return "SQLite reachable, schema complete"
    return check


def _permissions_check() -> str:
    return f"{len(list_permissions())} permissions across {len(list_roles())} roles"


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "/",
    summary="API root",
    description="Service name, version and links to docs and probes."
)
async def root() -> Dict[str, Any]:
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "docs": "/docs",
        "health": "/health",
        "ready": "/ready",
        "metrics": "/metrics"
    }


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Returns 200 while the process is running. Does not touch the database."
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", version=SERVICE_VERSION, timestamp=_timestamp())


@router.get(
    "/ready",
    response_model=ReadyResponse,
    summary="Readiness probe",
    description="Checks the database and the permission registry. Returns 503 when either is unavailable."
)
async def readiness_check(response: Response, db: Database = Depends(get_database)) -> ReadyResponse:
    dependencies = [
        _probe("database", _database_check(db)),
        _probe("permissions", _permissions_check),
    ]

    ready = all(d.status == "ok" for d in dependencies)
    if not ready:
        response.status_code = 503

    return ReadyResponse(
        status="ready" if ready else "not_ready",
        dependencies=dependencies,
        timestamp=_timestamp()
    )


@router.get(
    "/metrics",
    summary="Prometheus metrics",
    description="Request counts by status class, resource and role; latency percentiles; "
                "401/403 rejection counts."
)
async def get_metrics() -> Response:
    return Response(
        content=get_metrics_collector().get_prometheus_format(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@router.get(
    "/metrics/json",
    response_model=MetricsResponse,
    summary="JSON metrics",
    description="The /metrics figures as JSON, for dashboards that do not speak Prometheus."
)
async def get_metrics_json() -> MetricsResponse:
    return MetricsResponse(**get_metrics_collector().get_summary())
