"""
Hospital Service API application.

Request path:
    LoggingMiddleware  -> request id, caller role, metrics
    CORSMiddleware     -> front-end origins (HOSPITAL_SVC_CORS_ORIGINS)
    api/routers/*      -> role gate (core.auth.require_permission) + one service call
    services/*         -> business rules, notification fan-out
    repositories/*     -> SQL against the SQLite file

Run locally:
    HOSPITAL_SVC_JWT_SECRET=... python main.py
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from core.config import API_HOST, API_PORT, API_RELOAD, CORS_ORIGINS
from core.dependencies import get_database
from core.exceptions import setup_exception_handlers
from core.logging_config import setup_logging
from core.middleware import LoggingMiddleware
from core.permission_registry import list_permissions, list_roles
from api.routers import ALL_ROUTERS
from api.routers.health import SERVICE_NAME, SERVICE_VERSION

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, permission registry, database schema.

    The registry is loaded here rather than on the first gated request so a
    malformed permissions.yaml stops the process before it accepts traffic.
    """
    setup_logging()
    logger.info(f"Starting {SERVICE_NAME} {SERVICE_VERSION}...")

    permissions = list_permissions()
    logger.info(
        "Permission registry loaded",
        extra={"roles": list(list_roles()), "permissions": len(permissions)}
    )

    db = get_database()
    logger.info("Database initialized", extra={"db_path": db.db_path})

    yield

    logger.info(f"{SERVICE_NAME} shutting down...")


app = FastAPI(
    title=SERVICE_NAME,
    description="REST API for hospital operations: doctors, general and laboratory inventory, "
                "lab tests, leave requests, appointments, prescriptions and notifications.",
    version=SERVICE_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

setup_exception_handlers(app)

# Registered inner-first: the last middleware added runs outermost
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials="*" not in CORS_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)
app.add_middleware(LoggingMiddleware)

for router in ALL_ROUTERS:
    app.include_router(router)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_RELOAD
    )
