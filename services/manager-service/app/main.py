"""FastAPI application wiring for the manager service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool

from .adapters.mail import build_notifier
from .adapters.media import LocalImageStore
from .api.routes import router as v1_router
from .config import Settings, get_settings
from .domain.service import ManagerService
from .domain.traversal import TicketTraversal
from .repository import BoardRepository, ManagerRepository, ProjectRepository, TicketRepository
from .security.credentials import build_credential_generator
from .security.identity import PostgresIdentityRegistrar

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_manager_service(pool: ConnectionPool, settings: Settings) -> ManagerService:
    """Assemble the manager service from Postgres, mail, and filesystem adapters."""
    return ManagerService(
        ManagerRepository(pool),
        PostgresIdentityRegistrar(pool, min_password_length=settings.password_min_length),
        build_notifier(settings),
        build_credential_generator(
            settings.credential_strategy,
            secret=settings.credential_secret,
            length=settings.credential_length,
        ),
        images=LocalImageStore(settings.media_root, settings.media_base_url),
        admin_email=settings.admin_email,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise shared resources (Postgres pool, services) for the app lifecycle."""
    pool = ConnectionPool(settings.database_url, open=False)
    pool.open()
    app.state.pool = pool
    app.state.manager_service = build_manager_service(pool, settings)
    app.state.ticket_traversal = TicketTraversal(
        BoardRepository(pool), ProjectRepository(pool), TicketRepository(pool)
    )
    logger.info("%s %s started", settings.app_name, settings.version)
    try:
        yield
    finally:
        pool.close()
        pool.wait_close()


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

# CORS for local frontend dev
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=600,
)


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


@app.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(v1_router)
