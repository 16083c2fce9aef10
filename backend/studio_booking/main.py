# backend/studio_booking/main.py
"""
FastAPI application for the studio booking service.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI

from .core.config import settings
from .core.constants import API_VERSION, SERVICE_NAME
from .core.request_context import install_request_id_filter
from .database import SessionLocal, init_db
from .middleware.prometheus_middleware import PrometheusMiddleware
from .middleware.request_context import RequestContextMiddleware
from .routes.v1 import (
    admin_blocked_windows as admin_blocked_windows_v1,
    admin_settings as admin_settings_v1,
    availability as availability_v1,
    bookings as bookings_v1,
    health as health_v1,
    prometheus as prometheus_v1,
    studios as studios_v1,
)
from .services.studio_service import StudioService

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
)
install_request_id_filter()

logger = logging.getLogger(__name__)


def _bootstrap_database() -> None:
    """Create missing tables and seed the studio catalog."""
    init_db()
    if not settings.seed_studios:
        return
    db = SessionLocal()
    try:
        StudioService(db).seed_default_studios()
    finally:
        db.close()


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info("%s %s starting up...", SERVICE_NAME, API_VERSION)
    logger.info(
        "Environment: %s, studio timezone: %s", settings.environment, settings.studio_timezone
    )
    _bootstrap_database()
    yield
    logger.info("%s shutting down...", SERVICE_NAME)


app = FastAPI(
    title="Studio Booking API",
    description="Availability and conflict-free booking of studio rooms",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)
# Register unified error envelope handlers
from .errors import register_error_handlers  # noqa: E402

register_error_handlers(app)

app.add_middleware(PrometheusMiddleware)
app.add_middleware(RequestContextMiddleware)

api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(availability_v1.router, prefix="/availability")
api_v1.include_router(bookings_v1.router, prefix="/bookings")
api_v1.include_router(studios_v1.router, prefix="/studios")
api_v1.include_router(admin_settings_v1.router, prefix="/admin/settings")
api_v1.include_router(admin_blocked_windows_v1.router, prefix="/admin/blocked-windows")
api_v1.include_router(health_v1.router, prefix="/health")
api_v1.include_router(prometheus_v1.router, prefix="/metrics/prometheus")
app.include_router(api_v1)


@app.get("/")
def read_root() -> dict[str, str]:
    return {"service": SERVICE_NAME, "version": API_VERSION, "docs": "/docs"}
