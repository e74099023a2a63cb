# backend/tuitiontime/main.py
"""
TuitionTime API application.

Mounts every v1 router under ``/api/v1`` plus the unversioned Prometheus
endpoint, and installs CORS, HTTP metrics and the problem-details error
handlers.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.constants import API_V1_PREFIX, BRAND_NAME
from .errors import register_error_handlers
from .init_db import init_db
from .middleware.prometheus_middleware import PrometheusMiddleware
from .routes import prometheus
from .routes.v1 import (
    admin as admin_v1,
    auth as auth_v1,
    availability as availability_v1,
    bookings as bookings_v1,
    catalog as catalog_v1,
    enquiries as enquiries_v1,
    health as health_v1,
    notifications as notifications_v1,
    payments as payments_v1,
    regular_classes as regular_classes_v1,
    sessions as sessions_v1,
    students as students_v1,
    subscriptions as subscriptions_v1,
    tutor_switch as tutor_switch_v1,
    tutors as tutors_v1,
    users as users_v1,
    wallet as wallet_v1,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(f"Environment: {settings.environment}")
    if not settings.is_production:
        init_db()
    if not settings.razorpay_configured:
        logger.warning("Razorpay keys are not configured")
    yield
    logger.info(f"{BRAND_NAME} API shutting down...")


def create_app() -> FastAPI:
    app = FastAPI(
        title=f"{BRAND_NAME} API",
        description="Tutor marketplace: discovery, bookings, subscriptions and payouts",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=app_lifespan,
    )
    register_error_handlers(app)

    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["*"],
    )
    logger.info("CORS allow_origins=%s", settings.cors_origins)

    api_v1 = APIRouter(prefix=API_V1_PREFIX)
    api_v1.include_router(health_v1.router)
    api_v1.include_router(auth_v1.router, prefix="/auth")
    api_v1.include_router(users_v1.router, prefix="/users")
    api_v1.include_router(catalog_v1.router)
    api_v1.include_router(tutors_v1.router, prefix="/tutors")
    api_v1.include_router(students_v1.router, prefix="/students")
    api_v1.include_router(availability_v1.router, prefix="/availability")
    api_v1.include_router(bookings_v1.router, prefix="/bookings")
    api_v1.include_router(subscriptions_v1.router, prefix="/subscriptions")
    api_v1.include_router(regular_classes_v1.router, prefix="/regular-classes")
    api_v1.include_router(sessions_v1.router, prefix="/sessions")
    api_v1.include_router(payments_v1.router, prefix="/payments")
    api_v1.include_router(wallet_v1.router, prefix="/wallet")
    api_v1.include_router(enquiries_v1.router, prefix="/enquiries")
    api_v1.include_router(tutor_switch_v1.router, prefix="/tutor-switch")
    api_v1.include_router(notifications_v1.router, prefix="/notifications")
    api_v1.include_router(admin_v1.router, prefix="/admin")

    app.include_router(api_v1)
    app.include_router(prometheus.router)

    @app.get("/", include_in_schema=False)
    def root() -> dict:
        return {"message": f"{BRAND_NAME} API", "docs": "/docs"}

    return app


app = create_app()
