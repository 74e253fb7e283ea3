"""Campus events FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import InterfaceError, OperationalError

from campus_events.core.auth.router import router as auth_router
from campus_events.core.config import settings
from campus_events.core.database import async_session
from campus_events.core.exceptions import AppException
from campus_events.core.exceptions.handlers import (
    app_exception_handler,
    http_exception_handler,
    store_unavailable_handler,
    validation_exception_handler,
)
from campus_events.core.logging import configure_logging
from campus_events.modules.email_notifications.router import router as email_notifications_router
from campus_events.modules.email_notifications.service import EmailNotificationService
from campus_events.modules.events.router import router as events_router
from campus_events.modules.meetings.router import router as meetings_router
from campus_events.modules.notifications.router import router as notifications_router
from campus_events.modules.registrations.router import router as registrations_router
from campus_events.modules.resource_requests.router import router as resource_requests_router
from campus_events.modules.resources.router import router as resources_router
from campus_events.modules.users.router import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    async with async_session() as session:
        await EmailNotificationService(session).ensure_default_settings()
        await session.commit()
    logger.info("Campus events API started (env=%s)", settings.app_env)
    yield
    # Shutdown


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    configure_logging()
    logger.info("Database: %s", settings.database_url_for_log)

    app = FastAPI(
        title="Campus Events",
        description="University event management: scheduling, resources and approvals",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(OperationalError, store_unavailable_handler)
    app.add_exception_handler(InterfaceError, store_unavailable_handler)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    # Routers
    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(users_router, prefix="/api/v1")
    app.include_router(events_router, prefix="/api/v1")
    app.include_router(resources_router, prefix="/api/v1")
    app.include_router(resource_requests_router, prefix="/api/v1")
    app.include_router(registrations_router, prefix="/api/v1")
    app.include_router(meetings_router, prefix="/api/v1")
    app.include_router(notifications_router, prefix="/api/v1")
    app.include_router(email_notifications_router, prefix="/api/v1")

    return app


app = create_app()
