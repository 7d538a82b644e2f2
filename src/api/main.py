"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures middleware, exception handlers, and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresRegistrationRepository, run_migrations
from src.api.dependencies import build_email_sender, build_otp_service
from src.api.errors import register_exception_handlers
from src.api.v1 import router as v1_router
from src.config.settings import get_settings

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "registration",
        "description": "Email OTP verification and ticket registration submission",
    },
    {
        "name": "admin",
        "description": "Review, approve and reject ticket registrations (HTTP BASIC AUTH)",
    },
    {
        "name": "event",
        "description": "Event details and banner shown on the public page",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool on startup
    - Runs migrations on startup
    - Creates the email sender and the process-wide OTP service
    - Closes connection pool on shutdown
    """
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    logger.info("Starting application...")
    logger.info("Connecting to database...")

    # Create connection pool with explicit sizing
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
    )

    # Run migrations
    logger.info("Running database migrations...")
    run_migrations(pool)

    # Store long-lived objects in app state for dependency injection
    app.state.pool = pool
    app.state.email_sender = build_email_sender(settings)
    app.state.otp_service = build_otp_service(
        PostgresRegistrationRepository(pool), app.state.email_sender, settings
    )

    logger.info(
        "Application startup complete (environment: %s, email backend: %s)",
        settings.environment,
        settings.email_backend,
    )

    yield

    # Shutdown
    logger.info("Shutting down application...")
    pool.close()
    logger.info("Database connection pool closed")


def create_app() -> FastAPI:
    settings = get_settings()
    application = FastAPI(
        title="eventazia",
        description="Event Registration API - Email OTP verification, ticket registration "
        "and administrator review",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    register_exception_handlers(application, expose_details=not settings.is_production)

    # Include v1 API routes
    application.include_router(v1_router, prefix="/api/v1")

    @application.get("/health")
    def health_check(request: Request) -> dict[str, str]:
        """
        Health check endpoint with database validation.

        Returns 200 OK if application and database are healthy.
        Raises exception if database connection fails.
        """
        # Validate database connectivity
        pool = request.app.state.pool
        with pool.connection() as conn:
            conn.execute("SELECT 1")

        return {"status": "healthy"}

    return application


app = create_app()
