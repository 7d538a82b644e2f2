"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes, plus the
builders used at startup for the long-lived objects kept on app.state.
"""

import logging
import secrets

import bcrypt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from psycopg_pool import ConnectionPool

from src.adapters.cache.memory import InMemoryExpiringStore
from src.adapters.repository.postgres import (
    PostgresEventDetailsRepository,
    PostgresRegistrationRepository,
)
from src.adapters.smtp.console import ConsoleEmailSender
from src.adapters.smtp.smtp import SmtpEmailSender
from src.config.settings import Settings, get_settings
from src.domain.event import EventDetailsService
from src.domain.otp import OTPService
from src.domain.ports import EmailSender, RegistrationRepository
from src.domain.registration import RegistrationService
from src.domain.review import ReviewService

logger = logging.getLogger(__name__)

# Pre-computed bcrypt hash for timing oracle prevention.
# Compared against when no admin hash is configured so every login
# attempt pays the same bcrypt cost.
_DUMMY_BCRYPT_HASH = bcrypt.hashpw(b"dummy_password_for_timing_safety", bcrypt.gensalt(10)).decode()


def build_email_sender(settings: Settings) -> EmailSender:
    """Select the email adapter configured by ``email_backend``."""
    if settings.email_backend == "smtp":
        return SmtpEmailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password,
            sender=settings.email_from,
            support_contact=settings.support_contact,
            otp_expiry_minutes=max(1, settings.otp_expiry_seconds // 60),
            timeout=settings.smtp_timeout,
        )
    return ConsoleEmailSender()


def build_otp_service(
    repository: RegistrationRepository, email_sender: EmailSender, settings: Settings
) -> OTPService:
    """
    Create the process-wide OTP service.

    The service owns in-memory state, so exactly one instance must serve
    all requests; it is created during lifespan startup.
    """
    return OTPService(
        repository=repository,
        email_sender=email_sender,
        otp_store=InMemoryExpiringStore("otp"),
        rate_store=InMemoryExpiringStore("otp-rate"),
        verified_store=InMemoryExpiringStore("verified-email"),
        expiry_seconds=settings.otp_expiry_seconds,
        max_attempts=settings.otp_max_attempts,
        rate_limit=settings.otp_rate_limit,
        rate_window_seconds=settings.otp_rate_window_seconds,
        verification_ttl_seconds=settings.verification_ttl_seconds,
    )


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_repository(request: Request) -> PostgresRegistrationRepository:
    """Create repository with connection pool from app state."""
    pool = get_pool(request)
    return PostgresRegistrationRepository(pool)


def get_event_repository(request: Request) -> PostgresEventDetailsRepository:
    return PostgresEventDetailsRepository(get_pool(request))


def get_email_sender(request: Request) -> EmailSender:
    """Get the email sender created at startup."""
    return request.app.state.email_sender


def get_otp_service(request: Request) -> OTPService:
    """Get the process-wide OTP service from app state."""
    return request.app.state.otp_service


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Shares the OTP service so admission and verification use the same
    per-email locks and verification tokens.
    """
    settings = get_settings()
    return RegistrationService(
        repository=get_repository(request),
        otp_service=get_otp_service(request),
        ticket_price=settings.ticket_price,
        max_attachment_bytes=settings.max_attachment_bytes,
    )


def get_review_service(request: Request) -> ReviewService:
    settings = get_settings()
    return ReviewService(
        repository=get_repository(request),
        event_details=get_event_repository(request),
        email_sender=get_email_sender(request),
        ticket_type=settings.ticket_type,
        max_ticket_attempts=settings.ticket_id_max_attempts,
    )


def get_event_service(request: Request) -> EventDetailsService:
    return EventDetailsService(
        repository=get_event_repository(request),
        max_banner_bytes=get_settings().max_attachment_bytes,
    )


# HTTP BASIC AUTH security scheme for OpenAPI documentation
http_basic = HTTPBasic()


def get_admin(
    credentials: HTTPBasicCredentials = Depends(http_basic),
    settings: Settings = Depends(get_settings),
) -> str:
    """
    Authenticate an administrator from the HTTP BASIC AUTH header.

    Both comparisons always run (constant-time username compare and a
    bcrypt check) so response time does not reveal which part was wrong.

    Returns:
        The admin username, recorded as reviewer on review actions
    """
    username_ok = secrets.compare_digest(
        credentials.username.encode(), settings.admin_username.encode()
    )
    stored_hash = settings.admin_password_hash or _DUMMY_BCRYPT_HASH
    try:
        password_ok = bcrypt.checkpw(credentials.password.encode(), stored_hash.encode())
    except ValueError:
        logger.error("Configured admin password hash is not a valid bcrypt hash")
        password_ok = False

    if not (username_ok and password_ok and settings.admin_password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username
