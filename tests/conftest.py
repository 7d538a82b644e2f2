"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory fakes of the persistence and email ports (see fakes.py)
- A controllable clock and a manual eviction scheduler
- Domain services wired to those fakes
- A PostgreSQL connection pool for database-backed tests, skipped when
  the database at DATABASE_URL is unreachable
"""

from collections.abc import Generator

import pytest
from fakes import (
    FakeClock,
    FakeEventDetailsRepository,
    FakeRegistrationRepository,
    ManualScheduler,
    RecordingEmailSender,
)
from psycopg_pool import ConnectionPool, PoolTimeout

from src.adapters.cache.memory import InMemoryExpiringStore
from src.adapters.repository.postgres import run_migrations
from src.config.settings import get_settings
from src.domain.event import EventDetailsService
from src.domain.otp import OTPService
from src.domain.registration import RegistrationService
from src.domain.review import ReviewService


@pytest.fixture(scope="session")
def pg_pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool and apply migrations once per test session."""
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=False,
    )
    try:
        pool.open(wait=True, timeout=5)
    except PoolTimeout:
        pool.close()
        pytest.skip("PostgreSQL is not reachable at DATABASE_URL")
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def clean_database(pg_pool: ConnectionPool) -> None:
    """Empty all tables before a database-backed test."""
    with pg_pool.connection() as conn:
        conn.execute("DELETE FROM registrations")
        conn.execute("DELETE FROM event_details")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def repository() -> FakeRegistrationRepository:
    return FakeRegistrationRepository()


@pytest.fixture
def event_repository() -> FakeEventDetailsRepository:
    return FakeEventDetailsRepository()


@pytest.fixture
def sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def otp_service(
    repository: FakeRegistrationRepository,
    sender: RecordingEmailSender,
    clock: FakeClock,
    scheduler: ManualScheduler,
) -> OTPService:
    return OTPService(
        repository=repository,
        email_sender=sender,
        otp_store=InMemoryExpiringStore("otp", scheduler=scheduler),
        rate_store=InMemoryExpiringStore("otp-rate", scheduler=scheduler),
        verified_store=InMemoryExpiringStore("verified-email", scheduler=scheduler),
        clock=clock,
    )


@pytest.fixture
def registration_service(
    repository: FakeRegistrationRepository, otp_service: OTPService
) -> RegistrationService:
    return RegistrationService(repository=repository, otp_service=otp_service)


@pytest.fixture
def review_service(
    repository: FakeRegistrationRepository,
    event_repository: FakeEventDetailsRepository,
    sender: RecordingEmailSender,
) -> ReviewService:
    return ReviewService(repository=repository, event_details=event_repository, email_sender=sender)


@pytest.fixture
def event_service(event_repository: FakeEventDetailsRepository) -> EventDetailsService:
    return EventDetailsService(repository=event_repository)
