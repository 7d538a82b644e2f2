"""
Shared fixtures for integration tests.

Replaces the in-memory repositories with the PostgreSQL adapters.
Requires PostgreSQL to be running (via docker-compose); tests are
skipped otherwise.
"""

import pytest
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import (
    PostgresEventDetailsRepository,
    PostgresRegistrationRepository,
)


@pytest.fixture
def repository(pg_pool: ConnectionPool, clean_database: None) -> PostgresRegistrationRepository:
    """Create repository instance on an empty database for each test."""
    return PostgresRegistrationRepository(pg_pool)


@pytest.fixture
def event_repository(
    pg_pool: ConnectionPool, clean_database: None
) -> PostgresEventDetailsRepository:
    return PostgresEventDetailsRepository(pg_pool)
