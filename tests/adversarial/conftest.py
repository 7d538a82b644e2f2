"""
Shared fixtures for adversarial tests.

Provides common test infrastructure for race condition and brute force
tests: the domain services run against PostgreSQL so storage-level
constraints take part in every scenario.
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
