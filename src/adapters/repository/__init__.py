"""Repository adapters - Database implementations."""

from .postgres import PostgresEventDetailsRepository, PostgresRegistrationRepository, run_migrations

__all__ = ["PostgresEventDetailsRepository", "PostgresRegistrationRepository", "run_migrations"]
