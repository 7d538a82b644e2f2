"""
Integration tests for the PostgreSQL repositories.

Tests repository operations against a real PostgreSQL database.
Requires PostgreSQL to be running (via docker-compose).
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import psycopg
import pytest
from fakes import PNG_1KB, make_registration
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import (
    PostgresEventDetailsRepository,
    PostgresRegistrationRepository,
)
from src.domain.exceptions import EmailAlreadyRegistered, TicketIdConflict
from src.domain.models import Banner, RegistrationStatus

pytestmark = pytest.mark.integration

NOW = datetime.now(timezone.utc)


class TestAddAndGet:
    """Tests for add() and get()."""

    def test_add_then_get_round_trips_fields(
        self, repository: PostgresRegistrationRepository
    ) -> None:
        registration = make_registration(note="Need parking")

        repository.add(registration)
        stored = repository.get(registration.id)

        assert stored.email == "jane@example.com"
        assert stored.name == "Jane Doe"
        assert stored.status == RegistrationStatus.PENDING
        assert stored.price == 3000
        assert stored.note == "Need parking"
        assert stored.note_acknowledged_by == []
        assert stored.attachment.filename == "slip.png"
        assert stored.attachment.size == 1024

    def test_get_loads_attachment_bytes_only_on_request(
        self, repository: PostgresRegistrationRepository
    ) -> None:
        """Listing-style reads skip the attachment payload."""
        registration = make_registration()
        repository.add(registration)

        assert repository.get(registration.id).attachment.data == b""
        assert repository.get(registration.id, with_attachment=True).attachment.data == PNG_1KB

    def test_get_unknown_returns_none(self, repository: PostgresRegistrationRepository) -> None:
        assert repository.get(uuid4()) is None

    def test_duplicate_email_raises(self, repository: PostgresRegistrationRepository) -> None:
        """Unique index on email maps to EmailAlreadyRegistered."""
        repository.add(make_registration())

        with pytest.raises(EmailAlreadyRegistered):
            repository.add(make_registration())

    def test_exists_by_email(self, repository: PostgresRegistrationRepository) -> None:
        repository.add(make_registration())

        assert repository.exists_by_email("jane@example.com") is True
        assert repository.exists_by_email("other@example.com") is False


class TestListing:
    """Tests for list_registrations() and stats()."""

    def test_list_newest_first_with_filter(
        self, repository: PostgresRegistrationRepository
    ) -> None:
        older = make_registration("a@example.com", created_at=NOW - timedelta(hours=1))
        newer = make_registration("b@example.com", created_at=NOW)
        repository.add(older)
        repository.add(newer)
        repository.approve(older.id, "EVT-AAAAAA", "alice", NOW)

        everything = repository.list_registrations()
        approved = repository.list_registrations(RegistrationStatus.APPROVED)

        assert [r.email for r in everything] == ["b@example.com", "a@example.com"]
        assert [r.email for r in approved] == ["a@example.com"]
        assert all(r.attachment.data == b"" for r in everything)

    def test_stats(self, repository: PostgresRegistrationRepository) -> None:
        first = make_registration("a@example.com")
        repository.add(first)
        repository.add(make_registration("b@example.com"))
        repository.approve(first.id, "EVT-AAAAAA", "alice", NOW)

        stats = repository.stats()

        assert (stats.total, stats.pending, stats.approved, stats.rejected) == (2, 1, 1, 0)
        assert stats.total_revenue == 3000

    def test_stats_on_empty_table(self, repository: PostgresRegistrationRepository) -> None:
        stats = repository.stats()

        assert stats.total == 0
        assert stats.total_revenue == 0


class TestApprove:
    """Tests for the conditional approve() update."""

    def test_approve_pending(self, repository: PostgresRegistrationRepository) -> None:
        registration = make_registration()
        repository.add(registration)

        approved = repository.approve(registration.id, "EVT-ABC234", "alice", NOW)

        assert approved.status == RegistrationStatus.APPROVED
        assert approved.ticket_id == "EVT-ABC234"
        assert approved.reviewed_by == "alice"
        assert repository.ticket_id_exists("EVT-ABC234") is True

    def test_approve_twice_returns_none(self, repository: PostgresRegistrationRepository) -> None:
        """Second approval does not overwrite the ticket id."""
        registration = make_registration()
        repository.add(registration)
        repository.approve(registration.id, "EVT-ABC234", "alice", NOW)

        assert repository.approve(registration.id, "EVT-XYZ789", "bob", NOW) is None
        assert repository.get(registration.id).ticket_id == "EVT-ABC234"

    def test_approve_unknown_returns_none(self, repository: PostgresRegistrationRepository) -> None:
        assert repository.approve(uuid4(), "EVT-ABC234", "alice", NOW) is None

    def test_duplicate_ticket_id_raises_conflict(
        self, repository: PostgresRegistrationRepository
    ) -> None:
        first = make_registration("a@example.com")
        second = make_registration("b@example.com")
        repository.add(first)
        repository.add(second)
        repository.approve(first.id, "EVT-ABC234", "alice", NOW)

        with pytest.raises(TicketIdConflict):
            repository.approve(second.id, "EVT-ABC234", "alice", NOW)

        assert repository.get(second.id).status == RegistrationStatus.PENDING

    def test_schema_requires_ticket_when_approved(self, pg_pool: ConnectionPool) -> None:
        """An approved row without a ticket id is rejected by the schema."""
        registration = make_registration()
        PostgresRegistrationRepository(pg_pool).add(registration)

        with pytest.raises(psycopg.errors.CheckViolation):
            with pg_pool.connection() as conn:
                conn.execute(
                    "UPDATE registrations SET status = 'approved' WHERE id = %s",
                    (registration.id,),
                )


class TestDeleteAndNotes:
    """Tests for delete() and the note operations."""

    def test_delete(self, repository: PostgresRegistrationRepository) -> None:
        registration = make_registration()
        repository.add(registration)

        assert repository.delete(registration.id) is True
        assert repository.delete(registration.id) is False
        assert repository.exists_by_email("jane@example.com") is False

    def test_delete_with_status_leaves_reviewed_row(
        self, repository: PostgresRegistrationRepository
    ) -> None:
        """Status-guarded delete only removes rows still in that status."""
        registration = make_registration()
        repository.add(registration)
        repository.approve(registration.id, "EVT-ABC234", "alice", NOW)

        assert repository.delete(registration.id, status=RegistrationStatus.PENDING) is False
        assert repository.get(registration.id) is not None

    def test_list_with_notes_skips_blank(self, repository: PostgresRegistrationRepository) -> None:
        repository.add(make_registration("a@example.com", note="Hello"))
        repository.add(make_registration("b@example.com", note="   "))
        repository.add(make_registration("c@example.com"))

        assert [r.email for r in repository.list_with_notes()] == ["a@example.com"]

    def test_acknowledge_note_is_idempotent(
        self, repository: PostgresRegistrationRepository
    ) -> None:
        registration = make_registration(note="Hello")
        repository.add(registration)

        assert repository.acknowledge_note(registration.id, "alice") is True
        assert repository.acknowledge_note(registration.id, "alice") is True
        assert repository.acknowledge_note(registration.id, "bob") is True

        assert repository.get(registration.id).note_acknowledged_by == ["alice", "bob"]
        assert repository.acknowledge_note(uuid4(), "alice") is False

    def test_clear_note(self, repository: PostgresRegistrationRepository) -> None:
        registration = make_registration(note="Hello")
        repository.add(registration)
        repository.acknowledge_note(registration.id, "alice")

        assert repository.clear_note(registration.id) is True

        stored = repository.get(registration.id)
        assert stored.note is None
        assert stored.note_acknowledged_by == []
        assert repository.clear_note(uuid4()) is False


class TestEventDetailsRepository:
    """Tests for the singleton event details row."""

    def test_get_or_create_defaults(self, event_repository: PostgresEventDetailsRepository) -> None:
        details = event_repository.get_or_create()

        assert details.date == "December 15, 2025"
        assert details.venue == "Grand Ballroom"
        assert details.banner is None
        assert event_repository.get_or_create().updated_at == details.updated_at

    def test_update_persists(self, event_repository: PostgresEventDetailsRepository) -> None:
        event_repository.update("March 1, 2026", "7:00 PM", "City Hall", "alice")

        details = event_repository.get_or_create()

        assert (details.date, details.time, details.venue) == ("March 1, 2026", "7:00 PM", "City Hall")
        assert details.updated_by == "alice"

    def test_banner_set_and_clear(self, event_repository: PostgresEventDetailsRepository) -> None:
        banner = Banner(b"\x89PNG-banner", "image/png", 11, NOW)

        with_banner = event_repository.set_banner(banner, "alice")
        cleared = event_repository.clear_banner("bob")

        assert with_banner.banner.data == b"\x89PNG-banner"
        assert with_banner.banner.content_type == "image/png"
        assert cleared.banner is None
        assert cleared.updated_by == "bob"
        assert cleared.venue == "Grand Ballroom"
