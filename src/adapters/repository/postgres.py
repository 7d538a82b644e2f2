"""
PostgreSQL repository adapters - Implement the domain persistence ports.

This module provides the PostgreSQL implementations of the domain's
RegistrationRepository and EventDetailsRepository ports using psycopg3
with raw SQL.

Integrity Design:
-----------------
1. **UNIQUE (email)**: The application checks for an existing registration
   before inserting, but only the unique index closes the race between two
   concurrent submissions. A violation is translated to
   EmailAlreadyRegistered.

2. **UNIQUE (ticket_id)**: Ticket ids are random; a collision on approval
   surfaces as TicketIdConflict so the domain can draw another id.

3. **Conditional approval**: ``UPDATE ... WHERE status = 'pending'`` makes
   the PENDING -> APPROVED transition atomic; a second approval matches no
   row instead of overwriting the ticket.

4. **Singleton event details**: The row id is pinned to 1 by a CHECK
   constraint and created lazily with ``ON CONFLICT DO NOTHING``.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any
from uuid import UUID

from psycopg import errors
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from src.domain.exceptions import EmailAlreadyRegistered, TicketIdConflict
from src.domain.models import (
    Attachment,
    Banner,
    EventDetails,
    Registration,
    RegistrationStats,
    RegistrationStatus,
)

logger = logging.getLogger(__name__)

EMAIL_CONSTRAINT = "registrations_email_key"
TICKET_CONSTRAINT = "registrations_ticket_id_key"

_REGISTRATION_COLUMNS = """
    id, name, contact_no, email, note, note_acknowledged_by, price,
    attachment_filename, attachment_content_type, attachment_size,
    status, ticket_id, reviewed_by, reviewed_at, rejection_reason,
    created_at, updated_at
"""

_EVENT_COLUMNS = """
    date, time, venue, banner_data, banner_content_type, banner_size,
    banner_uploaded_at, updated_at, updated_by
"""


def _registration_from_row(row: dict[str, Any]) -> Registration:
    return Registration(
        id=row["id"],
        name=row["name"],
        contact_no=row["contact_no"],
        email=row["email"],
        price=row["price"],
        attachment=Attachment(
            filename=row["attachment_filename"],
            content_type=row["attachment_content_type"],
            size=row["attachment_size"],
            data=bytes(row.get("attachment_data") or b""),
        ),
        status=RegistrationStatus(row["status"]),
        ticket_id=row["ticket_id"],
        reviewed_by=row["reviewed_by"],
        reviewed_at=row["reviewed_at"],
        rejection_reason=row["rejection_reason"],
        note=row["note"],
        note_acknowledged_by=list(row["note_acknowledged_by"] or []),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _event_from_row(row: dict[str, Any]) -> EventDetails:
    banner = None
    if row["banner_data"] is not None:
        banner = Banner(
            data=bytes(row["banner_data"]),
            content_type=row["banner_content_type"],
            size=row["banner_size"],
            uploaded_at=row["banner_uploaded_at"],
        )
    return EventDetails(
        date=row["date"],
        time=row["time"],
        venue=row["venue"],
        banner=banner,
        updated_at=row["updated_at"],
        updated_by=row["updated_by"],
    )


class PostgresRegistrationRepository:
    """
    Implements RegistrationRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def add(self, registration: Registration) -> None:
        """
        Insert a new registration.

        Raises:
            EmailAlreadyRegistered: Unique index on email rejected the row
        """
        sql = """
            INSERT INTO registrations (
                id, name, contact_no, email, note, note_acknowledged_by, price,
                attachment_data, attachment_filename, attachment_content_type, attachment_size,
                status, created_at, updated_at
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        """
        attachment = registration.attachment
        params = (
            registration.id,
            registration.name,
            registration.contact_no,
            registration.email,
            registration.note,
            registration.note_acknowledged_by,
            registration.price,
            attachment.data,
            attachment.filename,
            attachment.content_type,
            attachment.size,
            registration.status.value,
            registration.created_at,
            registration.updated_at,
        )

        with self._pool.connection() as conn, conn.cursor() as cursor:
            try:
                cursor.execute(sql, params)
            except errors.UniqueViolation as e:
                conn.rollback()
                if e.diag.constraint_name == EMAIL_CONSTRAINT:
                    raise EmailAlreadyRegistered(
                        "This email has already been registered. Each email can only register once."
                    ) from e
                raise
            conn.commit()

    def get(self, registration_id: UUID, with_attachment: bool = False) -> Registration | None:
        columns = _REGISTRATION_COLUMNS + (", attachment_data" if with_attachment else "")
        sql = f"SELECT {columns} FROM registrations WHERE id = %s"

        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, (registration_id,))
            row = cursor.fetchone()
        return _registration_from_row(row) if row is not None else None

    def exists_by_email(self, email: str) -> bool:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("SELECT 1 FROM registrations WHERE email = %s", (email,))
            return cursor.fetchone() is not None

    def ticket_id_exists(self, ticket_id: str) -> bool:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("SELECT 1 FROM registrations WHERE ticket_id = %s", (ticket_id,))
            return cursor.fetchone() is not None

    def list_registrations(self, status: RegistrationStatus | None = None) -> list[Registration]:
        """List registrations newest first; attachment bytes are never loaded here."""
        if status is None:
            sql = f"SELECT {_REGISTRATION_COLUMNS} FROM registrations ORDER BY created_at DESC"
            params: tuple = ()
        else:
            sql = f"""
                SELECT {_REGISTRATION_COLUMNS} FROM registrations
                WHERE status = %s
                ORDER BY created_at DESC
            """
            params = (status.value,)

        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, params)
            return [_registration_from_row(row) for row in cursor.fetchall()]

    def approve(
        self,
        registration_id: UUID,
        ticket_id: str,
        reviewed_by: str,
        reviewed_at: datetime,
    ) -> Registration | None:
        """
        Move a PENDING registration to APPROVED in one statement.

        Returns:
            Updated registration, or None if the row is missing or not PENDING

        Raises:
            TicketIdConflict: Unique index on ticket_id rejected the id
        """
        sql = f"""
            UPDATE registrations
            SET status = %s, ticket_id = %s, reviewed_by = %s, reviewed_at = %s, updated_at = NOW()
            WHERE id = %s AND status = %s
            RETURNING {_REGISTRATION_COLUMNS}
        """
        params = (
            RegistrationStatus.APPROVED.value,
            ticket_id,
            reviewed_by,
            reviewed_at,
            registration_id,
            RegistrationStatus.PENDING.value,
        )

        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            try:
                cursor.execute(sql, params)
            except errors.UniqueViolation as e:
                conn.rollback()
                if e.diag.constraint_name == TICKET_CONSTRAINT:
                    raise TicketIdConflict(ticket_id) from e
                raise
            row = cursor.fetchone()
            conn.commit()
        return _registration_from_row(row) if row is not None else None

    def delete(self, registration_id: UUID, status: RegistrationStatus | None = None) -> bool:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            if status is None:
                cursor.execute("DELETE FROM registrations WHERE id = %s", (registration_id,))
            else:
                cursor.execute(
                    "DELETE FROM registrations WHERE id = %s AND status = %s",
                    (registration_id, status.value),
                )
            conn.commit()
            return cursor.rowcount == 1

    def stats(self) -> RegistrationStats:
        """Counts by status and revenue from approved registrations."""
        sql = """
            SELECT
                COUNT(*) AS total,
                COUNT(*) FILTER (WHERE status = 'pending') AS pending,
                COUNT(*) FILTER (WHERE status = 'approved') AS approved,
                COUNT(*) FILTER (WHERE status = 'rejected') AS rejected,
                COALESCE(SUM(price) FILTER (WHERE status = 'approved'), 0) AS total_revenue
            FROM registrations
        """
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql)
            row = cursor.fetchone()
        return RegistrationStats(
            total=row["total"],
            pending=row["pending"],
            approved=row["approved"],
            rejected=row["rejected"],
            total_revenue=int(row["total_revenue"]),
        )

    def list_with_notes(self) -> list[Registration]:
        sql = f"""
            SELECT {_REGISTRATION_COLUMNS} FROM registrations
            WHERE note IS NOT NULL AND btrim(note) <> ''
            ORDER BY created_at DESC
        """
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql)
            return [_registration_from_row(row) for row in cursor.fetchall()]

    def acknowledge_note(self, registration_id: UUID, admin: str) -> bool:
        # Always touches the row when it exists so rowcount reports existence
        sql = """
            UPDATE registrations
            SET note_acknowledged_by = CASE
                    WHEN %s = ANY(note_acknowledged_by) THEN note_acknowledged_by
                    ELSE array_append(note_acknowledged_by, %s)
                END,
                updated_at = NOW()
            WHERE id = %s
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (admin, admin, registration_id))
            conn.commit()
            return cursor.rowcount == 1

    def clear_note(self, registration_id: UUID) -> bool:
        sql = """
            UPDATE registrations
            SET note = NULL, note_acknowledged_by = '{}', updated_at = NOW()
            WHERE id = %s
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (registration_id,))
            conn.commit()
            return cursor.rowcount == 1


class PostgresEventDetailsRepository:
    """
    Implements EventDetailsRepository protocol via psycopg3.

    Every write is an upsert on the singleton row so callers never need
    to create it first.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def get_or_create(self) -> EventDetails:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute("INSERT INTO event_details (id) VALUES (1) ON CONFLICT (id) DO NOTHING")
            cursor.execute(f"SELECT {_EVENT_COLUMNS} FROM event_details WHERE id = 1")
            row = cursor.fetchone()
            conn.commit()
        return _event_from_row(row)

    def update(self, date: str, time: str, venue: str, updated_by: str) -> EventDetails:
        sql = f"""
            INSERT INTO event_details (id, date, time, venue, updated_by, updated_at)
            VALUES (1, %s, %s, %s, %s, NOW())
            ON CONFLICT (id) DO UPDATE
            SET date = EXCLUDED.date,
                time = EXCLUDED.time,
                venue = EXCLUDED.venue,
                updated_by = EXCLUDED.updated_by,
                updated_at = NOW()
            RETURNING {_EVENT_COLUMNS}
        """
        return self._write(sql, (date, time, venue, updated_by))

    def set_banner(self, banner: Banner, updated_by: str) -> EventDetails:
        sql = f"""
            INSERT INTO event_details (
                id, banner_data, banner_content_type, banner_size, banner_uploaded_at,
                updated_by, updated_at
            )
            VALUES (1, %s, %s, %s, %s, %s, NOW())
            ON CONFLICT (id) DO UPDATE
            SET banner_data = EXCLUDED.banner_data,
                banner_content_type = EXCLUDED.banner_content_type,
                banner_size = EXCLUDED.banner_size,
                banner_uploaded_at = EXCLUDED.banner_uploaded_at,
                updated_by = EXCLUDED.updated_by,
                updated_at = NOW()
            RETURNING {_EVENT_COLUMNS}
        """
        params = (banner.data, banner.content_type, banner.size, banner.uploaded_at, updated_by)
        return self._write(sql, params)

    def clear_banner(self, updated_by: str) -> EventDetails:
        sql = f"""
            INSERT INTO event_details (id, updated_by, updated_at)
            VALUES (1, %s, NOW())
            ON CONFLICT (id) DO UPDATE
            SET banner_data = NULL,
                banner_content_type = NULL,
                banner_size = NULL,
                banner_uploaded_at = NULL,
                updated_by = EXCLUDED.updated_by,
                updated_at = NOW()
            RETURNING {_EVENT_COLUMNS}
        """
        return self._write(sql, (updated_by,))

    def _write(self, sql: str, params: tuple) -> EventDetails:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, params)
            row = cursor.fetchone()
            conn.commit()
        return _event_from_row(row)


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
