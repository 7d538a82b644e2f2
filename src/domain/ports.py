"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from datetime import datetime
from typing import Protocol, TypeVar
from uuid import UUID

from .models import (
    Banner,
    DeliveryReceipt,
    EventDetails,
    Registration,
    RegistrationStats,
    RegistrationStatus,
    TicketData,
)

T = TypeVar("T")


class RegistrationRepository(Protocol):
    """Port interface for registration persistence."""

    def add(self, registration: Registration) -> None:
        """
        Persist a new registration.

        Raises:
            EmailAlreadyRegistered: If the storage-level unique constraint
                on email rejects the row
        """
        ...

    def get(self, registration_id: UUID, with_attachment: bool = False) -> Registration | None:
        """Fetch by id; attachment bytes are loaded only when requested."""
        ...

    def exists_by_email(self, email: str) -> bool:
        """True if any registration (any status) uses this normalized email."""
        ...

    def ticket_id_exists(self, ticket_id: str) -> bool: ...

    def list_registrations(self, status: RegistrationStatus | None = None) -> list[Registration]:
        """List registrations newest first, without attachment bytes."""
        ...

    def approve(
        self,
        registration_id: UUID,
        ticket_id: str,
        reviewed_by: str,
        reviewed_at: datetime,
    ) -> Registration | None:
        """
        Atomically move a PENDING registration to APPROVED.

        Returns:
            The updated registration, or None if the row is missing or
            no longer PENDING

        Raises:
            TicketIdConflict: If ticket_id is already assigned elsewhere
        """
        ...

    def delete(self, registration_id: UUID, status: RegistrationStatus | None = None) -> bool:
        """Remove the row; with status, only while it still has that status."""
        ...

    def stats(self) -> RegistrationStats: ...

    def list_with_notes(self) -> list[Registration]:
        """Registrations carrying a non-blank note, newest first."""
        ...

    def acknowledge_note(self, registration_id: UUID, admin: str) -> bool:
        """Add admin to the note's acknowledged set; False if id unknown."""
        ...

    def clear_note(self, registration_id: UUID) -> bool: ...


class EventDetailsRepository(Protocol):
    """Port interface for the singleton event details record."""

    def get_or_create(self) -> EventDetails: ...

    def update(self, date: str, time: str, venue: str, updated_by: str) -> EventDetails: ...

    def set_banner(self, banner: Banner, updated_by: str) -> EventDetails: ...

    def clear_banner(self, updated_by: str) -> EventDetails: ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send_otp(self, email: str, code: str) -> DeliveryReceipt:
        """
        Send verification code to email address.

        Args:
            email: Recipient email address
            code: 4-digit verification code
        """
        ...

    def send_approval(self, email: str, name: str, ticket: TicketData) -> DeliveryReceipt: ...

    def send_rejection(self, email: str, name: str, reason: str) -> DeliveryReceipt: ...


class ExpiringStore(Protocol[T]):
    """
    Port interface for process-local records with per-key expiry.

    ``put`` replaces any record under the key and schedules its eviction
    after ``ttl_seconds``; eviction removes the record only if it has not
    been replaced since. ``update`` swaps the value in place without
    touching the scheduled eviction.
    """

    def get(self, key: str) -> T | None: ...

    def put(self, key: str, record: T, ttl_seconds: float) -> None: ...

    def update(self, key: str, record: T) -> bool: ...

    def delete(self, key: str) -> bool: ...
