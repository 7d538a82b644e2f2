"""
Registration domain service - Admission and registration queries.

This module contains the admission controller that turns a verified
email into a durable PENDING registration, plus the read/maintenance
operations administrators use on stored registrations.

Admission checks (in order, all before any mutation):
1. name, contact number, email and attachment are present
2. the email holds a live verification token
3. no registration exists for the email (any status)
4. the attachment is an allowed type and within the size limit

On success the registration is persisted and the verification token is
consumed, all under the email's lock shared with ``OTPService``. The
storage-level unique index on email remains the final arbiter.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from .exceptions import (
    EmailAlreadyRegistered,
    InvalidAttachment,
    InvalidInput,
    RegistrationNotFound,
    VerificationRequired,
)
from .models import Attachment, Registration, RegistrationStatus
from .otp import OTPService, normalize_email
from .ports import RegistrationRepository

logger = logging.getLogger(__name__)

ALLOWED_ATTACHMENT_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "application/pdf"})
DEFAULT_ADMIN = "Admin"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def attachment_too_large(max_bytes: int) -> InvalidAttachment:
    limit_mb = max_bytes / (1024 * 1024)
    return InvalidAttachment(f"File too large. Maximum size is {limit_mb:g}MB.", too_large=True)


@dataclass
class RegistrationService:
    """
    Domain service for ticket registrations.

    Orchestrates admission (verification check, uniqueness, attachment
    policy, persistence, token consumption) and exposes the queries used
    by the admin dashboard.
    """

    repository: RegistrationRepository
    otp_service: OTPService
    ticket_price: int = 3000
    max_attachment_bytes: int = 5 * 1024 * 1024
    allowed_attachment_types: frozenset[str] = field(default=ALLOWED_ATTACHMENT_TYPES)
    now: Callable[[], datetime] = utcnow

    def submit(
        self,
        name: str,
        contact_no: str,
        email: str,
        attachment: Attachment | None,
        note: str | None = None,
    ) -> Registration:
        """
        Admit a new registration for a verified email.

        Args:
            name: Registrant full name
            contact_no: Registrant phone number
            email: Verified email (will be normalized)
            attachment: Proof-of-payment document
            note: Optional free-text message for the administrators

        Returns:
            The persisted PENDING registration

        Raises:
            InvalidInput: A required field is missing or blank
            VerificationRequired: Email has no live verification token
            EmailAlreadyRegistered: Email already has a registration
            InvalidAttachment: Attachment type or size outside policy
        """
        name = (name or "").strip()
        contact_no = (contact_no or "").strip()
        if not name or not contact_no or not (email or "").strip():
            raise InvalidInput("Name, contact number, and email are required")
        if attachment is None:
            raise InvalidInput("Bank slip is required")

        normalized_email = normalize_email(email)
        with self.otp_service.locks.hold(normalized_email):
            if not self.otp_service.is_verified(normalized_email):
                raise VerificationRequired(
                    "Email not verified or verification expired. Please verify your email first."
                )
            if self.repository.exists_by_email(normalized_email):
                raise EmailAlreadyRegistered(
                    "This email has already been registered. Each email can only register once."
                )
            self._check_attachment(attachment)

            timestamp = self.now()
            registration = Registration(
                id=uuid4(),
                name=name,
                contact_no=contact_no,
                email=normalized_email,
                price=self.ticket_price,
                attachment=attachment,
                status=RegistrationStatus.PENDING,
                note=(note or "").strip() or None,
                created_at=timestamp,
                updated_at=timestamp,
            )
            self.repository.add(registration)
            self.otp_service.consume_verification(normalized_email)

        logger.info(
            "New ticket registration: %s (bank slip: %s, %.2f KB)",
            normalized_email,
            attachment.filename,
            attachment.size / 1024,
        )
        return registration

    def get(self, registration_id: UUID, with_attachment: bool = False) -> Registration:
        registration = self.repository.get(registration_id, with_attachment=with_attachment)
        if registration is None:
            raise RegistrationNotFound("Registration not found")
        return registration

    def get_attachment(self, registration_id: UUID) -> Attachment:
        """Load the stored proof-of-payment document including its bytes."""
        registration = self.get(registration_id, with_attachment=True)
        if not registration.attachment.data:
            raise RegistrationNotFound("Bank slip not found")
        return registration.attachment

    def list_registrations(self, status: RegistrationStatus | None = None) -> list[Registration]:
        return self.repository.list_registrations(status)

    def delete(self, registration_id: UUID) -> Registration:
        """Administrative removal, independent of review status."""
        registration = self.get(registration_id)
        if not self.repository.delete(registration_id):
            raise RegistrationNotFound("Registration not found")
        logger.info("Registration deleted: %s", registration.email)
        return registration

    def notifications(self, admin: str | None = None) -> tuple[list[Registration], list[Registration]]:
        """
        Registrations carrying a note, split into all and unread for admin.

        Returns:
            Tuple of (all notes, notes the admin has not acknowledged)
        """
        admin = admin or DEFAULT_ADMIN
        with_notes = [r for r in self.repository.list_with_notes() if r.note and r.note.strip()]
        unread = [r for r in with_notes if admin not in r.note_acknowledged_by]
        return with_notes, unread

    def acknowledge_note(self, registration_id: UUID, admin: str | None = None) -> None:
        if not self.repository.acknowledge_note(registration_id, admin or DEFAULT_ADMIN):
            raise RegistrationNotFound("Registration not found")

    def clear_note(self, registration_id: UUID) -> None:
        if not self.repository.clear_note(registration_id):
            raise RegistrationNotFound("Registration not found")
        logger.info("Note cleared for registration %s", registration_id)

    def _check_attachment(self, attachment: Attachment) -> None:
        if attachment.content_type not in self.allowed_attachment_types:
            raise InvalidAttachment("Invalid file type. Only JPG, PNG, and PDF files are allowed.")
        if attachment.size <= 0:
            raise InvalidAttachment("Bank slip is empty")
        if attachment.size > self.max_attachment_bytes:
            raise attachment_too_large(self.max_attachment_bytes)
