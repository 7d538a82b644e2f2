"""
Review domain service - Approval and rejection of registrations.

Review State Machine (forward-only)
===================================

    PENDING -> APPROVED   ticket id assigned, record kept, approval email
    PENDING -> REJECTED   rejection email, record deleted

APPROVED and the deletion that follows REJECTED are terminal. Reviewing a
registration that is no longer PENDING raises InvalidTransition; an
approved ticket id is never regenerated.

Notifications are best-effort: the state change is committed first, and
a failed send is logged and reported in the result without undoing it.
"""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

from .exceptions import (
    InvalidTransition,
    RegistrationNotFound,
    TicketIdConflict,
    TicketIdGenerationFailed,
)
from .models import (
    ApprovalResult,
    DeliveryReceipt,
    Registration,
    RegistrationStats,
    RegistrationStatus,
    RejectionResult,
    TicketData,
)
from .ports import EmailSender, EventDetailsRepository, RegistrationRepository
from .registration import DEFAULT_ADMIN, utcnow

logger = logging.getLogger(__name__)

# Excludes look-alikes: I, O, 0, 1
TICKET_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
TICKET_PREFIX = "EVT-"
TICKET_CODE_LENGTH = 6

DEFAULT_REJECTION_REASON = (
    "Payment verification failed. Please ensure your bank slip shows the correct "
    "amount (Rs. 3,000) and transaction details are visible."
)


def generate_ticket_id() -> str:
    """Random ticket id such as EVT-A1B2C3 drawn from the unambiguous alphabet."""
    return TICKET_PREFIX + "".join(
        secrets.choice(TICKET_ALPHABET) for _ in range(TICKET_CODE_LENGTH)
    )


def format_price(amount: int) -> str:
    """Render an amount the way it appears on tickets: Rs. 3,000.00"""
    return f"Rs. {amount:,.2f}"


@dataclass
class ReviewService:
    """Domain service driving registrations to a terminal review state."""

    repository: RegistrationRepository
    event_details: EventDetailsRepository
    email_sender: EmailSender
    ticket_type: str = "General Admission"
    max_ticket_attempts: int = 10
    ticket_id_factory: Callable[[], str] = generate_ticket_id
    now: Callable = utcnow

    def approve(self, registration_id: UUID, reviewer: str | None = None) -> ApprovalResult:
        """
        Approve a PENDING registration and email the ticket.

        Args:
            registration_id: Registration to approve
            reviewer: Admin identity recorded as reviewed_by

        Returns:
            ApprovalResult with the approved registration and delivery outcome

        Raises:
            RegistrationNotFound: Unknown id
            InvalidTransition: Registration is not PENDING
            TicketIdGenerationFailed: No unused ticket id within the attempt budget
        """
        reviewer = reviewer or DEFAULT_ADMIN
        registration = self._get_pending(registration_id)

        approved = self._approve_with_unique_ticket(registration, reviewer)
        logger.info(
            "Registration approved: %s (Ticket: %s) by %s",
            approved.email,
            approved.ticket_id,
            reviewer,
        )

        receipt = self._notify(
            "approval",
            approved.email,
            lambda: self.email_sender.send_approval(
                approved.email, approved.name, self._ticket_data(approved)
            ),
        )
        return ApprovalResult(
            registration=approved, email_sent=receipt.success, email_error=receipt.error
        )

    def reject(
        self, registration_id: UUID, reviewer: str | None = None, reason: str | None = None
    ) -> RejectionResult:
        """
        Reject a PENDING registration: delete it, then notify the registrant.

        The registrant has to go through OTP verification again to resubmit.

        Raises:
            RegistrationNotFound: Unknown id
            InvalidTransition: Registration is not PENDING
        """
        reviewer = reviewer or DEFAULT_ADMIN
        registration = self._get_pending(registration_id)
        rejection_reason = (reason or "").strip() or DEFAULT_REJECTION_REASON

        if not self.repository.delete(registration_id, status=RegistrationStatus.PENDING):
            # Approved or deleted concurrently
            self._get_pending(registration_id)
            raise InvalidTransition("Registration is no longer pending")
        logger.info(
            "Registration rejected: %s by %s - Reason: %s",
            registration.email,
            reviewer,
            rejection_reason,
        )

        receipt = self._notify(
            "rejection",
            registration.email,
            lambda: self.email_sender.send_rejection(
                registration.email, registration.name, rejection_reason
            ),
        )

        return RejectionResult(
            id=registration.id,
            email=registration.email,
            name=registration.name,
            reason=rejection_reason,
            email_sent=receipt.success,
            email_error=receipt.error,
        )

    def stats(self) -> RegistrationStats:
        return self.repository.stats()

    def _get_pending(self, registration_id: UUID) -> Registration:
        registration = self.repository.get(registration_id)
        if registration is None:
            raise RegistrationNotFound("Registration not found")
        if registration.status != RegistrationStatus.PENDING:
            raise InvalidTransition(f"Registration has already been {registration.status.value}")
        return registration

    def _approve_with_unique_ticket(self, registration: Registration, reviewer: str) -> Registration:
        for _ in range(self.max_ticket_attempts):
            ticket_id = self.ticket_id_factory()
            if self.repository.ticket_id_exists(ticket_id):
                continue
            try:
                approved = self.repository.approve(registration.id, ticket_id, reviewer, self.now())
            except TicketIdConflict:
                continue
            if approved is None:
                # Reviewed or deleted concurrently
                self._get_pending(registration.id)
                raise InvalidTransition("Registration is no longer pending")
            return approved

        raise TicketIdGenerationFailed("Failed to generate unique ticket ID")

    def _ticket_data(self, registration: Registration) -> TicketData:
        details = self.event_details.get_or_create()
        return TicketData(
            ticket_id=registration.ticket_id or "",
            full_name=registration.name,
            email=registration.email,
            phone=registration.contact_no,
            ticket_type=self.ticket_type,
            ticket_price=format_price(registration.price),
            event_date=details.date or "TBA",
            event_time=details.time or "TBA",
            event_venue=details.venue or "TBA",
            banner=details.banner,
        )

    def _notify(self, kind: str, email: str, send: Callable[[], DeliveryReceipt]) -> DeliveryReceipt:
        try:
            receipt = send()
        except Exception as e:
            logger.exception("Error sending %s email to %s", kind, email)
            return DeliveryReceipt(success=False, error=str(e))

        if receipt.success:
            logger.info("%s email sent to %s", kind.capitalize(), email)
        else:
            logger.warning("Failed to send %s email to %s: %s", kind, email, receipt.error)
        return receipt
