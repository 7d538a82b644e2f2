"""
Domain entities and value objects.

Plain dataclasses shared by the domain services, the ports and the
adapters. Nothing here touches I/O.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID


class RegistrationStatus(str, Enum):
    """
    Review lifecycle of a registration.

    State Transitions (forward-only):
    - PENDING -> APPROVED (ticket issued, record kept)
    - PENDING -> REJECTED (notification sent, record deleted)

    REJECTED is never observed in storage because rejection deletes the row.
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Attachment:
    """Proof-of-payment document. ``data`` is empty when only metadata was loaded."""

    filename: str
    content_type: str
    size: int
    data: bytes = b""


@dataclass
class Registration:
    id: UUID
    name: str
    contact_no: str
    email: str
    price: int
    attachment: Attachment
    status: RegistrationStatus = RegistrationStatus.PENDING
    ticket_id: str | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None
    note: str | None = None
    note_acknowledged_by: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class RegistrationStats:
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    total_revenue: int = 0


@dataclass(frozen=True)
class Banner:
    data: bytes
    content_type: str
    size: int
    uploaded_at: datetime


@dataclass
class EventDetails:
    """Singleton record describing the event shown on the public page."""

    date: str = "December 15, 2025"
    time: str = "6:00 PM - 11:00 PM"
    venue: str = "Grand Ballroom"
    banner: Banner | None = None
    updated_at: datetime | None = None
    updated_by: str = "Admin"


@dataclass(frozen=True)
class TicketData:
    """Snapshot handed to the messaging collaborator when a ticket is approved."""

    ticket_id: str
    full_name: str
    email: str
    phone: str
    ticket_type: str
    ticket_price: str
    event_date: str
    event_time: str
    event_venue: str
    banner: Banner | None = None


@dataclass(frozen=True)
class DeliveryReceipt:
    """Outcome of a send request: ``message_id`` on success, ``error`` otherwise."""

    success: bool
    message_id: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class OTPRecord:
    """
    Live one-time passcode for an email.

    Timestamps are clock seconds from the service's clock (monotonic by
    default). ``request_count``/``window_start`` mirror the rate-limit
    window at issuance time.
    """

    code: str
    issued_at: float
    attempts: int = 0
    request_count: int = 1
    window_start: float = 0.0


@dataclass(frozen=True)
class RateWindow:
    request_count: int
    window_start: float


@dataclass(frozen=True)
class VerifiedToken:
    verified_at: float
    expires_at: float


@dataclass(frozen=True)
class OTPIssued:
    email: str
    masked_email: str
    expires_in_seconds: int


@dataclass(frozen=True)
class ApprovalResult:
    registration: Registration
    email_sent: bool
    email_error: str | None = None


@dataclass(frozen=True)
class RejectionResult:
    id: UUID
    email: str
    name: str
    reason: str
    email_sent: bool
    email_error: str | None = None
