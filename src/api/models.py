"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Every JSON response shares the envelope ``{success, message, ...}``.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from src.domain.models import (
    ApprovalResult,
    EventDetails,
    OTPIssued,
    Registration,
    RegistrationStats,
    RegistrationStatus,
    RejectionResult,
)


class SendOTPRequest(BaseModel):
    """Request model for OTP issuance."""

    email: str = Field(..., max_length=254, description="Email address to verify")


class SendOTPResponse(BaseModel):
    """Response model for a sent OTP."""

    success: bool = True
    message: str
    expires_in_seconds: int
    masked_email: str

    @classmethod
    def from_domain(cls, issued: OTPIssued) -> "SendOTPResponse":
        return cls(
            message="OTP sent successfully to your email address",
            expires_in_seconds=issued.expires_in_seconds,
            masked_email=issued.masked_email,
        )


class VerifyOTPRequest(BaseModel):
    """Request model for OTP verification."""

    email: str = Field(..., max_length=254)
    code: str = Field(..., min_length=1, max_length=10, description="Code received by email")


class VerifyOTPResponse(BaseModel):
    success: bool = True
    message: str
    email: str


class AttachmentInfo(BaseModel):
    filename: str
    content_type: str
    size: int


class RegistrationOut(BaseModel):
    """Registration as exposed to administrators (attachment metadata only)."""

    id: UUID
    name: str
    contact_no: str
    email: str
    price: int
    status: RegistrationStatus
    ticket_id: str | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    note: str | None = None
    note_acknowledged_by: list[str] = []
    attachment: AttachmentInfo
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, registration: Registration) -> "RegistrationOut":
        return cls(
            id=registration.id,
            name=registration.name,
            contact_no=registration.contact_no,
            email=registration.email,
            price=registration.price,
            status=registration.status,
            ticket_id=registration.ticket_id,
            reviewed_by=registration.reviewed_by,
            reviewed_at=registration.reviewed_at,
            note=registration.note,
            note_acknowledged_by=list(registration.note_acknowledged_by),
            attachment=AttachmentInfo(
                filename=registration.attachment.filename,
                content_type=registration.attachment.content_type,
                size=registration.attachment.size,
            ),
            created_at=registration.created_at,
            updated_at=registration.updated_at,
        )


class SubmittedRegistration(BaseModel):
    id: UUID
    name: str
    email: str
    status: RegistrationStatus


class SubmitRegistrationResponse(BaseModel):
    success: bool = True
    message: str
    data: SubmittedRegistration

    @classmethod
    def from_domain(cls, registration: Registration) -> "SubmitRegistrationResponse":
        return cls(
            message="Registration submitted successfully! We will verify your payment "
            "and send confirmation within 24 hours.",
            data=SubmittedRegistration(
                id=registration.id,
                name=registration.name,
                email=registration.email,
                status=registration.status,
            ),
        )


class RegistrationResponse(BaseModel):
    success: bool = True
    data: RegistrationOut


class RegistrationListResponse(BaseModel):
    success: bool = True
    count: int
    data: list[RegistrationOut]


class StatsOut(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int
    total_revenue: int

    @classmethod
    def from_domain(cls, stats: RegistrationStats) -> "StatsOut":
        return cls(
            total=stats.total,
            pending=stats.pending,
            approved=stats.approved,
            rejected=stats.rejected,
            total_revenue=stats.total_revenue,
        )


class StatsResponse(BaseModel):
    success: bool = True
    data: StatsOut


class NotificationOut(BaseModel):
    id: UUID
    name: str
    email: str
    note: str
    note_acknowledged_by: list[str]
    status: RegistrationStatus
    created_at: datetime | None = None

    @classmethod
    def from_domain(cls, registration: Registration) -> "NotificationOut":
        return cls(
            id=registration.id,
            name=registration.name,
            email=registration.email,
            note=registration.note or "",
            note_acknowledged_by=list(registration.note_acknowledged_by),
            status=registration.status,
            created_at=registration.created_at,
        )


class NotificationsData(BaseModel):
    all: list[NotificationOut]
    unread: list[NotificationOut]
    unread_count: int


class NotificationsResponse(BaseModel):
    success: bool = True
    data: NotificationsData


class RejectRequest(BaseModel):
    reason: str | None = Field(None, max_length=1000)


class ApprovalOut(BaseModel):
    id: UUID
    name: str
    email: str
    ticket_id: str
    status: RegistrationStatus
    reviewed_by: str | None
    reviewed_at: datetime | None
    email_sent: bool


class ApprovalResponse(BaseModel):
    success: bool = True
    message: str
    data: ApprovalOut

    @classmethod
    def from_domain(cls, result: ApprovalResult) -> "ApprovalResponse":
        registration = result.registration
        if result.email_sent:
            message = "Registration approved successfully. Approval email sent to user."
        else:
            message = "Registration approved, but the approval email could not be sent."
        return cls(
            message=message,
            data=ApprovalOut(
                id=registration.id,
                name=registration.name,
                email=registration.email,
                ticket_id=registration.ticket_id or "",
                status=registration.status,
                reviewed_by=registration.reviewed_by,
                reviewed_at=registration.reviewed_at,
                email_sent=result.email_sent,
            ),
        )


class RejectionOut(BaseModel):
    id: UUID
    email: str
    name: str
    reason: str
    email_sent: bool


class RejectionResponse(BaseModel):
    success: bool = True
    message: str
    data: RejectionOut

    @classmethod
    def from_domain(cls, result: RejectionResult) -> "RejectionResponse":
        if result.email_sent:
            message = "Registration rejected, email sent, and removed from system"
        else:
            message = "Registration rejected and removed from system, but the email could not be sent"
        return cls(
            message=message,
            data=RejectionOut(
                id=result.id,
                email=result.email,
                name=result.name,
                reason=result.reason,
                email_sent=result.email_sent,
            ),
        )


class EventDetailsRequest(BaseModel):
    date: str = Field(..., max_length=200)
    time: str = Field(..., max_length=200)
    venue: str = Field(..., max_length=500)


class EventDetailsOut(BaseModel):
    date: str
    time: str
    venue: str
    has_banner: bool
    banner_uploaded_at: datetime | None = None
    updated_at: datetime | None = None
    updated_by: str

    @classmethod
    def from_domain(cls, details: EventDetails) -> "EventDetailsOut":
        return cls(
            date=details.date,
            time=details.time,
            venue=details.venue,
            has_banner=details.banner is not None,
            banner_uploaded_at=details.banner.uploaded_at if details.banner else None,
            updated_at=details.updated_at,
            updated_by=details.updated_by,
        )


class EventDetailsResponse(BaseModel):
    success: bool = True
    message: str | None = None
    data: EventDetailsOut


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    success: bool = False
    message: str
    error_code: str
    error: str | None = None
