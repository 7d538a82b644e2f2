"""
API v1 admin routes.

Registration review endpoints for administrators. All routes require
HTTP BASIC AUTH; the authenticated username is recorded as reviewer.
"""

from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, Response

from src.api.dependencies import get_admin, get_registration_service, get_review_service
from src.api.models import (
    ApprovalResponse,
    ErrorResponse,
    MessageResponse,
    NotificationOut,
    NotificationsData,
    NotificationsResponse,
    RegistrationListResponse,
    RegistrationOut,
    RegistrationResponse,
    RejectionResponse,
    RejectRequest,
    StatsOut,
    StatsResponse,
)
from src.domain.models import RegistrationStatus
from src.domain.registration import RegistrationService
from src.domain.review import ReviewService

router = APIRouter(
    prefix="/ticket-registrations",
    tags=["admin"],
    responses={401: {"model": ErrorResponse, "description": "Invalid admin credentials"}},
)

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Registration not found"}}


@router.get("", response_model=RegistrationListResponse, summary="List registrations")
def list_registrations(
    status: RegistrationStatus | None = Query(None, description="Filter by status"),
    admin: str = Depends(get_admin),
    service: RegistrationService = Depends(get_registration_service),
) -> RegistrationListResponse:
    registrations = service.list_registrations(status)
    return RegistrationListResponse(
        count=len(registrations),
        data=[RegistrationOut.from_domain(r) for r in registrations],
    )


# Static paths must be declared before /{registration_id}
@router.get("/stats", response_model=StatsResponse, summary="Registration statistics")
def get_stats(
    admin: str = Depends(get_admin),
    service: ReviewService = Depends(get_review_service),
) -> StatsResponse:
    return StatsResponse(data=StatsOut.from_domain(service.stats()))


@router.get(
    "/notifications",
    response_model=NotificationsResponse,
    summary="Registrant notes",
    description="Registrations carrying a note, with the ones the admin has not yet read.",
)
def get_notifications(
    username: str | None = Query(None, description="Admin whose unread notes are counted"),
    admin: str = Depends(get_admin),
    service: RegistrationService = Depends(get_registration_service),
) -> NotificationsResponse:
    all_notes, unread = service.notifications(username or admin)
    return NotificationsResponse(
        data=NotificationsData(
            all=[NotificationOut.from_domain(r) for r in all_notes],
            unread=[NotificationOut.from_domain(r) for r in unread],
            unread_count=len(unread),
        )
    )


@router.put(
    "/{registration_id}/mark-read",
    response_model=MessageResponse,
    responses=NOT_FOUND,
    summary="Mark a note as read",
)
def mark_note_read(
    registration_id: UUID,
    admin: str = Depends(get_admin),
    service: RegistrationService = Depends(get_registration_service),
) -> MessageResponse:
    service.acknowledge_note(registration_id, admin)
    return MessageResponse(message="Notification marked as read")


@router.delete(
    "/{registration_id}/notification",
    response_model=MessageResponse,
    responses=NOT_FOUND,
    summary="Delete a note",
)
def delete_note(
    registration_id: UUID,
    admin: str = Depends(get_admin),
    service: RegistrationService = Depends(get_registration_service),
) -> MessageResponse:
    service.clear_note(registration_id)
    return MessageResponse(message="Notification deleted successfully")


@router.get(
    "/{registration_id}",
    response_model=RegistrationResponse,
    responses=NOT_FOUND,
    summary="Get a registration",
)
def get_registration(
    registration_id: UUID,
    admin: str = Depends(get_admin),
    service: RegistrationService = Depends(get_registration_service),
) -> RegistrationResponse:
    return RegistrationResponse(data=RegistrationOut.from_domain(service.get(registration_id)))


@router.get(
    "/{registration_id}/download-slip",
    response_class=Response,
    responses={200: {"description": "Bank slip file"}, **NOT_FOUND},
    summary="Download the bank slip",
)
def download_slip(
    registration_id: UUID,
    admin: str = Depends(get_admin),
    service: RegistrationService = Depends(get_registration_service),
) -> Response:
    attachment = service.get_attachment(registration_id)
    return Response(
        content=attachment.data,
        media_type=attachment.content_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(attachment.filename)}"
        },
    )


@router.put(
    "/{registration_id}/approve",
    response_model=ApprovalResponse,
    responses={
        **NOT_FOUND,
        409: {"model": ErrorResponse, "description": "Registration already reviewed"},
        503: {"model": ErrorResponse, "description": "Ticket id could not be generated"},
    },
    summary="Approve a registration",
    description="Assign a ticket id and email the ticket to the registrant. "
    "A failed email does not undo the approval.",
)
def approve_registration(
    registration_id: UUID,
    admin: str = Depends(get_admin),
    service: ReviewService = Depends(get_review_service),
) -> ApprovalResponse:
    return ApprovalResponse.from_domain(service.approve(registration_id, admin))


@router.put(
    "/{registration_id}/reject",
    response_model=RejectionResponse,
    responses={
        **NOT_FOUND,
        409: {"model": ErrorResponse, "description": "Registration already reviewed"},
    },
    summary="Reject a registration",
    description="Email the rejection reason to the registrant and delete the registration.",
)
def reject_registration(
    registration_id: UUID,
    request_data: RejectRequest | None = Body(None),
    admin: str = Depends(get_admin),
    service: ReviewService = Depends(get_review_service),
) -> RejectionResponse:
    reason = request_data.reason if request_data else None
    return RejectionResponse.from_domain(service.reject(registration_id, admin, reason))


@router.delete(
    "/{registration_id}",
    response_model=MessageResponse,
    responses=NOT_FOUND,
    summary="Delete a registration",
)
def delete_registration(
    registration_id: UUID,
    admin: str = Depends(get_admin),
    service: RegistrationService = Depends(get_registration_service),
) -> MessageResponse:
    service.delete(registration_id)
    return MessageResponse(message="Registration deleted successfully")
