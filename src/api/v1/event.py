"""
API v1 event details routes.

Public reads of the event details and banner; updates require admin
HTTP BASIC AUTH.
"""

from fastapi import APIRouter, Depends, File, Response, UploadFile

from src.api.dependencies import get_admin, get_event_service
from src.api.models import (
    ErrorResponse,
    EventDetailsOut,
    EventDetailsRequest,
    EventDetailsResponse,
    MessageResponse,
)
from src.api.uploads import read_limited
from src.domain.event import EventDetailsService

router = APIRouter(prefix="/event-details", tags=["event"])


@router.get("", response_model=EventDetailsResponse, summary="Get event details")
def get_event_details(
    service: EventDetailsService = Depends(get_event_service),
) -> EventDetailsResponse:
    return EventDetailsResponse(data=EventDetailsOut.from_domain(service.get()))


@router.put(
    "",
    response_model=EventDetailsResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields"},
        401: {"model": ErrorResponse, "description": "Invalid admin credentials"},
    },
    summary="Update event details",
)
def update_event_details(
    request_data: EventDetailsRequest,
    admin: str = Depends(get_admin),
    service: EventDetailsService = Depends(get_event_service),
) -> EventDetailsResponse:
    details = service.update(request_data.date, request_data.time, request_data.venue, admin)
    return EventDetailsResponse(
        message="Event details updated successfully",
        data=EventDetailsOut.from_domain(details),
    )


@router.get(
    "/banner",
    response_class=Response,
    responses={
        200: {"description": "Banner image"},
        404: {"model": ErrorResponse, "description": "No banner uploaded"},
    },
    summary="Get the event banner",
)
def get_banner(service: EventDetailsService = Depends(get_event_service)) -> Response:
    banner = service.get_banner()
    return Response(content=banner.data, media_type=banner.content_type)


@router.post(
    "/banner",
    response_model=EventDetailsResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid image"},
        401: {"model": ErrorResponse, "description": "Invalid admin credentials"},
        413: {"model": ErrorResponse, "description": "Image too large"},
    },
    summary="Upload the event banner",
)
def upload_banner(
    banner: UploadFile = File(...),
    admin: str = Depends(get_admin),
    service: EventDetailsService = Depends(get_event_service),
) -> EventDetailsResponse:
    data = read_limited(banner, service.max_banner_bytes)
    details = service.set_banner(data, banner.content_type or "", admin)
    return EventDetailsResponse(
        message="Banner uploaded successfully",
        data=EventDetailsOut.from_domain(details),
    )


@router.delete(
    "/banner",
    response_model=MessageResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid admin credentials"},
        404: {"model": ErrorResponse, "description": "No banner uploaded"},
    },
    summary="Delete the event banner",
)
def delete_banner(
    admin: str = Depends(get_admin),
    service: EventDetailsService = Depends(get_event_service),
) -> MessageResponse:
    service.delete_banner(admin)
    return MessageResponse(message="Banner deleted successfully")
