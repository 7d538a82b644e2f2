"""
API v1 public routes.

Defines the endpoints used by registrants:
- POST /send-email-otp - Issue a verification code
- POST /verify-email-otp - Verify the code and unlock registration
- POST /ticket-registrations - Submit a registration with a bank slip
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from src.api.dependencies import get_otp_service, get_registration_service
from src.api.models import (
    ErrorResponse,
    SendOTPRequest,
    SendOTPResponse,
    SubmitRegistrationResponse,
    VerifyOTPRequest,
    VerifyOTPResponse,
)
from src.api.uploads import read_limited
from src.domain.models import Attachment
from src.domain.otp import OTPService
from src.domain.registration import RegistrationService, attachment_too_large

router = APIRouter(tags=["registration"])


@router.post(
    "/send-email-otp",
    response_model=SendOTPResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid email address"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
        429: {"model": ErrorResponse, "description": "Too many OTP requests"},
        502: {"model": ErrorResponse, "description": "OTP email could not be sent"},
    },
    summary="Send an email OTP",
    description="Send a 4-digit verification code to the given email address. "
    "Each email may request at most 3 codes per 15 minutes.",
)
def send_email_otp(
    request_data: SendOTPRequest,
    service: OTPService = Depends(get_otp_service),
) -> SendOTPResponse:
    issued = service.issue_otp(request_data.email)
    return SendOTPResponse.from_domain(issued)


@router.post(
    "/verify-email-otp",
    response_model=VerifyOTPResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Wrong, expired or unknown code"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
    },
    summary="Verify an email OTP",
    description="Submit the code received by email. On success the email may "
    "submit one registration within the next 10 minutes.",
)
def verify_email_otp(
    request_data: VerifyOTPRequest,
    service: OTPService = Depends(get_otp_service),
) -> VerifyOTPResponse:
    email = service.verify_otp(request_data.email, request_data.code)
    return VerifyOTPResponse(message="Email verified successfully", email=email)


@router.post(
    "/ticket-registrations",
    response_model=SubmitRegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Missing fields or invalid bank slip"},
        403: {"model": ErrorResponse, "description": "Email not verified"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
        413: {"model": ErrorResponse, "description": "Bank slip too large"},
    },
    summary="Submit a ticket registration",
    description="Multipart form with the registrant details and the bank slip "
    "(JPG, PNG or PDF, up to 5MB). Requires a verified email.",
)
def submit_registration(
    name: str = Form(""),
    contact_no: str = Form(""),
    email: str = Form(""),
    note: str | None = Form(None),
    bank_slip: UploadFile | None = File(None, alias="bankSlip"),
    service: RegistrationService = Depends(get_registration_service),
) -> SubmitRegistrationResponse:
    """
    Submit a registration for a verified email.

    - **name**, **contact_no**, **email**: registrant details
    - **note**: optional message for the organizers
    - **bankSlip**: proof-of-payment file
    """
    attachment = None
    if bank_slip is not None:
        data = read_limited(bank_slip, service.max_attachment_bytes)
        if len(data) > service.max_attachment_bytes:
            raise attachment_too_large(service.max_attachment_bytes)
        attachment = Attachment(
            filename=bank_slip.filename or "bank-slip",
            content_type=bank_slip.content_type or "application/octet-stream",
            size=len(data),
            data=data,
        )

    registration = service.submit(
        name=name,
        contact_no=contact_no,
        email=email,
        attachment=attachment,
        note=note,
    )
    return SubmitRegistrationResponse.from_domain(registration)
