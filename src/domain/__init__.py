"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for event ticket
registration: email OTP verification, admission of verified
registrations, and the administrator review workflow. It defines its own
port interfaces for infrastructure abstraction, ensuring true hexagonal
architecture decoupling.
"""

from .event import EventDetailsService
from .exceptions import (
    EmailAlreadyRegistered,
    InvalidAttachment,
    InvalidInput,
    InvalidTransition,
    RegistrationError,
    RegistrationNotFound,
    VerificationFailed,
    VerificationRequired,
)
from .models import Registration, RegistrationStatus
from .otp import OTPService
from .ports import EmailSender, EventDetailsRepository, ExpiringStore, RegistrationRepository
from .registration import RegistrationService
from .review import ReviewService

__all__ = [
    "EmailAlreadyRegistered",
    "EmailSender",
    "EventDetailsRepository",
    "EventDetailsService",
    "ExpiringStore",
    "InvalidAttachment",
    "InvalidInput",
    "InvalidTransition",
    "OTPService",
    "Registration",
    "RegistrationError",
    "RegistrationNotFound",
    "RegistrationRepository",
    "RegistrationService",
    "RegistrationStatus",
    "ReviewService",
    "VerificationFailed",
    "VerificationRequired",
]
