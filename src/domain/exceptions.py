"""
Domain exceptions - Semantic error types for registration.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Each exception carries an ``error_code`` used by the API layer to
classify failures for clients.
"""


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    error_code = "InternalError"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(RegistrationError):
    """Malformed or missing fields."""

    error_code = "InvalidInput"


class EmailAlreadyRegistered(RegistrationError):
    """A registration already exists for this email (any status)."""

    error_code = "AlreadyRegistered"


class RateLimited(RegistrationError):
    """Too many OTP requests within the rate-limit window."""

    error_code = "RateLimited"

    def __init__(self, message: str = "", retry_after_seconds: int = 0) -> None:
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


class VerificationFailed(RegistrationError):
    """Base class for OTP challenge failures."""

    pass


class OTPNotFound(VerificationFailed):
    """No live OTP for the email."""

    error_code = "NotFoundOrExpired"


class OTPExpired(VerificationFailed):
    """OTP lifetime exceeded."""

    error_code = "Expired"


class OTPAttemptsExceeded(VerificationFailed):
    """Attempt budget exhausted."""

    error_code = "AttemptsExceeded"


class OTPMismatch(VerificationFailed):
    """Wrong code; retry allowed within the attempt budget."""

    error_code = "Mismatch"

    def __init__(self, message: str = "", remaining_attempts: int = 0) -> None:
        super().__init__(message)
        self.remaining_attempts = remaining_attempts


class VerificationRequired(RegistrationError):
    """Email has no live verification token."""

    error_code = "VerificationRequired"


class InvalidAttachment(RegistrationError):
    """Attachment type or size outside policy."""

    error_code = "InvalidAttachment"

    def __init__(self, message: str = "", too_large: bool = False) -> None:
        super().__init__(message)
        self.too_large = too_large


class ResourceNotFound(RegistrationError):
    """Requested entity does not exist."""

    error_code = "NotFound"


class RegistrationNotFound(ResourceNotFound):
    """Unknown registration id."""

    pass


class BannerNotFound(ResourceNotFound):
    """No event banner has been uploaded."""

    pass


class InvalidTransition(RegistrationError):
    """Review action not allowed from the registration's current status."""

    error_code = "InvalidTransition"


class TicketIdConflict(RegistrationError):
    """Ticket id already taken when persisting an approval."""

    error_code = "TicketIdConflict"


class TicketIdGenerationFailed(RegistrationError):
    """No unused ticket id found within the attempt budget."""

    error_code = "IdGenerationFailed"


class DeliveryFailed(RegistrationError):
    """Messaging collaborator could not deliver."""

    error_code = "DeliveryFailed"
