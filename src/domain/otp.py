"""
OTP domain service - Email ownership verification.

This module implements the one-time passcode flow that gates registration.

OTP State Machine
=================

Per email, at most one live OTP record exists:

    (none) --issue--> ISSUED
    ISSUED --issue--> ISSUED        (record replaced, old code invalid)
    ISSUED --wrong code--> ISSUED   (attempts + 1)
    ISSUED --last wrong code--> (none)
    ISSUED --expired--> (none)
    ISSUED --right code--> (none) + VERIFIED token

A VERIFIED token authorizes exactly one registration submission for the
email until it expires or is consumed by admission.

All reads and writes for one email happen while holding that email's
lock from ``KeyedLocks``, so issue / verify / admit never interleave for
the same address. Delivery of the code happens outside the lock.
"""

import logging
import math
import re
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from .exceptions import (
    DeliveryFailed,
    EmailAlreadyRegistered,
    InvalidInput,
    OTPAttemptsExceeded,
    OTPExpired,
    OTPMismatch,
    OTPNotFound,
    RateLimited,
)
from .locks import KeyedLocks
from .models import OTPIssued, OTPRecord, RateWindow, VerifiedToken
from .ports import EmailSender, ExpiringStore, RegistrationRepository

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
OTP_DIGITS = 4


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


def mask_email(email: str) -> str:
    """Keep the first two characters of the local part, mask the rest."""
    local, _, domain = email.partition("@")
    return f"{local[:2]}***@{domain}"


def generate_otp() -> str:
    """
    Generate cryptographically secure 4-digit verification code.

    Returns string to preserve leading zeros.
    """
    return "".join(secrets.choice("0123456789") for _ in range(OTP_DIGITS))


@dataclass
class OTPService:
    """
    Domain service for email OTP issuance and verification.

    Owns the three process-local stores (live codes, rate-limit windows,
    verified emails) and is meant to live for the whole process.
    """

    repository: RegistrationRepository
    email_sender: EmailSender
    otp_store: ExpiringStore[OTPRecord]
    rate_store: ExpiringStore[RateWindow]
    verified_store: ExpiringStore[VerifiedToken]
    locks: KeyedLocks = field(default_factory=KeyedLocks)
    clock: Callable[[], float] = time.monotonic
    expiry_seconds: int = 300
    max_attempts: int = 3
    rate_limit: int = 3
    rate_window_seconds: int = 900
    verification_ttl_seconds: int = 600

    def issue_otp(self, email: str) -> OTPIssued:
        """
        Issue a fresh code for the email and request its delivery.

        Args:
            email: Address to verify (will be normalized)

        Returns:
            OTPIssued with the masked address and the code lifetime

        Raises:
            InvalidInput: Email is not syntactically valid
            EmailAlreadyRegistered: A registration already uses the email
            RateLimited: Issuance budget for the current window is spent
            DeliveryFailed: The code was stored but could not be sent
        """
        normalized_email = normalize_email(email or "")
        if not EMAIL_PATTERN.match(normalized_email):
            raise InvalidInput("Invalid email address format")

        with self.locks.hold(normalized_email):
            if self.repository.exists_by_email(normalized_email):
                raise EmailAlreadyRegistered(
                    "This email has already been registered. Each email can only register once."
                )

            now = self.clock()
            window = self._next_window(normalized_email, now)
            code = generate_otp()
            record = OTPRecord(
                code=code,
                issued_at=now,
                attempts=0,
                request_count=window.request_count,
                window_start=window.window_start,
            )
            self.otp_store.put(normalized_email, record, self.expiry_seconds)

        # The record is kept even if delivery fails; the issuance still
        # counts against the rate limit.
        try:
            receipt = self.email_sender.send_otp(normalized_email, code)
        except Exception as e:
            logger.exception("Error sending OTP email to %s", normalized_email)
            raise DeliveryFailed("Failed to send email") from e
        if not receipt.success:
            logger.warning("OTP delivery failed for %s: %s", normalized_email, receipt.error)
            raise DeliveryFailed(receipt.error or "Failed to send email")

        logger.info(
            "OTP issued for %s (request %d of %d in window)",
            normalized_email,
            window.request_count,
            self.rate_limit,
        )
        return OTPIssued(
            email=normalized_email,
            masked_email=mask_email(normalized_email),
            expires_in_seconds=self.expiry_seconds,
        )

    def verify_otp(self, email: str, code: str) -> str:
        """
        Check a submitted code and mark the email verified on success.

        Args:
            email: Address the code was issued for (will be normalized)
            code: Code entered by the user

        Returns:
            Normalized email address

        Raises:
            InvalidInput: Email or code missing
            OTPNotFound: No live code for the email
            OTPExpired: Code lifetime exceeded (record removed)
            OTPAttemptsExceeded: Attempt budget already spent (record removed)
            OTPMismatch: Wrong code, carries the remaining attempt count
            EmailAlreadyRegistered: Email was registered meanwhile (record removed)
        """
        if not email or not code:
            raise InvalidInput("Email and OTP are required")
        normalized_email = normalize_email(email)

        with self.locks.hold(normalized_email):
            record = self.otp_store.get(normalized_email)
            if record is None:
                raise OTPNotFound("OTP not found or has expired. Please request a new one.")

            now = self.clock()
            if now - record.issued_at > self.expiry_seconds:
                self.otp_store.delete(normalized_email)
                raise OTPExpired("OTP has expired. Please request a new one.")

            if record.attempts >= self.max_attempts:
                self.otp_store.delete(normalized_email)
                raise OTPAttemptsExceeded(
                    "Maximum verification attempts exceeded. Please request a new OTP."
                )

            if not secrets.compare_digest(record.code.encode(), code.strip().encode()):
                attempts = record.attempts + 1
                remaining = self.max_attempts - attempts
                if remaining <= 0:
                    self.otp_store.delete(normalized_email)
                else:
                    self.otp_store.update(normalized_email, replace(record, attempts=attempts))
                logger.info("OTP mismatch for %s (%d remaining)", normalized_email, remaining)
                raise OTPMismatch(
                    f"Invalid OTP. {remaining} attempt{'s' if remaining != 1 else ''} remaining.",
                    remaining_attempts=remaining,
                )

            # Registration may have landed between issuance and now
            if self.repository.exists_by_email(normalized_email):
                self.otp_store.delete(normalized_email)
                raise EmailAlreadyRegistered("This email has already been registered.")

            self.otp_store.delete(normalized_email)
            self.verified_store.put(
                normalized_email,
                VerifiedToken(verified_at=now, expires_at=now + self.verification_ttl_seconds),
                self.verification_ttl_seconds,
            )

        logger.info("OTP verified for %s", normalized_email)
        return normalized_email

    def is_verified(self, email: str) -> bool:
        """True iff a live verification token exists; expired tokens are evicted here too."""
        normalized_email = normalize_email(email)
        with self.locks.hold(normalized_email):
            token = self.verified_store.get(normalized_email)
            if token is None:
                return False
            if self.clock() >= token.expires_at:
                self.verified_store.delete(normalized_email)
                return False
            return True

    def consume_verification(self, email: str) -> None:
        """Drop the verification token once a registration has been admitted."""
        normalized_email = normalize_email(email)
        with self.locks.hold(normalized_email):
            self.verified_store.delete(normalized_email)

    def _next_window(self, email: str, now: float) -> RateWindow:
        """Advance the email's rate-limit window or raise RateLimited."""
        current = self.rate_store.get(email)
        if current is not None and now - current.window_start < self.rate_window_seconds:
            if current.request_count >= self.rate_limit:
                retry_after = math.ceil(self.rate_window_seconds - (now - current.window_start))
                raise RateLimited(
                    "Too many OTP requests. Please try again in "
                    f"{self.rate_window_seconds // 60} minutes.",
                    retry_after_seconds=retry_after,
                )
            window = RateWindow(current.request_count + 1, current.window_start)
            self.rate_store.update(email, window)
            return window

        window = RateWindow(request_count=1, window_start=now)
        self.rate_store.put(email, window, self.rate_window_seconds)
        return window
