"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging messages to stdout for development.
"""

import logging
import uuid

from src.domain.models import DeliveryReceipt, TicketData

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - prints verification codes to stdout.
    """

    def send_otp(self, email: str, code: str) -> DeliveryReceipt:
        """
        Log verification code to console (simulates email delivery).

        The code is logged at INFO level to be visible in docker-compose logs.

        Args:
            email: Recipient email address (normalized by domain layer)
            code: 4-digit verification code
        """
        logger.info("[VERIFICATION] Email: %s Code: %s", email, code)
        return self._receipt()

    def send_approval(self, email: str, name: str, ticket: TicketData) -> DeliveryReceipt:
        logger.info(
            "[APPROVAL] Email: %s Name: %s Ticket: %s Banner: %s",
            email,
            name,
            ticket.ticket_id,
            "yes" if ticket.banner else "no",
        )
        return self._receipt()

    def send_rejection(self, email: str, name: str, reason: str) -> DeliveryReceipt:
        logger.info("[REJECTION] Email: %s Name: %s Reason: %s", email, name, reason)
        return self._receipt()

    def _receipt(self) -> DeliveryReceipt:
        return DeliveryReceipt(success=True, message_id=f"console-{uuid.uuid4().hex}")
