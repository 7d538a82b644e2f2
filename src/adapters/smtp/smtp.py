"""
SMTP email sender adapter - Implements EmailSender protocol.

Sends HTML + plain text messages over an authenticated STARTTLS
connection. Connection errors and timeouts are reported as failed
DeliveryReceipts rather than raised, so callers decide whether a failed
send matters.
"""

import logging
import smtplib
from email.message import EmailMessage
from email.utils import make_msgid

from src.domain.models import Banner, DeliveryReceipt, TicketData

from . import templates

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """
    Implements EmailSender protocol via smtplib.

    Uses structural subtyping - no explicit inheritance from Protocol.
    A new connection is opened per message.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        sender: str,
        support_contact: str,
        otp_expiry_minutes: int = 5,
        timeout: float = 15.0,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._sender = sender
        self._support_contact = support_contact
        self._otp_expiry_minutes = otp_expiry_minutes
        self._timeout = timeout

    def send_otp(self, email: str, code: str) -> DeliveryReceipt:
        subject, html, text = templates.otp_message(
            code, self._otp_expiry_minutes, self._support_contact
        )
        return self._send(email, subject, html, text)

    def send_approval(self, email: str, name: str, ticket: TicketData) -> DeliveryReceipt:
        subject, html, text = templates.approval_message(name, ticket, self._support_contact)
        return self._send(email, subject, html, text, inline_banner=ticket.banner)

    def send_rejection(self, email: str, name: str, reason: str) -> DeliveryReceipt:
        subject, html, text = templates.rejection_message(name, reason, self._support_contact)
        return self._send(email, subject, html, text)

    def build_message(
        self,
        to: str,
        subject: str,
        html: str,
        text: str,
        inline_banner: Banner | None = None,
    ) -> EmailMessage:
        """Assemble a multipart/alternative message, with the banner as a related part."""
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self._sender
        message["To"] = to
        message["Message-ID"] = make_msgid()
        message.set_content(text)
        message.add_alternative(html, subtype="html")

        if inline_banner is not None:
            maintype, _, subtype = inline_banner.content_type.partition("/")
            html_part = message.get_payload()[1]
            html_part.add_related(
                inline_banner.data,
                maintype=maintype,
                subtype=subtype or "jpeg",
                cid="<eventBanner>",
                filename="event-banner",
            )
        return message

    def _send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str,
        inline_banner: Banner | None = None,
    ) -> DeliveryReceipt:
        message = self.build_message(to, subject, html, text, inline_banner)
        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as conn:
                conn.ehlo()
                conn.starttls()
                conn.ehlo()
                if self._username:
                    conn.login(self._username, self._password)
                conn.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP delivery to %s failed: %s", to, e)
            return DeliveryReceipt(success=False, error=str(e))

        logger.info("Email '%s' sent to %s", subject, to)
        return DeliveryReceipt(success=True, message_id=message["Message-ID"])
