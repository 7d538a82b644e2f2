"""
Email message templates.

Each builder returns ``(subject, html_body, text_body)``. Values that come
from users are HTML-escaped before interpolation.
"""

from html import escape

from src.domain.models import TicketData

BRAND = "Eventazia"


def _layout(title: str, content: str, support_contact: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <style>
    body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
    .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
    .header {{ background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white;
               padding: 30px; text-align: center; border-radius: 10px 10px 0 0; }}
    .content {{ background: #f9f9f9; padding: 30px; border-radius: 0 0 10px 10px; }}
    .code {{ font-size: 32px; font-weight: bold; color: #667eea; letter-spacing: 8px;
             font-family: 'Courier New', monospace; text-align: center; margin: 20px 0; }}
    .footer {{ text-align: center; color: #888; font-size: 12px; margin-top: 20px; }}
    td {{ padding: 4px 12px 4px 0; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header"><h1>{title}</h1></div>
    <div class="content">
      {content}
      <div class="footer">
        <p>Need help? Contact us at {escape(support_contact)}</p>
        <p>{BRAND}</p>
      </div>
    </div>
  </div>
</body>
</html>
"""


def otp_message(code: str, expiry_minutes: int, support_contact: str) -> tuple[str, str, str]:
    subject = f"Your {BRAND} Verification Code"
    content = f"""
      <p>Hello,</p>
      <p>Use the following code to verify your email address:</p>
      <div class="code">{escape(code)}</div>
      <p><strong>This code will expire in {expiry_minutes} minutes.</strong></p>
      <p>If you did not request this code, you can ignore this email.</p>
    """
    text = (
        f"Your {BRAND} verification code is: {code}\n\n"
        f"This code will expire in {expiry_minutes} minutes.\n"
    )
    return subject, _layout("Verify Your Email", content, support_contact), text


def approval_message(name: str, ticket: TicketData, support_contact: str) -> tuple[str, str, str]:
    subject = f"Ticket Approved - {ticket.ticket_id} | {BRAND}"
    banner = '<p><img src="cid:eventBanner" alt="Event banner" width="100%"></p>' if ticket.banner else ""
    rows = [
        ("Ticket ID", ticket.ticket_id),
        ("Name", ticket.full_name),
        ("Email", ticket.email),
        ("Phone", ticket.phone),
        ("Ticket Type", ticket.ticket_type),
        ("Price", ticket.ticket_price),
        ("Date", ticket.event_date),
        ("Time", ticket.event_time),
        ("Venue", ticket.event_venue),
    ]
    table = "".join(
        f"<tr><td><strong>{escape(label)}</strong></td><td>{escape(value)}</td></tr>"
        for label, value in rows
    )
    content = f"""
      {banner}
      <p>Dear {escape(name)},</p>
      <p>Your payment has been verified and your ticket is confirmed.</p>
      <table>{table}</table>
      <p>Please present your ticket ID at the entrance.</p>
    """
    text = f"Dear {name},\n\nYour ticket is confirmed.\n\n" + "".join(
        f"{label}: {value}\n" for label, value in rows
    )
    return subject, _layout("Your Ticket is Confirmed", content, support_contact), text


def rejection_message(name: str, reason: str, support_contact: str) -> tuple[str, str, str]:
    subject = f"{BRAND} Registration - Payment Verification Issue"
    content = f"""
      <p>Dear {escape(name)},</p>
      <p>Unfortunately we could not approve your ticket registration.</p>
      <p><strong>Reason:</strong> {escape(reason)}</p>
      <p>You are welcome to register again with a valid payment slip.</p>
    """
    text = (
        f"Dear {name},\n\nUnfortunately we could not approve your ticket registration.\n\n"
        f"Reason: {reason}\n\nYou are welcome to register again with a valid payment slip.\n"
    )
    return subject, _layout("Registration Update", content, support_contact), text
