# Overview: Outbound email delivery (password reset codes).

"""
SMTP notification collaborator.

Fails closed: if SMTP credentials are not configured, ConfigurationError is
raised before any connection is attempted, so callers never report a code as
sent when it was not.
"""

from __future__ import annotations

import smtplib
import ssl
from email.message import EmailMessage

from flask import current_app

from ..errors import ConfigurationError


RESET_SUBJECT = "Your Password Reset Code"


def password_reset_message(code: str, ttl_minutes: int = 10) -> tuple[str, str]:
    """Return (text, html) bodies for a reset code email."""
    text = (
        "Password Reset Request\n\n"
        "We received a request to reset your password. "
        "Use the verification code below:\n\n"
        f"    {code}\n\n"
        f"This code will expire in {ttl_minutes} minutes.\n"
        "If you did not request this, you can safely ignore this email.\n"
    )
    html = (
        '<div style="font-family: Arial, sans-serif; padding:40px 0;">'
        '<div style="max-width:500px;margin:auto;text-align:center;">'
        "<h2>Password Reset Request</h2>"
        "<p>We received a request to reset your password. "
        "Use the verification code below:</p>"
        f'<p style="font-size:30px;letter-spacing:8px;font-weight:bold;">{code}</p>'
        f"<p>This code will expire in {ttl_minutes} minutes.</p>"
        "<p style=\"font-size:12px;\">If you did not request this, "
        "you can safely ignore this email.</p>"
        "</div></div>"
    )
    return text, html


def send_email(to: str, subject: str, text: str, html: str | None = None) -> None:
    config = current_app.config
    user = config.get("SMTP_USER")
    password = config.get("SMTP_PASSWORD")
    if not user or not password:
        raise ConfigurationError(
            "Email service not configured. Set SMTP_USER and SMTP_PASSWORD."
        )

    message = EmailMessage()
    message["From"] = user
    message["To"] = to
    message["Subject"] = subject
    message.set_content(text)
    if html:
        message.add_alternative(html, subtype="html")

    host = config.get("SMTP_HOST", "smtp.gmail.com")
    port = config.get("SMTP_PORT", 587)
    timeout = config.get("SMTP_TIMEOUT", 10)

    if config.get("SMTP_SECURE"):
        with smtplib.SMTP_SSL(host, port, timeout=timeout, context=ssl.create_default_context()) as smtp:
            smtp.login(user, password)
            smtp.send_message(message)
    else:
        with smtplib.SMTP(host, port, timeout=timeout) as smtp:
            smtp.starttls(context=ssl.create_default_context())
            smtp.login(user, password)
            smtp.send_message(message)

    current_app.logger.info("Sent email %r to %s", subject, to)
