# backend/tuitiontime/services/email.py
"""
Email delivery backends.

``EmailService`` sends through the Resend API; ``ConsoleEmailService`` logs
the message instead and is used in development and tests. Pick one with
``get_email_service()``, which follows ``settings.email_provider``.
"""

import logging
import re
from typing import Any, Dict, Optional

import resend

from ..core.config import settings
from ..core.exceptions import ServiceException

logger = logging.getLogger(__name__)


def html_to_text(html_content: str) -> str:
    """Convert HTML content to plain text for better deliverability"""
    text = re.sub(r"<[^>]+>", "", html_content)
    text = re.sub(r"\s+", " ", text)
    return text.strip()


class EmailService:
    """Service for sending emails using Resend API."""

    def __init__(self) -> None:
        api_key = settings.resend_api_key
        if not api_key:
            raise ServiceException("Resend API key not configured")

        resend.api_key = api_key
        self.from_email = settings.from_email

    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Send a generic email using Resend.

        Raises:
            ServiceException: If email sending fails
        """
        email_data = {
            "from": self.from_email,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
            "text": text_content or html_to_text(html_content),
        }
        try:
            response = resend.Emails.send(email_data)
        except Exception as e:
            logger.error(f"Failed to send email to {to_email}: {str(e)}")
            raise ServiceException(f"Failed to send email: {str(e)}") from e
        logger.info(f"Email sent successfully to {to_email}: {subject}")
        return dict(response) if response else {}


class ConsoleEmailService:
    """Email backend that only logs what would have been sent."""

    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> Dict[str, Any]:
        logger.info(
            "[console email] to=%s subject=%s body=%s",
            to_email,
            subject,
            (text_content or html_to_text(html_content))[:500],
        )
        return {"id": None, "provider": "console"}


def get_email_service() -> EmailService | ConsoleEmailService:
    if settings.email_provider == "resend":
        return EmailService()
    return ConsoleEmailService()
