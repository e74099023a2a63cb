"""Service for sending SMS via Twilio."""

from __future__ import annotations

from enum import Enum
import logging
from typing import Any, Optional

from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client

from ..core.config import settings

logger = logging.getLogger(__name__)

INDIA_COUNTRY_CODE = "+91"


class SMSStatus(str, Enum):
    SUCCESS = "success"
    DISABLED = "disabled"
    ERROR = "error"


def to_e164(phone: str) -> str:
    """Local 10-digit numbers are Indian mobiles."""
    if phone.startswith("+"):
        return phone
    return f"{INDIA_COUNTRY_CODE}{phone}"


class SMSService:
    """Service for sending SMS via Twilio."""

    def __init__(self) -> None:
        auth_token = (
            settings.twilio_auth_token.get_secret_value() if settings.twilio_auth_token else ""
        )
        self.enabled = bool(
            settings.sms_enabled
            and settings.twilio_account_sid
            and auth_token
            and settings.twilio_phone_number
        )

        if self.enabled:
            self.client: Optional[Client] = Client(settings.twilio_account_sid, auth_token)
            self.from_number = settings.twilio_phone_number
        else:
            self.client = None
            self.from_number = None
            logger.info("SMS service disabled - Twilio credentials not configured")

    def send_sms(self, to_number: str, message: str) -> tuple[Optional[dict[str, Any]], SMSStatus]:
        """
        Send an SMS message.

        Args:
            to_number: Recipient phone, 10-digit local or E.164
            message: Message body (truncated to 1600 chars)
        """
        if not self.enabled or self.client is None:
            logger.debug("SMS disabled, would send to %s", to_number)
            return None, SMSStatus.DISABLED

        if not to_number:
            logger.warning("Cannot send SMS: no phone number provided")
            return None, SMSStatus.ERROR

        try:
            sent = self.client.messages.create(
                to=to_e164(to_number),
                from_=self.from_number,
                body=message[:1600],
            )
        except TwilioRestException as exc:
            logger.error("Twilio rejected SMS to %s: %s", to_number, exc.msg)
            return None, SMSStatus.ERROR

        return {"sid": sent.sid, "status": sent.status}, SMSStatus.SUCCESS
