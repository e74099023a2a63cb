# backend/tuitiontime/tasks/notification_tasks.py
"""
Notification delivery tasks.

Tasks receive fully rendered payloads and never touch the database, so a
worker only needs provider credentials.
"""

import logging
from typing import Any, Dict

from ..services.email import get_email_service
from ..services.sms_service import SMSService, SMSStatus
from .celery_app import BaseTask, celery_app

logger = logging.getLogger(__name__)


@celery_app.task(base=BaseTask, name="tuitiontime.tasks.notifications.send_email")
def send_email(to_email: str, subject: str, html_content: str) -> Dict[str, Any]:
    """Deliver one email through the configured provider."""
    response = get_email_service().send_email(to_email, subject, html_content)
    return {"status": "sent", "to": to_email, "provider_id": response.get("id")}


@celery_app.task(base=BaseTask, name="tuitiontime.tasks.notifications.send_sms")
def send_sms(phone: str, message: str) -> Dict[str, Any]:
    result, status = SMSService().send_sms(phone, message)
    if status == SMSStatus.DISABLED:
        logger.info("SMS disabled; message for %s not sent", phone)
    elif status == SMSStatus.ERROR:
        # No retry; Twilio rejections are not transient
        logger.warning("SMS delivery failed for %s", phone)
    return {"status": status.value, "sid": (result or {}).get("sid")}
