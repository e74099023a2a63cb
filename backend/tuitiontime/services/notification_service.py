# backend/tuitiontime/services/notification_service.py
"""
Notification Service for the TuitionTime platform

Renders email templates and hands delivery to Celery once the surrounding
transaction has committed, so a rolled-back booking never produces an
email. In-app notifications are plain rows written in the caller's
transaction.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException
from ..models.booking import Booking
from ..models.enquiry import Enquiry
from ..models.notification import Notification
from ..models.subscription import Subscription
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..tasks import notification_tasks
from .base import BaseService
from .template_service import TemplateService

logger = logging.getLogger(__name__)


class NotificationService(BaseService):
    """Email, SMS and in-app notifications for domain events."""

    def __init__(self, db: Session, template_service: Optional[TemplateService] = None):
        super().__init__(db)
        self.template_service = template_service or TemplateService()
        self.notification_repository = RepositoryFactory.create_notification_repository(db)

    # ------------------------------------------------------------------
    # Delivery primitives
    # ------------------------------------------------------------------

    def send_email(
        self,
        to_email: Optional[str],
        subject: str,
        template_name: str,
        context: Dict[str, Any],
    ) -> bool:
        """Render now, deliver after commit. Returns False when there is no recipient."""
        if not to_email:
            self.logger.info(f"Skipping '{subject}': recipient has no email address")
            return False
        html = self.template_service.render_template(template_name, context)
        self.after_commit(lambda: notification_tasks.send_email.delay(to_email, subject, html))
        return True

    def send_sms(self, phone: Optional[str], message: str) -> bool:
        if not phone:
            return False
        self.after_commit(lambda: notification_tasks.send_sms.delay(phone, message))
        return True

    def create_in_app(
        self,
        user_id: str,
        title: str,
        body: str,
        meta: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        return self.notification_repository.create(
            user_id=user_id, title=title, body=body, meta=meta or {}
        )

    # ------------------------------------------------------------------
    # In-app inbox
    # ------------------------------------------------------------------

    def list_for_user(self, user: User, unread_only: bool = False) -> List[Notification]:
        return self.notification_repository.list_for_user(user.id, unread_only=unread_only)

    @BaseService.measure_operation("mark_notification_read")
    def mark_read(self, user: User, notification_id: str) -> Notification:
        notification = self.notification_repository.get_for_user(notification_id, user.id)
        if notification is None:
            raise NotFoundException("Notification not found")
        with self.transaction():
            notification.is_read = True
        return notification

    # ------------------------------------------------------------------
    # Domain events
    # ------------------------------------------------------------------

    def booking_created(self, booking: Booking, student: User, tutor: User) -> None:
        context = {
            "booking": booking,
            "student_name": student.display_name,
            "tutor_name": tutor.display_name,
        }
        kind = "Demo class" if booking.booking_type == "demo" else "Class"
        self.send_email(
            tutor.email,
            f"New {kind.lower()} booked by {student.display_name}",
            "email/booking_created.html",
            {**context, "recipient_name": tutor.display_name, "for_tutor": True},
        )
        self.send_email(
            student.email,
            f"{kind} booked with {tutor.display_name}",
            "email/booking_created.html",
            {**context, "recipient_name": student.display_name, "for_tutor": False},
        )
        self.create_in_app(
            tutor.id,
            f"New {kind.lower()} booking",
            f"{student.display_name} booked {booking.subject}",
            {"booking_id": booking.id},
        )

    def booking_status_changed(self, booking: Booking, actor: User, recipients: Iterable[User]) -> None:
        for recipient in recipients:
            if recipient.id == actor.id:
                continue
            self.send_email(
                recipient.email,
                f"Your booking is now {booking.status}",
                "email/booking_status.html",
                {
                    "booking": booking,
                    "recipient_name": recipient.display_name,
                    "actor_name": actor.display_name,
                },
            )
            self.create_in_app(
                recipient.id,
                "Booking updated",
                f"{booking.subject} on {booking.booking_date.isoformat()} is now {booking.status}",
                {"booking_id": booking.id, "status": booking.status},
            )

    def enquiry_received(self, enquiry: Enquiry, student: User, tutor: User) -> None:
        self.send_email(
            tutor.email,
            f"New enquiry from {student.display_name}",
            "email/enquiry.html",
            {
                "enquiry": enquiry,
                "recipient_name": tutor.display_name,
                "sender_name": student.display_name,
                "is_reply": False,
            },
        )

    def enquiry_replied(self, enquiry: Enquiry, student: User, tutor: User) -> None:
        self.send_email(
            student.email,
            f"{tutor.display_name} replied to your enquiry",
            "email/enquiry.html",
            {
                "enquiry": enquiry,
                "recipient_name": student.display_name,
                "sender_name": tutor.display_name,
                "is_reply": True,
            },
        )

    def subscription_confirmed(self, subscription: Subscription, student: User, tutor: User) -> None:
        self.send_email(
            student.email,
            f"Your monthly classes with {tutor.display_name} are confirmed",
            "email/subscription_confirmed.html",
            {
                "subscription": subscription,
                "recipient_name": student.display_name,
                "tutor_name": tutor.display_name,
                "bookings": list(subscription.bookings),
            },
        )
