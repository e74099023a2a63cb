# backend/tuitiontime/services/admin_notification_service.py
"""
Admin notification feed.

Operational events (payments captured, payouts, attendance, switch
requests) land in the admin feed and are mirrored to ``settings.admin_email``
when one is configured. Recording a notification never fails the
business operation that triggered it.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import NotFoundException, RepositoryException
from ..models.notification import AdminNotification
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


class AdminNotificationService(BaseService):
    def __init__(self, db: Session, notification_service: Optional[NotificationService] = None):
        super().__init__(db)
        self.repository = RepositoryFactory.create_admin_notification_repository(db)
        self.notification_service = notification_service or NotificationService(db)

    def notify(
        self, title: str, message: str, meta: Optional[Dict[str, Any]] = None
    ) -> Optional[AdminNotification]:
        """
        Add an entry to the admin feed in the current transaction.

        The insert runs in a savepoint, so a failure is rolled back on its
        own and the caller's transaction stays usable. Errors are logged
        and swallowed; returns None in that case.
        """
        try:
            with self.db.begin_nested():
                notification = self.repository.create(
                    title=title, message=message, meta=meta or {}
                )
        except (RepositoryException, SQLAlchemyError) as e:
            self.logger.error(f"Failed to record admin notification '{title}': {str(e)}")
            return None

        if settings.admin_email:
            try:
                self.notification_service.send_email(
                    settings.admin_email,
                    f"[Admin] {title}",
                    "email/admin_alert.html",
                    {"title": title, "message": message, "meta": meta or {}},
                )
            except Exception as e:
                self.logger.error(f"Failed to queue admin email for '{title}': {str(e)}")
        return notification

    def list_notifications(
        self, *, unread_only: bool = False, page: int = 1, per_page: int = 50
    ) -> Tuple[List[AdminNotification], int]:
        return self.repository.list_recent(unread_only=unread_only, page=page, per_page=per_page)

    @BaseService.measure_operation("mark_admin_notification_read")
    def mark_read(self, notification_id: str) -> AdminNotification:
        notification = self.repository.get_by_id(notification_id)
        if notification is None:
            raise NotFoundException("Notification not found")
        with self.transaction():
            notification.is_read = True
        return notification

    @BaseService.measure_operation("mark_all_admin_notifications_read")
    def mark_all_read(self) -> int:
        with self.transaction():
            updated = self.repository.mark_all_read()
        self.logger.info(f"Marked {updated} admin notifications as read")
        return updated
