from sqlalchemy.orm import Session

from tuitiontime.models.user import User
from tuitiontime.services.admin_notification_service import AdminNotificationService


class TestAdminNotify:
    def test_failed_insert_keeps_caller_transaction(self, db: Session, student: User) -> None:
        service = AdminNotificationService(db)

        with service.transaction():
            student.is_profile_complete = False
            db.flush()
            assert service.notify("Broken entry", None) is None
            kept = service.notify("Payout generated", "One payout is ready")

        db.expire_all()
        assert db.get(User, student.id).is_profile_complete is False
        items, total = service.list_notifications()
        assert total == 1
        assert [item.id for item in items] == [kept.id]

    def test_unread_filter(self, db: Session) -> None:
        service = AdminNotificationService(db)
        with service.transaction():
            first = service.notify("Tutor switch requested", "Asha asked for a new tutor")
            service.notify("Payout settled", "Payout paid to Meera")
        service.mark_read(first.id)

        unread, total = service.list_notifications(unread_only=True)
        assert total == 1
        assert unread[0].title == "Payout settled"
