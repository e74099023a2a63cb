# backend/tuitiontime/repositories/subscription_repository.py
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from ..models.subscription import Subscription, SubscriptionIntent
from .base_repository import BaseRepository


class SubscriptionIntentRepository(BaseRepository[SubscriptionIntent]):
    def __init__(self, db: Session):
        super().__init__(db, SubscriptionIntent)

    def get_for_student(self, order_id: str, student_id: str) -> Optional[SubscriptionIntent]:
        return self.find_one_by(order_id=order_id, student_id=student_id)


class SubscriptionRepository(BaseRepository[Subscription]):
    def __init__(self, db: Session):
        super().__init__(db, Subscription)

    def get_by_order_id(self, order_id: str) -> Optional[Subscription]:
        return self.find_one_by(payment_order_id=order_id)

    def list_for_student(self, student_id: str) -> List[Subscription]:
        query = (
            self.db.query(Subscription)
            .options(selectinload(Subscription.bookings))
            .filter(Subscription.student_id == student_id)
            .order_by(Subscription.created_at.desc())
        )
        return self._execute(query)
