# backend/tuitiontime/repositories/user_repository.py
"""
User Repository for the TuitionTime platform

Handles User lookups by phone, username and role, plus the admin listing
that merges users with their role profiles.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..core.exceptions import RepositoryException
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_phone(self, phone: str) -> Optional[User]:
        return self.find_one_by(phone=phone)

    def get_by_username(self, username: str) -> Optional[User]:
        return self.find_one_by(username=username)

    def get_with_profiles(self, user_id: str) -> Optional[User]:
        try:
            return (
                self.db.query(User)
                .options(selectinload(User.student_profile), selectinload(User.tutor_profile))
                .filter(User.id == user_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading user {user_id} with profiles: {str(e)}")
            raise RepositoryException(f"Failed to retrieve user: {str(e)}")

    def list_with_profiles(
        self,
        *,
        role: Optional[str] = None,
        status: Optional[str] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[User], int]:
        """Users newest first with both profile relationships preloaded."""
        query = self.db.query(User).options(
            selectinload(User.student_profile), selectinload(User.tutor_profile)
        )
        if role:
            query = query.filter(User.role == role)
        if status:
            query = query.filter(User.status == status)
        query = query.order_by(User.created_at.desc(), User.id.desc())
        return self._paginate(query, page, per_page)
