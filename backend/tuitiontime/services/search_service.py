# backend/tuitiontime/services/search_service.py
"""
Search Service for the TuitionTime platform

Tutor search has two modes. With any filter it is a plain paginated
filter over verified tutors. Without filters a student gets
recommendations ("ai" mode) built from their profile and booking history.

Student search lets tutors find students who finished onboarding.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, RECENT_TUTORS_LIMIT, RECOMMENDATION_LIMIT
from ..core.exceptions import ForbiddenException
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..repositories.profile_repository import StudentSearchFilters, TutorSearchFilters
from .base import BaseService

logger = logging.getLogger(__name__)


def clamp_page(page: Optional[int], limit: Optional[int]) -> tuple[int, int]:
    page = max(page or 1, 1)
    limit = min(max(limit or DEFAULT_PAGE_SIZE, 1), MAX_PAGE_SIZE)
    return page, limit


class SearchService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.tutor_repository = RepositoryFactory.create_tutor_profile_repository(db)
        self.student_repository = RepositoryFactory.create_student_profile_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)

    @BaseService.measure_operation("search_tutors")
    def search_tutors(
        self,
        filters: TutorSearchFilters,
        *,
        caller: Optional[User] = None,
        sort: Optional[str] = None,
        page: Optional[int] = 1,
        limit: Optional[int] = DEFAULT_PAGE_SIZE,
    ) -> Dict[str, Any]:
        page, limit = clamp_page(page, limit)
        if filters.is_empty() and caller is not None and caller.is_student:
            items = self.recommend_tutors(caller)
            return {"items": items, "total": len(items), "page": 1, "per_page": limit, "mode": "ai"}

        items, total = self.tutor_repository.search(filters, sort=sort, page=page, per_page=limit)
        return {"items": items, "total": total, "page": page, "per_page": limit, "mode": "filter"}

    def recommend_tutors(self, student: User) -> List[Any]:
        """
        Tutors matching any of the student's subjects, city, past tutors
        or goals. Students without a profile get the newest verified tutors.
        """
        profile = self.student_repository.get_by_user_id(student.id)
        if profile is None:
            return self.tutor_repository.recent_verified(RECENT_TUTORS_LIMIT)
        return self.tutor_repository.recommend(
            subjects=list(profile.subjects or []),
            city=profile.city,
            past_tutor_ids=self.booking_repository.past_tutor_ids(student.id),
            goals=profile.goals,
            limit=RECOMMENDATION_LIMIT,
        )

    @BaseService.measure_operation("search_students")
    def search_students(
        self,
        caller: User,
        filters: StudentSearchFilters,
        *,
        sort: Optional[str] = None,
        page: Optional[int] = 1,
        limit: Optional[int] = DEFAULT_PAGE_SIZE,
    ) -> Dict[str, Any]:
        if not caller.is_tutor:
            raise ForbiddenException("Only tutors can search students")
        page, limit = clamp_page(page, limit)
        items, total = self.student_repository.search(filters, sort=sort, page=page, per_page=limit)
        return {"items": items, "total": total, "page": page, "per_page": limit}
