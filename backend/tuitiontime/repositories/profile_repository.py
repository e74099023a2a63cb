# backend/tuitiontime/repositories/profile_repository.py
"""
Profile repositories for students and tutors.

Search helpers match list-valued columns (subjects, boards, class levels,
availability dates) with a case-insensitive substring test on the
column's text form, which behaves the same on PostgreSQL arrays and on the
JSON text used by SQLite.
"""

from dataclasses import dataclass, field
from decimal import Decimal
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import String, cast, or_
from sqlalchemy.orm import Session, joinedload

from ..core.enums import UserRole, UserStatus
from ..models.profiles import StudentProfile, TutorProfile
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

TUTOR_SORT_FIELDS: Dict[str, Any] = {
    "createdAt": TutorProfile.created_at,
    "created_at": TutorProfile.created_at,
    "hourlyRate": TutorProfile.hourly_rate,
    "hourly_rate": TutorProfile.hourly_rate,
    "experience": TutorProfile.experience,
    "rating": TutorProfile.rating,
}

STUDENT_SORT_FIELDS: Dict[str, Any] = {
    "createdAt": StudentProfile.created_at,
    "created_at": StudentProfile.created_at,
    "name": StudentProfile.name,
}


def _contains(column: Any, term: str) -> Any:
    return cast(column, String).ilike(f"%{term.strip()}%")


def _order_clause(sort: Optional[str], fields: Dict[str, Any], default: Any) -> Any:
    """Translate ``field_asc`` / ``field_desc`` into an ORDER BY clause."""
    if not sort or "_" not in sort:
        return default.desc()
    name, _, direction = sort.rpartition("_")
    column = fields.get(name)
    if column is None:
        return default.desc()
    return column.asc() if direction.lower() == "asc" else column.desc()


@dataclass
class TutorSearchFilters:
    city: Optional[str] = None
    subject: Optional[str] = None
    class_level: Optional[str] = None
    board: Optional[str] = None
    gender: Optional[str] = None
    teaching_mode: Optional[str] = None
    min_experience: Optional[int] = None
    max_experience: Optional[int] = None
    min_rate: Optional[Decimal] = None
    max_rate: Optional[Decimal] = None

    def is_empty(self) -> bool:
        return all(value in (None, "") for value in vars(self).values())


@dataclass
class StudentSearchFilters:
    city: Optional[str] = None
    pincode: Optional[str] = None
    board: Optional[str] = None
    class_level: Optional[str] = None
    subject: Optional[str] = None
    gender: Optional[str] = None
    availability: List[str] = field(default_factory=list)


class StudentProfileRepository(BaseRepository[StudentProfile]):
    def __init__(self, db: Session):
        super().__init__(db, StudentProfile)

    def get_by_user_id(self, user_id: str) -> Optional[StudentProfile]:
        return self.find_one_by(user_id=user_id)

    def search(
        self,
        filters: StudentSearchFilters,
        *,
        sort: Optional[str],
        page: int,
        per_page: int,
    ) -> Tuple[List[StudentProfile], int]:
        """Profiles of active students who completed onboarding."""
        query = (
            self.db.query(StudentProfile)
            .join(User, User.id == StudentProfile.user_id)
            .filter(
                User.role == UserRole.STUDENT.value,
                User.status == UserStatus.ACTIVE.value,
                User.is_profile_complete.is_(True),
            )
        )
        if filters.city:
            query = query.filter(StudentProfile.city.ilike(f"%{filters.city.strip()}%"))
        if filters.pincode:
            query = query.filter(StudentProfile.pincode.ilike(f"%{filters.pincode.strip()}%"))
        if filters.board:
            query = query.filter(StudentProfile.board.ilike(f"%{filters.board.strip()}%"))
        if filters.class_level:
            query = query.filter(
                StudentProfile.class_level.ilike(f"%{filters.class_level.strip()}%")
            )
        if filters.subject:
            query = query.filter(_contains(StudentProfile.subjects, filters.subject))
        if filters.gender:
            query = query.filter(StudentProfile.gender == filters.gender)
        if filters.availability:
            query = query.filter(
                or_(*[_contains(StudentProfile.availability, day) for day in filters.availability])
            )
        query = query.order_by(
            _order_clause(sort, STUDENT_SORT_FIELDS, StudentProfile.created_at),
            StudentProfile.id.desc(),
        )
        return self._paginate(query, page, per_page)


class TutorProfileRepository(BaseRepository[TutorProfile]):
    def __init__(self, db: Session):
        super().__init__(db, TutorProfile)

    def get_by_user_id(self, user_id: str) -> Optional[TutorProfile]:
        return self.find_one_by(user_id=user_id)

    def _verified(self):
        return (
            self.db.query(TutorProfile)
            .join(User, User.id == TutorProfile.user_id)
            .filter(
                TutorProfile.is_verified.is_(True),
                User.status == UserStatus.ACTIVE.value,
            )
        )

    def search(
        self,
        filters: TutorSearchFilters,
        *,
        sort: Optional[str],
        page: int,
        per_page: int,
    ) -> Tuple[List[TutorProfile], int]:
        query = self._verified()
        if filters.city:
            query = query.filter(TutorProfile.city.ilike(f"%{filters.city.strip()}%"))
        if filters.subject:
            query = query.filter(_contains(TutorProfile.subjects, filters.subject))
        if filters.class_level:
            query = query.filter(_contains(TutorProfile.class_levels, filters.class_level))
        if filters.board:
            query = query.filter(_contains(TutorProfile.boards, filters.board))
        if filters.gender:
            query = query.filter(TutorProfile.gender == filters.gender)
        if filters.teaching_mode:
            query = query.filter(TutorProfile.teaching_mode == filters.teaching_mode)
        if filters.min_experience is not None:
            query = query.filter(TutorProfile.experience >= filters.min_experience)
        if filters.max_experience is not None:
            query = query.filter(TutorProfile.experience <= filters.max_experience)
        if filters.min_rate is not None:
            query = query.filter(TutorProfile.hourly_rate >= filters.min_rate)
        if filters.max_rate is not None:
            query = query.filter(TutorProfile.hourly_rate <= filters.max_rate)

        query = query.order_by(
            _order_clause(sort, TUTOR_SORT_FIELDS, TutorProfile.created_at),
            TutorProfile.id.desc(),
        )
        return self._paginate(query, page, per_page)

    def recent_verified(self, limit: int) -> List[TutorProfile]:
        query = self._verified().order_by(TutorProfile.created_at.desc(), TutorProfile.id.desc())
        return self._execute(query.limit(limit))

    def recommend(
        self,
        *,
        subjects: Sequence[str],
        city: Optional[str],
        past_tutor_ids: Sequence[str],
        goals: Optional[str],
        limit: int,
    ) -> List[TutorProfile]:
        """Verified tutors matching any of the student's signals."""
        conditions = [_contains(TutorProfile.subjects, subject) for subject in subjects if subject]
        if city:
            conditions.append(TutorProfile.city.ilike(city.strip()))
        if past_tutor_ids:
            conditions.append(TutorProfile.user_id.in_(list(past_tutor_ids)))
        if goals and goals.strip():
            conditions.append(TutorProfile.bio.ilike(f"%{goals.strip()}%"))
        if not conditions:
            return []
        query = (
            self._verified()
            .filter(or_(*conditions))
            .order_by(
                TutorProfile.experience.desc(),
                TutorProfile.rating.desc(),
                TutorProfile.created_at.desc(),
            )
            .limit(limit)
        )
        return self._execute(query)

    def list_for_kyc(
        self, *, kyc_status: Optional[str], page: int, per_page: int
    ) -> Tuple[List[TutorProfile], int]:
        query = self.db.query(TutorProfile).options(joinedload(TutorProfile.user))
        if kyc_status:
            query = query.filter(TutorProfile.kyc_status == kyc_status)
        query = query.order_by(TutorProfile.updated_at.desc(), TutorProfile.id.desc())
        return self._paginate(query, page, per_page)
