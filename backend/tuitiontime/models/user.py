# backend/tuitiontime/models/user.py
"""
User model.

Students and tutors sign in with a phone number and OTP; the admin signs in
with a username and password, so ``phone`` is nullable for admin rows only.
"""

from sqlalchemy import Boolean, CheckConstraint, Column, String
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import UserRole, UserStatus
from ..database import Base
from .types import TimestampMixin, UTCDateTime


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    phone = Column(String(10), unique=True, nullable=True, index=True)
    username = Column(String(64), unique=True, nullable=True)
    role = Column(String(20), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=UserStatus.ACTIVE.value, index=True)
    is_profile_complete = Column(Boolean, nullable=False, default=False)
    refresh_token_hash = Column(String(64), nullable=True)
    last_login = Column(UTCDateTime(), nullable=True)

    student_profile = relationship(
        "StudentProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    tutor_profile = relationship(
        "TutorProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(
            "role IN ('student', 'tutor', 'admin')",
            name="ck_users_role",
        ),
        CheckConstraint(
            "status IN ('active', 'suspended')",
            name="ck_users_status",
        ),
    )

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT.value

    @property
    def is_tutor(self) -> bool:
        return self.role == UserRole.TUTOR.value

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value

    @property
    def display_name(self) -> str:
        profile = self.student_profile or self.tutor_profile
        if profile is not None and profile.name:
            return profile.name
        return self.username or self.phone or self.id

    @property
    def email(self) -> str | None:
        profile = self.student_profile or self.tutor_profile
        return profile.email if profile is not None else None

    def __repr__(self) -> str:
        return f"<User {self.id} role={self.role}>"
