# backend/tuitiontime/models/profiles.py
"""
Student and tutor profile models.

Each user has at most one profile matching their role. Array-valued
fields (subjects, boards, availability dates...) use StringArrayType so
they map to native arrays on PostgreSQL and JSON text elsewhere.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import KycStatus, TutorStatus
from ..database import Base
from .types import StringArrayType, TimestampMixin


class StudentProfile(TimestampMixin, Base):
    __tablename__ = "student_profiles"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id"), unique=True, nullable=False)

    name = Column(String(120), nullable=False)
    email = Column(String(254), nullable=False)
    gender = Column(String(10), nullable=True)
    city = Column(String(80), nullable=True, index=True)
    state = Column(String(80), nullable=True)
    pincode = Column(String(10), nullable=True)

    track = Column(String(20), nullable=True)
    board = Column(String(80), nullable=True)
    class_level = Column(String(40), nullable=True)
    program = Column(String(80), nullable=True)
    discipline = Column(String(80), nullable=True)
    year_sem = Column(String(40), nullable=True)
    exam = Column(String(80), nullable=True)

    subjects = Column(StringArrayType(), nullable=False, default=list)
    tutor_gender_pref = Column(String(20), nullable=True)
    goals = Column(Text, nullable=True)
    # ISO dates (YYYY-MM-DD) the student is available on
    availability = Column(StringArrayType(), nullable=False, default=list)
    photo_url = Column(String(500), nullable=True)

    user = relationship("User", back_populates="student_profile")


class TutorProfile(TimestampMixin, Base):
    __tablename__ = "tutor_profiles"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id"), unique=True, nullable=False)

    name = Column(String(120), nullable=False)
    email = Column(String(254), nullable=False)
    gender = Column(String(10), nullable=True, index=True)
    rating = Column(Float, nullable=False, default=0)
    is_featured = Column(Boolean, nullable=False, default=False)

    qualification = Column(String(200), nullable=True)
    specialization = Column(String(200), nullable=True)
    experience = Column(Integer, nullable=False, default=0)
    teaching_mode = Column(String(10), nullable=True)
    tuition_type = Column(String(40), nullable=True)
    group_size = Column(Integer, nullable=True)

    subjects = Column(StringArrayType(), nullable=False, default=list)
    class_levels = Column(StringArrayType(), nullable=False, default=list)
    boards = Column(StringArrayType(), nullable=False, default=list)
    exams = Column(StringArrayType(), nullable=False, default=list)
    student_types = Column(StringArrayType(), nullable=False, default=list)

    hourly_rate = Column(Numeric(12, 2), nullable=True)
    monthly_rate = Column(Numeric(12, 2), nullable=True)
    # ISO dates (YYYY-MM-DD) the tutor teaches on
    availability = Column(StringArrayType(), nullable=False, default=list)

    bio = Column(Text, nullable=True)
    achievements = Column(Text, nullable=True)
    photo_url = Column(String(500), nullable=True)
    intro_video_url = Column(String(500), nullable=True)

    address_line1 = Column(String(200), nullable=True)
    address_line2 = Column(String(200), nullable=True)
    city = Column(String(80), nullable=True, index=True)
    state = Column(String(80), nullable=True)
    pincode = Column(String(10), nullable=True)

    # KYC
    aadhaar_urls = Column(StringArrayType(), nullable=False, default=list)
    pan_url = Column(String(500), nullable=True)
    bank_proof_url = Column(String(500), nullable=True)
    kyc_status = Column(String(20), nullable=False, default=KycStatus.PENDING.value)

    status = Column(String(20), nullable=False, default=TutorStatus.PENDING.value)
    is_verified = Column(Boolean, nullable=False, default=False, index=True)

    user = relationship("User", back_populates="tutor_profile")

    __table_args__ = (
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_tutor_profiles_rating"),
        CheckConstraint("experience >= 0", name="ck_tutor_profiles_experience"),
    )
