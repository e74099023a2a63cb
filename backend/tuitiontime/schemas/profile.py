# backend/tuitiontime/schemas/profile.py
"""
Student and tutor profile schemas.

Student profiles are validated per education track: school students give a
class level, college students their program, discipline and year, and
competitive-exam aspirants the exam they prepare for.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from ..core.enums import Gender, KycStatus, TeachingMode, Track, TutorStatus
from .auth import UserResponse
from .base import Money, StandardizedModel, StrictRequestModel

TRACK_REQUIRED_FIELDS = {
    Track.SCHOOL.value: ("class_level",),
    Track.COLLEGE.value: ("program", "discipline", "year_sem"),
    Track.COMPETITIVE.value: ("exam",),
}


def _clean_list(values: Optional[List[str]]) -> List[str]:
    """Strip entries, drop blanks and repeats; first occurrence wins."""
    stripped = (value.strip() for value in values or [] if value)
    return list(dict.fromkeys(value for value in stripped if value))


class StudentProfileUpsert(StrictRequestModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    gender: Optional[Gender] = None
    city: Optional[str] = Field(None, max_length=80)
    state: Optional[str] = Field(None, max_length=80)
    pincode: Optional[str] = Field(None, pattern=r"^\d{6}$")

    track: Optional[Track] = None
    board: Optional[str] = None
    class_level: Optional[str] = None
    program: Optional[str] = None
    discipline: Optional[str] = None
    year_sem: Optional[str] = None
    exam: Optional[str] = None

    subjects: List[str] = Field(default_factory=list)
    tutor_gender_pref: Optional[str] = None
    goals: Optional[str] = None
    availability: List[str] = Field(default_factory=list)
    photo_url: Optional[str] = None

    @field_validator("subjects", "availability")
    @classmethod
    def clean_lists(cls, value: Optional[List[str]]) -> List[str]:
        return _clean_list(value)

    @model_validator(mode="after")
    def track_fields_present(self) -> "StudentProfileUpsert":
        missing = [
            name
            for name in TRACK_REQUIRED_FIELDS.get(self.track or "", ())
            if not (getattr(self, name) or "").strip()
        ]
        if missing:
            raise ValueError(f"{', '.join(missing)} required for {self.track} track")
        return self


class StudentProfileResponse(StandardizedModel):
    id: str
    user_id: str
    name: str
    email: str
    gender: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    track: Optional[str] = None
    board: Optional[str] = None
    class_level: Optional[str] = None
    program: Optional[str] = None
    discipline: Optional[str] = None
    year_sem: Optional[str] = None
    exam: Optional[str] = None
    subjects: List[str] = Field(default_factory=list)
    tutor_gender_pref: Optional[str] = None
    goals: Optional[str] = None
    availability: List[str] = Field(default_factory=list)
    photo_url: Optional[str] = None
    created_at: datetime


class TutorProfileUpsert(StrictRequestModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    gender: Gender
    qualification: str = Field(..., min_length=1, max_length=200)
    specialization: Optional[str] = None
    experience: int = Field(0, ge=0, le=60)
    teaching_mode: Optional[TeachingMode] = None
    tuition_type: Optional[str] = None
    group_size: Optional[int] = Field(None, ge=1)
    rating: Optional[float] = Field(None, ge=0, le=5)

    subjects: List[str] = Field(..., min_length=1)
    class_levels: List[str] = Field(default_factory=list)
    boards: List[str] = Field(default_factory=list)
    exams: List[str] = Field(default_factory=list)
    student_types: List[str] = Field(default_factory=list)

    hourly_rate: Decimal = Field(..., gt=0, decimal_places=2)
    monthly_rate: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    availability: List[str] = Field(default_factory=list)

    bio: str = Field(..., min_length=1)
    achievements: Optional[str] = None
    photo_url: Optional[str] = None
    intro_video_url: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = Field(None, max_length=80)
    state: Optional[str] = Field(None, max_length=80)
    pincode: Optional[str] = Field(None, pattern=r"^\d{6}$")

    @field_validator("class_levels", "boards", "exams", "student_types", "availability")
    @classmethod
    def clean_lists(cls, value: Optional[List[str]]) -> List[str]:
        return _clean_list(value)

    @field_validator("subjects")
    @classmethod
    def subjects_not_empty(cls, value: List[str]) -> List[str]:
        value = _clean_list(value)
        if not value:
            raise ValueError("At least one subject is required")
        return value


class TutorKycRequest(StrictRequestModel):
    aadhaar_urls: List[str] = Field(..., min_length=1, max_length=2)
    pan_url: str = Field(..., min_length=1)
    bank_proof_url: str = Field(..., min_length=1)


class TutorPublicResponse(StandardizedModel):
    """What students see on search results and the tutor detail page."""

    id: str
    user_id: str
    name: str
    gender: Optional[str] = None
    rating: float = 0
    is_featured: bool = False
    qualification: Optional[str] = None
    specialization: Optional[str] = None
    experience: int = 0
    teaching_mode: Optional[str] = None
    tuition_type: Optional[str] = None
    group_size: Optional[int] = None
    subjects: List[str] = Field(default_factory=list)
    class_levels: List[str] = Field(default_factory=list)
    boards: List[str] = Field(default_factory=list)
    exams: List[str] = Field(default_factory=list)
    student_types: List[str] = Field(default_factory=list)
    hourly_rate: Optional[Money] = None
    monthly_rate: Optional[Money] = None
    availability: List[str] = Field(default_factory=list)
    bio: Optional[str] = None
    achievements: Optional[str] = None
    photo_url: Optional[str] = None
    intro_video_url: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    is_verified: bool = False
    created_at: datetime


class TutorProfileResponse(TutorPublicResponse):
    email: str
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    pincode: Optional[str] = None
    aadhaar_urls: List[str] = Field(default_factory=list)
    pan_url: Optional[str] = None
    bank_proof_url: Optional[str] = None
    kyc_status: KycStatus = KycStatus.PENDING
    status: TutorStatus = TutorStatus.PENDING


class ProfileResponse(StandardizedModel):
    user: UserResponse
    student_profile: Optional[StudentProfileResponse] = None
    tutor_profile: Optional[TutorProfileResponse] = None
