# backend/tuitiontime/models/catalog.py
"""
Catalog models: subjects, option categories and subject mappings.

Option categories drive the dropdowns shown during onboarding (boards,
class levels, exams...). Subject mappings tie a track and category value,
e.g. ``school / board / CBSE``, to the subjects offered under it.
"""

from sqlalchemy import Boolean, Column, String, UniqueConstraint
import ulid

from ..database import Base
from .types import StringArrayType, TimestampMixin, UTCDateTime


class Subject(TimestampMixin, Base):
    __tablename__ = "subjects"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name = Column(String(120), nullable=False, unique=True)
    is_active = Column(Boolean, nullable=False, default=True)
    deleted_at = Column(UTCDateTime(), nullable=True)


class OptionCategory(TimestampMixin, Base):
    __tablename__ = "option_categories"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    key = Column(String(80), nullable=False, unique=True)
    label = Column(String(120), nullable=False)
    options = Column(StringArrayType(), nullable=False, default=list)
    linked_to = Column(String(80), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)


class SubjectMapping(TimestampMixin, Base):
    __tablename__ = "subject_mappings"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    track = Column(String(20), nullable=False, index=True)
    category = Column(String(20), nullable=False)
    category_value = Column(String(120), nullable=False)
    subjects = Column(StringArrayType(), nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("track", "category", "category_value", name="uq_subject_mapping_value"),
    )
