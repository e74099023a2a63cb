# backend/tuitiontime/schemas/catalog.py
"""Catalog schemas: subjects, option categories and subject mappings."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..core.enums import MappingCategory, Track
from .base import StandardizedModel, StrictRequestModel


def _strip_options(values: Optional[List[str]]) -> Optional[List[str]]:
    if values is None:
        return None
    seen: List[str] = []
    for value in values:
        value = value.strip()
        if value and value not in seen:
            seen.append(value)
    return seen


class SubjectCreate(StrictRequestModel):
    name: str = Field(..., min_length=1, max_length=120)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Subject name is required")
        return value


class SubjectUpdate(StrictRequestModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    is_active: Optional[bool] = None


class SubjectResponse(StandardizedModel):
    id: str
    name: str
    is_active: bool
    created_at: datetime


class OptionCategoryCreate(StrictRequestModel):
    key: str = Field(..., min_length=1, max_length=80, pattern=r"^[a-zA-Z0-9_\-]+$")
    label: str = Field(..., min_length=1, max_length=120)
    options: List[str] = Field(default_factory=list)
    linked_to: Optional[str] = None
    is_active: bool = True

    @field_validator("options")
    @classmethod
    def clean_options(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _strip_options(value)


class OptionCategoryUpdate(StrictRequestModel):
    label: Optional[str] = Field(None, min_length=1, max_length=120)
    options: Optional[List[str]] = None
    linked_to: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("options")
    @classmethod
    def clean_options(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _strip_options(value)


class OptionCategoryResponse(StandardizedModel):
    id: str
    key: str
    label: str
    options: List[str] = Field(default_factory=list)
    linked_to: Optional[str] = None
    is_active: bool


class MetaOption(BaseModel):
    label: str
    options: List[str]
    linked_to: Optional[str] = None


class MetaOptionsResponse(BaseModel):
    options: Dict[str, MetaOption]


class SubjectMappingCreate(StrictRequestModel):
    track: Track
    category: MappingCategory
    category_value: str = Field(..., min_length=1, max_length=120)
    subjects: List[str] = Field(default_factory=list)
    is_active: bool = True

    @field_validator("subjects")
    @classmethod
    def clean_subjects(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _strip_options(value)


class SubjectMappingUpdate(StrictRequestModel):
    subjects: Optional[List[str]] = None
    is_active: Optional[bool] = None

    @field_validator("subjects")
    @classmethod
    def clean_subjects(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _strip_options(value)


class SubjectMappingResponse(StandardizedModel):
    id: str
    track: str
    category: str
    category_value: str
    subjects: List[str] = Field(default_factory=list)
    is_active: bool
