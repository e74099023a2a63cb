# backend/tuitiontime/services/catalog_service.py
"""
Catalog Service for the TuitionTime platform

Admin-managed reference data: the subject list, onboarding option
categories (boards, class levels, exams...) and the mapping from a track
and category value to the subjects offered under it.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ConflictException, NotFoundException
from ..core.timezone_utils import utcnow
from ..models.catalog import OptionCategory, Subject, SubjectMapping
from ..repositories.factory import RepositoryFactory
from ..schemas.catalog import (
    OptionCategoryCreate,
    OptionCategoryUpdate,
    SubjectCreate,
    SubjectMappingCreate,
    SubjectMappingUpdate,
    SubjectUpdate,
)
from .base import BaseService

logger = logging.getLogger(__name__)


class CatalogService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.subject_repository = RepositoryFactory.create_subject_repository(db)
        self.category_repository = RepositoryFactory.create_option_category_repository(db)
        self.mapping_repository = RepositoryFactory.create_subject_mapping_repository(db)

    # Subjects

    def list_subjects(self, include_inactive: bool = False) -> List[Subject]:
        return self.subject_repository.list_visible(include_inactive)

    @BaseService.measure_operation("create_subject")
    def create_subject(self, data: SubjectCreate) -> Subject:
        existing = self.subject_repository.get_by_name(data.name)
        if existing is not None and existing.deleted_at is None:
            raise ConflictException(f"Subject '{data.name}' already exists", code="SUBJECT_EXISTS")
        with self.transaction():
            if existing is not None:
                # Re-creating a soft-deleted subject restores it.
                existing.name = data.name
                existing.deleted_at = None
                existing.is_active = True
                subject = existing
            else:
                subject = self.subject_repository.create(name=data.name, is_active=True)
        return subject

    def _get_subject(self, subject_id: str) -> Subject:
        subject = self.subject_repository.get_by_id(subject_id)
        if subject is None or subject.deleted_at is not None:
            raise NotFoundException("Subject not found")
        return subject

    @BaseService.measure_operation("update_subject")
    def update_subject(self, subject_id: str, data: SubjectUpdate) -> Subject:
        subject = self._get_subject(subject_id)
        if data.name is not None:
            name = data.name.strip()
            clash = self.subject_repository.get_by_name(name)
            if clash is not None and clash.id != subject.id:
                raise ConflictException(f"Subject '{name}' already exists", code="SUBJECT_EXISTS")
        with self.transaction():
            if data.name is not None:
                subject.name = data.name.strip()
            if data.is_active is not None:
                subject.is_active = data.is_active
        return subject

    def delete_subject(self, subject_id: str) -> None:
        subject = self._get_subject(subject_id)
        with self.transaction():
            subject.deleted_at = utcnow()
            subject.is_active = False
        self.logger.info(f"Soft-deleted subject {subject_id}")

    # Option categories

    def list_option_categories(self, active_only: bool = False) -> List[OptionCategory]:
        return self.category_repository.list_all(active_only=active_only)

    @BaseService.measure_operation("create_option_category")
    def create_option_category(self, data: OptionCategoryCreate) -> OptionCategory:
        if self.category_repository.get_by_key(data.key) is not None:
            raise ConflictException(f"Option category '{data.key}' already exists")
        with self.transaction():
            category = self.category_repository.create(**data.model_dump())
        return category

    def _get_category(self, category_id: str) -> OptionCategory:
        category = self.category_repository.get_by_id(category_id)
        if category is None:
            raise NotFoundException("Option category not found")
        return category

    def update_option_category(self, category_id: str, data: OptionCategoryUpdate) -> OptionCategory:
        category = self._get_category(category_id)
        with self.transaction():
            for key, value in data.model_dump(exclude_unset=True).items():
                setattr(category, key, value)
        return category

    def delete_option_category(self, category_id: str) -> None:
        category = self._get_category(category_id)
        with self.transaction():
            self.db.delete(category)

    def meta_options(self) -> Dict[str, Dict[str, Any]]:
        """Active option categories keyed by ``key`` for the onboarding forms."""
        return {
            category.key: {
                "label": category.label,
                "options": list(category.options or []),
                "linked_to": category.linked_to,
            }
            for category in self.category_repository.list_all(active_only=True)
        }

    # Subject mappings

    def list_subject_mappings(
        self,
        *,
        track: Optional[str] = None,
        category: Optional[str] = None,
        category_value: Optional[str] = None,
        active_only: bool = True,
    ) -> List[SubjectMapping]:
        return self.mapping_repository.list_filtered(
            track=track, category=category, category_value=category_value, active_only=active_only
        )

    @BaseService.measure_operation("create_subject_mapping")
    def create_subject_mapping(self, data: SubjectMappingCreate) -> SubjectMapping:
        values = data.model_dump()
        values["category_value"] = values["category_value"].strip()
        duplicates = self.mapping_repository.list_filtered(
            track=values["track"],
            category=values["category"],
            category_value=values["category_value"],
            active_only=False,
        )
        if duplicates:
            raise ConflictException("A mapping for this track and category value already exists")
        with self.transaction():
            mapping = self.mapping_repository.create(**values)
        return mapping

    def _get_mapping(self, mapping_id: str) -> SubjectMapping:
        mapping = self.mapping_repository.get_by_id(mapping_id)
        if mapping is None:
            raise NotFoundException("Subject mapping not found")
        return mapping

    def update_subject_mapping(self, mapping_id: str, data: SubjectMappingUpdate) -> SubjectMapping:
        mapping = self._get_mapping(mapping_id)
        with self.transaction():
            for key, value in data.model_dump(exclude_unset=True).items():
                setattr(mapping, key, value)
        return mapping

    def delete_subject_mapping(self, mapping_id: str) -> None:
        mapping = self._get_mapping(mapping_id)
        with self.transaction():
            self.db.delete(mapping)
