# backend/tuitiontime/repositories/catalog_repository.py
"""Repositories for subjects, option categories and subject mappings."""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.catalog import OptionCategory, Subject, SubjectMapping
from .base_repository import BaseRepository


class SubjectRepository(BaseRepository[Subject]):
    def __init__(self, db: Session):
        super().__init__(db, Subject)

    def get_by_name(self, name: str) -> Optional[Subject]:
        """Case-insensitive lookup, soft-deleted rows included."""
        return (
            self.db.query(Subject)
            .filter(func.lower(Subject.name) == name.strip().lower())
            .first()
        )

    def list_visible(self, include_inactive: bool = False) -> List[Subject]:
        query = self.db.query(Subject).filter(Subject.deleted_at.is_(None))
        if not include_inactive:
            query = query.filter(Subject.is_active.is_(True))
        return self._execute(query.order_by(Subject.name.asc()))


class OptionCategoryRepository(BaseRepository[OptionCategory]):
    def __init__(self, db: Session):
        super().__init__(db, OptionCategory)

    def get_by_key(self, key: str) -> Optional[OptionCategory]:
        return self.find_one_by(key=key)

    def list_all(self, active_only: bool = False) -> List[OptionCategory]:
        query = self.db.query(OptionCategory)
        if active_only:
            query = query.filter(OptionCategory.is_active.is_(True))
        return self._execute(query.order_by(OptionCategory.key.asc()))


class SubjectMappingRepository(BaseRepository[SubjectMapping]):
    def __init__(self, db: Session):
        super().__init__(db, SubjectMapping)

    def list_filtered(
        self,
        *,
        track: Optional[str] = None,
        category: Optional[str] = None,
        category_value: Optional[str] = None,
        active_only: bool = True,
    ) -> List[SubjectMapping]:
        query = self.db.query(SubjectMapping)
        if track:
            query = query.filter(SubjectMapping.track == track)
        if category:
            query = query.filter(SubjectMapping.category == category)
        if category_value:
            query = query.filter(
                func.lower(SubjectMapping.category_value) == category_value.strip().lower()
            )
        if active_only:
            query = query.filter(SubjectMapping.is_active.is_(True))
        return self._execute(
            query.order_by(SubjectMapping.track, SubjectMapping.category, SubjectMapping.category_value)
        )
