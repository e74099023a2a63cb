# backend/tuitiontime/repositories/__init__.py
"""
Repository Pattern Implementation for the TuitionTime platform

This package provides the repository layer for data access,
separating business logic from database queries.

Usage:
    from tuitiontime.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_booking_repository(db)
    overlaps = repository.find_student_overlaps(student_id, start, end)
"""

from .base_repository import BaseRepository, IRepository
from .factory import RepositoryFactory

__all__ = ["BaseRepository", "IRepository", "RepositoryFactory"]
