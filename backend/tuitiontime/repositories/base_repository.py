# backend/tuitiontime/repositories/base_repository.py
"""
Base Repository Pattern for the TuitionTime platform

Provides the foundation for all repository classes with:
- Create, fetch and delete by primary key
- Pagination shared by the list endpoints

Repositories never commit. Transactions are owned by the service layer so
that several repository calls can be grouped into one atomic unit.
"""

from abc import ABC, abstractmethod
import logging
from typing import Any, Generic, List, Optional, Tuple, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException

# Type variable for generic model support
T = TypeVar("T")

logger = logging.getLogger(__name__)


class IRepository(ABC, Generic[T]):
    """
    Abstract repository interface defining core data access methods.
    """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve an entity by its primary key, or None."""

    @abstractmethod
    def create(self, **kwargs) -> T:
        """
        Create a new entity.

        Raises:
            RepositoryException: If creation fails
        """

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Delete an entity; False when it does not exist."""


class BaseRepository(IRepository[T]):
    """
    Generic repository for a single SQLAlchemy model.

    Subclasses add domain queries and keep the error handling convention:
    SQLAlchemy errors are logged and re-raised as RepositoryException.
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(self.__class__.__name__)

    def get_by_id(self, id: str) -> Optional[T]:
        try:
            return self.db.get(self.model, id)
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting {self.model.__name__} by id {id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve {self.model.__name__}: {str(e)}")

    def create(self, **kwargs) -> T:
        """
        Create a new entity.

        Note: Does NOT commit - transaction management is handled by service layer.
        """
        try:
            entity = self.model(**kwargs)
            self.db.add(entity)
            self.db.flush()  # Get ID without committing
            return entity
        except IntegrityError as exc:
            self.logger.error("Integrity error creating %s: %s", self.model.__name__, exc)
            raise RepositoryException(f"Integrity constraint violated: {exc}") from exc
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating {self.model.__name__}: {str(e)}")
            raise RepositoryException(f"Failed to create {self.model.__name__}: {str(e)}")

    def delete(self, id: str) -> bool:
        try:
            entity = self.get_by_id(id)
            if not entity:
                return False
            self.db.delete(entity)
            self.db.flush()
            return True
        except IntegrityError as e:
            self.logger.error(
                f"Cannot delete {self.model.__name__} {id} due to constraints: {str(e)}"
            )
            raise RepositoryException(f"Cannot delete due to existing references: {str(e)}")
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting {self.model.__name__} {id}: {str(e)}")
            raise RepositoryException(f"Failed to delete {self.model.__name__}: {str(e)}")

    def find_one_by(self, **kwargs) -> Optional[T]:
        try:
            return self.db.query(self.model).filter_by(**kwargs).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding record: {str(e)}")
            raise RepositoryException(f"Failed to find record: {str(e)}")

    def _paginate(self, query: Query, page: int, per_page: int) -> Tuple[List[T], int]:
        """Return one page of ``query`` together with the unpaginated total."""
        try:
            total = query.order_by(None).count()
            items = query.offset((page - 1) * per_page).limit(per_page).all()
            return items, total
        except SQLAlchemyError as e:
            self.logger.error(f"Paginated query failed: {str(e)}")
            raise RepositoryException(f"Query failed: {str(e)}")

    def _execute(self, query: Query) -> List[Any]:
        try:
            return query.all()
        except SQLAlchemyError as e:
            self.logger.error(f"Query execution failed: {str(e)}")
            raise RepositoryException(f"Query failed: {str(e)}")
