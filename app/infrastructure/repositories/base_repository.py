"""
Base Repository - Abstract repository pattern implementation.

Provides common CRUD operations and query helpers for all entities.
"""
from abc import ABC, abstractmethod
from typing import Generic, TypeVar, List, Optional, Type
from sqlalchemy.orm import Session

from app.models import Base

T = TypeVar('T', bound=Base)


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository providing common data access operations.

    Type Parameters:
        T: The SQLAlchemy model type this repository manages
    """

    def __init__(self, session: Session, model_class: Type[T]):
        """
        Initialize the repository.

        Args:
            session: SQLAlchemy database session
            model_class: The model class this repository manages
        """
        self.session = session
        self.model_class = model_class

    def get_by_id(self, entity_id: int) -> Optional[T]:
        """
        Retrieve an entity by its primary key.

        Returns:
            The entity if found, None otherwise
        """
        return self.session.query(self.model_class).filter(
            self.model_class.id == entity_id
        ).first()

    def add_all(self, entities: List[T]) -> List[T]:
        """Add multiple entities to the session."""
        self.session.add_all(entities)
        return entities

    def delete(self, entity: T) -> None:
        self.session.delete(entity)

    def flush(self) -> None:
        """Flush pending changes so generated ids become available."""
        self.session.flush()

    @abstractmethod
    def exists(self, **criteria) -> bool:
        """
        Check if an entity matching the criteria exists.

        Args:
            **criteria: Field-value pairs to match

        Returns:
            True if entity exists, False otherwise
        """
        pass
