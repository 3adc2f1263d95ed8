"""Base repository with common read operations."""

from typing import Generic, Sequence, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from db.models import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """
    Base repository providing common read operations.

    All repositories should inherit from this class and specify
    their model type.
    """

    model: Type[T]

    def __init__(self, session: Session):
        """Initialize repository with database session."""
        self.session = session

    def get_all(self) -> Sequence[T]:
        """Get all records."""
        return self.session.scalars(select(self.model)).all()

    def count(self) -> int:
        """Count all records."""
        stmt = select(func.count()).select_from(self.model)
        return self.session.scalar(stmt) or 0

    def add_all(self, entities: Sequence[T]) -> Sequence[T]:
        """Add multiple entities to the session."""
        self.session.add_all(entities)
        self.session.flush()
        return entities
