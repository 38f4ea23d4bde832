"""
Base repository with the generic CRUD the workflow repositories share.

Every write commits immediately: the workflow treats each store round trip
as independent, so there is no caller-managed transaction to join.
"""

from typing import Any, Generic, List, Optional, Type, TypeVar
from sqlmodel import Session, select, SQLModel

T = TypeVar("T", bound=SQLModel)


class BaseRepository(Generic[T]):
    """
    Generic repository over one table model.

    Args:
        db_session: SQLModel session, owned by the caller
        model_class: Table model this repository reads and writes
    """

    def __init__(self, db_session: Session, model_class: Type[T]):
        self.db = db_session
        self.model_class = model_class

    def get_by_id(self, id: Any) -> Optional[T]:
        """Get entity by primary key, None if missing."""
        return self.db.get(self.model_class, id)

    def exists(self, id: Any) -> bool:
        return self.get_by_id(id) is not None

    def find_by(self, **filters: Any) -> List[T]:
        """
        Equality-filtered select.

        Args:
            **filters: column name -> required value

        Returns:
            Matching entities (unordered)
        """
        statement = select(self.model_class)
        for column, value in filters.items():
            statement = statement.where(getattr(self.model_class, column) == value)
        return list(self.db.exec(statement).all())

    def create(self, entity: T) -> T:
        """Insert a new entity, commit, and refresh it from the store."""
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def update(self, entity: T) -> T:
        """Persist changes to an existing entity and commit."""
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def delete(self, entity: T) -> bool:
        self.db.delete(entity)
        self.db.commit()
        return True
