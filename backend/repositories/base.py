"""
Generic repository shared by every aggregate repository.
"""

from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from repositories.database import Base

T = TypeVar("T", bound=Base)  # type: ignore[type-arg]


class BaseRepository(Generic[T]):
    """
    CRUD helpers over one SQLAlchemy model.

    `create`, `update` and `delete` commit immediately. `add`, `add_all`
    and `remove` only stage changes so a service can group several writes
    under one commit.
    """

    def __init__(self, model: type[T], db: Session):
        self.model = model
        self.db = db

    def get_by_id(self, id: int) -> T | None:
        return self.db.query(self.model).filter(self.model.id == id).first()

    def get_all(self, skip: int = 0, limit: int = 100) -> list[T]:
        """
        Get entities ordered by primary key.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            List of entities
        """
        return (
            self.db.query(self.model)
            .order_by(self.model.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def exists(self, id: int) -> bool:
        return (
            self.db.query(self.model.id).filter(self.model.id == id).first()
            is not None
        )

    def count(self) -> int:
        return self.db.query(self.model).count()

    def add(self, entity: T) -> None:
        self.db.add(entity)

    def add_all(self, entities: list[T]) -> None:
        self.db.add_all(entities)

    def remove(self, entity: T) -> None:
        """Stage a delete without committing."""
        self.db.delete(entity)

    def create(self, entity: T) -> T:
        """
        Insert entity and return it refreshed from the database.

        Args:
            entity: Transient entity

        Returns:
            Persisted entity with generated columns populated
        """
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def update(self, entity: T) -> T:
        """Commit pending attribute changes on entity and refresh it."""
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def delete(self, entity: T) -> None:
        """Delete entity (ORM cascades apply) and commit."""
        self.db.delete(entity)
        self.db.commit()

    def commit(self) -> None:
        self.db.commit()

    def flush(self) -> None:
        self.db.flush()

    def rollback(self) -> None:
        self.db.rollback()

    def refresh(self, entity: T) -> None:
        self.db.refresh(entity)
