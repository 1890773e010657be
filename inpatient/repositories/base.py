"""
Base repository.
Generic CRUD operations.
"""
from typing import TypeVar, Generic, Optional, List, Type, Tuple
from sqlalchemy import func
from sqlmodel import Session, select

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Generic base repository.

    Provides the common CRUD operations for any model. Write methods commit
    by default; pass `commit=False` to stage the change inside a larger
    transaction owned by the caller.

    Usage:
        class MyRepository(BaseRepository[MyModel]):
            def __init__(self, session: Session):
                super().__init__(session, MyModel)
    """

    def __init__(self, session: Session, model: Type[T]):
        """
        Initializes the repository.

        Args:
            session: Database session
            model: SQLModel class
        """
        self.session = session
        self.model = model

    def get_by_id(self, id: str) -> Optional[T]:
        """
        Returns a record by ID.

        Args:
            id: Record ID

        Returns:
            The record or None if it does not exist
        """
        return self.session.get(self.model, id)

    def get_for_update(self, id: str) -> Optional[T]:
        """
        Re-reads a record from the database and locks its row until the
        current transaction ends (no-op lock on SQLite).

        The identity map is refreshed so the caller never decides on a
        stale copy loaded earlier in the session.
        """
        query = (
            select(self.model)
            .where(self.model.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.session.exec(query).first()

    def paginate(self, query, page: int, limit: int) -> Tuple[List[T], int]:
        """
        Runs a query one page at a time.

        Args:
            query: select() statement with filters and ordering applied
            page: 1-based page number
            limit: Page size

        Returns:
            Tuple (items of the page, total matching rows)
        """
        count_query = select(func.count()).select_from(query.order_by(None).subquery())
        total = self.session.exec(count_query).one()
        items = self.session.exec(query.offset((page - 1) * limit).limit(limit)).all()
        return list(items), total

    def update_from_dict(self, obj: T, data: dict, commit: bool = True) -> T:
        """
        Updates a record from a dictionary. Keys with None values are kept.

        Args:
            obj: Record to update
            data: Dictionary with the new data
            commit: Whether to commit right away

        Returns:
            The updated record
        """
        for key, value in data.items():
            if value is not None:
                setattr(obj, key, value)
        return self.save(obj, commit=commit)

    def delete(self, obj: T, commit: bool = True) -> None:
        """
        Deletes a record.
        """
        self.session.delete(obj)
        if commit:
            self.session.commit()
        else:
            self.session.flush()

    def save(self, obj: T, commit: bool = True) -> T:
        """
        Persists changes of a record.

        Args:
            obj: Record to save
            commit: Whether to commit right away (otherwise only flushed)

        Returns:
            The saved record
        """
        self.session.add(obj)
        if commit:
            self.session.commit()
            self.session.refresh(obj)
        else:
            self.session.flush()
        return obj

    def count(self) -> int:
        """
        Counts every record.
        """
        result = self.session.exec(
            select(func.count()).select_from(self.model)
        ).first()
        return result or 0
