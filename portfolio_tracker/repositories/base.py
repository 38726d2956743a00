from typing import Generic, TypeVar, Type, List, Optional, Dict, Any, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.dialects import postgresql, sqlite

from portfolio_tracker.core.db import Base
from portfolio_tracker.core.logger import logger

T = TypeVar("T", bound=Base)


class RepositoryError(Exception):
    """Custom exception for repository operations"""
    pass


class BaseRepository(Generic[T]):
    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model

    def get(self, id_: Any) -> Optional[T]:
        """Get a single record by ID"""
        try:
            return self.db.get(self.model, id_)
        except SQLAlchemyError as e:
            logger.error(f"Error getting {self.model.__name__} with id {id_}: {e}")
            raise RepositoryError(f"Failed to get {self.model.__name__}") from e

    def create(self, obj_in: Dict[str, Any]) -> T:
        """Create a new record"""
        try:
            db_obj = self.model(**obj_in)
            self.db.add(db_obj)
            self.db.commit()
            self.db.refresh(db_obj)
            return db_obj
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error creating {self.model.__name__}: {e}")
            raise RepositoryError(f"Failed to create {self.model.__name__}") from e

    def update(self, id_: Any, obj_in: Dict[str, Any]) -> Optional[T]:
        """Update an existing record"""
        try:
            db_obj = self.get(id_)
            if not db_obj:
                return None

            for field, value in obj_in.items():
                if hasattr(db_obj, field):
                    setattr(db_obj, field, value)

            self.db.commit()
            self.db.refresh(db_obj)
            return db_obj
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error updating {self.model.__name__} with id {id_}: {e}")
            raise RepositoryError(f"Failed to update {self.model.__name__}") from e

    def delete(self, id_: Any) -> bool:
        """Delete a record by ID"""
        try:
            db_obj = self.get(id_)
            if not db_obj:
                return False

            self.db.delete(db_obj)
            self.db.commit()
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error deleting {self.model.__name__} with id {id_}: {e}")
            raise RepositoryError(f"Failed to delete {self.model.__name__}") from e

    def count(self) -> int:
        """Count total records"""
        try:
            return self.db.query(self.model).count()
        except SQLAlchemyError as e:
            logger.error(f"Error counting {self.model.__name__}: {e}")
            raise RepositoryError(f"Failed to count {self.model.__name__}") from e

    def _validate_data(self, rows: List[Dict]) -> List[Dict]:
        """Drop keys that are not columns of the repository model."""
        if not rows:
            return []

        model_columns = set(self.model.__table__.columns.keys())

        validated_rows = []
        for i, row in enumerate(rows):
            if not isinstance(row, dict):
                logger.warning(f"Row {i} is not a dictionary, skipping")
                continue

            valid_row = {}
            for key, value in row.items():
                if key in model_columns:
                    valid_row[key] = value
                else:
                    logger.debug(f"Row {i}: ignoring field '{key}' not in model {self.model.__name__}")

            if valid_row:
                validated_rows.append(valid_row)
            else:
                logger.warning(f"Row {i} has no valid fields for model {self.model.__name__}")

        return validated_rows

    def _insert(self):
        """Dialect specific INSERT supporting ON CONFLICT."""
        dialect = self.db.get_bind().dialect.name
        if dialect == "sqlite":
            return sqlite.insert(self.model.__table__)
        return postgresql.insert(self.model.__table__)

    def upsert_bulk(
            self,
            data: List[Dict],
            index_elements: Optional[List[str]] = None,
            update_columns: Optional[Sequence[str]] = None,
    ) -> int:
        """
        Bulk insert records in one statement. With ``index_elements`` conflicting rows are
        updated on ``update_columns`` (or skipped when no update columns are given).
        """
        if not data:
            return 0

        try:
            data = self._validate_data(data)
            if not data:
                return 0

            stmt = self._insert().values(data)
            if index_elements and update_columns:
                stmt = stmt.on_conflict_do_update(
                    index_elements=index_elements,
                    set_={col: stmt.excluded[col] for col in update_columns},
                )
            elif index_elements:
                stmt = stmt.on_conflict_do_nothing(index_elements=index_elements)

            result = self.db.execute(stmt)
            self.db.commit()

            return int(result.rowcount or 0)

        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error upserting {self.model.__name__}: {e}")
            raise RepositoryError(f"Failed to upsert {self.model.__name__}") from e
