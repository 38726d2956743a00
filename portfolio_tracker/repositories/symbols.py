from typing import List, Dict, Any

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portfolio_tracker.models import Symbol
from portfolio_tracker.repositories.base import BaseRepository, RepositoryError
import logging

logger = logging.getLogger(__name__)

UPDATE_COLUMNS = ["name", "exchange", "isin", "instrument_type", "meta"]


class SymbolRepository(BaseRepository[Symbol]):
    def __init__(self, db: Session):
        super().__init__(db, Symbol)

    def search(self, query: str, limit: int = 20) -> List[Symbol]:
        """
        Symbols whose name contains ``query`` or whose ticker starts with it,
        case-insensitive, ordered by name.
        """
        try:
            return (
                self.db.query(Symbol)
                .filter(
                    or_(
                        Symbol.name.icontains(query, autoescape=True),
                        Symbol.symbol.istartswith(query, autoescape=True),
                    )
                )
                .order_by(Symbol.name.asc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Error searching symbols for '{query}': {e}")
            raise RepositoryError("Failed to search symbols") from e

    @staticmethod
    def _to_row(record: Dict[str, Any]) -> Dict[str, Any]:
        row = dict(record)
        row["meta"] = row.pop("metadata", None) or row.get("meta") or {}
        return row

    def upsert_bulk(self, data: List[Dict]) -> int:
        """
        Insert or refresh symbols keyed by ticker.
        """
        return super().upsert_bulk(
            data=[self._to_row(r) for r in data],
            index_elements=["symbol"],
            update_columns=UPDATE_COLUMNS,
        )
