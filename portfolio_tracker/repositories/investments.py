from typing import List

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portfolio_tracker.models import Investment
from portfolio_tracker.repositories.base import BaseRepository, RepositoryError
import logging

logger = logging.getLogger(__name__)


class InvestmentRepository(BaseRepository[Investment]):
    def __init__(self, db: Session):
        super().__init__(db, Investment)

    def get_for_user(self, user_id: str) -> List[Investment]:
        """
        Get all investments owned by a user, newest first.
        """
        try:
            return (
                self.db.query(Investment)
                .filter(Investment.user_id == user_id)
                .order_by(desc(Investment.created_at))
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Error getting investments for user {user_id}: {e}")
            raise RepositoryError("Failed to load investments") from e
