from typing import List
from uuid import UUID

from portfolio_tracker.core.logger import logger
from portfolio_tracker.core.security import Caller
from portfolio_tracker.models import Investment, InvestmentType
from portfolio_tracker.repositories.factory import RepositoryFactory
from portfolio_tracker.schemas.investments import InvestmentCreate, InvestmentUpdate, InvestmentOut


class InvestmentNotFoundError(Exception):
    pass


class InvestmentForbiddenError(Exception):
    pass


class InvestmentService:
    """
    Per-user CRUD over investments. Ownership is checked against the
    authenticated caller before anything is written.
    """

    def __init__(self, factory: RepositoryFactory):
        self.repo = factory.get_investment_repository()

    def list_investments(self, caller: Caller) -> List[Investment]:
        return self.repo.get_for_user(caller.id)

    def create_investment(self, caller: Caller, payload: InvestmentCreate) -> Investment:
        if not InvestmentType.is_known(payload.type):
            logger.debug(f"Unrecognized investment type '{payload.type}' for {payload.symbol}")

        return self.repo.create({
            "name": payload.name,
            "symbol": payload.symbol.upper(),
            "type": payload.type,
            "shares": payload.shares,
            "buy_price": payload.buy_price,
            "current_price": payload.current_price,
            "user_id": caller.id,
        })

    def update_investment(self, caller: Caller, investment_id: str, payload: InvestmentUpdate) -> Investment:
        investment = self._get_owned(caller, investment_id)
        changes = payload.changes()
        if not changes:
            return investment
        return self.repo.update(investment.id, changes)

    def delete_investment(self, caller: Caller, investment_id: str) -> InvestmentOut:
        investment = self._get_owned(caller, investment_id)
        # snapshot before the row is gone
        deleted = InvestmentOut.model_validate(investment)
        self.repo.delete(investment.id)
        return deleted

    def _get_owned(self, caller: Caller, investment_id: str) -> Investment:
        try:
            key = UUID(str(investment_id))
        except ValueError:
            raise InvestmentNotFoundError(investment_id)

        investment = self.repo.get(key)
        if investment is None:
            raise InvestmentNotFoundError(investment_id)
        if investment.user_id != caller.id:
            logger.warning(f"User {caller.id} denied access to investment {investment_id}")
            raise InvestmentForbiddenError(investment_id)
        return investment
