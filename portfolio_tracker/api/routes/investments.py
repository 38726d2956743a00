from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from portfolio_tracker.api.dependencies import get_current_caller, get_investment_service
from portfolio_tracker.core.logger import logger
from portfolio_tracker.core.security import Caller
from portfolio_tracker.repositories.base import RepositoryError
from portfolio_tracker.schemas.investments import (
    InvestmentCreate,
    InvestmentDeleted,
    InvestmentOut,
    InvestmentUpdate,
)
from portfolio_tracker.schemas.portfolio import PortfolioSummary
from portfolio_tracker.services.investment_service import (
    InvestmentForbiddenError,
    InvestmentNotFoundError,
    InvestmentService,
)
from portfolio_tracker.services.portfolio_service import summarize_portfolio

router = APIRouter()


@router.get("", response_model=List[InvestmentOut])
def list_investments(
        caller: Caller = Depends(get_current_caller),
        service: InvestmentService = Depends(get_investment_service),
):
    """Investments owned by the caller, newest first."""
    try:
        return [InvestmentOut.model_validate(r) for r in service.list_investments(caller)]
    except RepositoryError as e:
        logger.error(f"list_investments failed: {e}", exc_info=True)
        raise HTTPException(500, detail="Failed to load investments")


@router.get("/summary", response_model=PortfolioSummary)
def investments_summary(
        caller: Caller = Depends(get_current_caller),
        service: InvestmentService = Depends(get_investment_service),
):
    """Value, cost, gain and return% per holding and for the whole portfolio."""
    try:
        return summarize_portfolio(service.list_investments(caller))
    except RepositoryError as e:
        logger.error(f"investments_summary failed: {e}", exc_info=True)
        raise HTTPException(500, detail="Failed to load investments")


@router.post("", response_model=InvestmentOut, status_code=status.HTTP_201_CREATED)
def create_investment(
        payload: InvestmentCreate,
        caller: Caller = Depends(get_current_caller),
        service: InvestmentService = Depends(get_investment_service),
):
    try:
        investment = service.create_investment(caller, payload)
        return InvestmentOut.model_validate(investment)
    except RepositoryError as e:
        logger.error(f"create_investment failed: {e}", exc_info=True)
        raise HTTPException(500, detail="Failed to add investment")


@router.put("/{investment_id}", response_model=InvestmentOut)
def update_investment(
        investment_id: str,
        payload: InvestmentUpdate,
        caller: Caller = Depends(get_current_caller),
        service: InvestmentService = Depends(get_investment_service),
):
    """Partial update, omitted or null fields keep their value."""
    try:
        investment = service.update_investment(caller, investment_id, payload)
        return InvestmentOut.model_validate(investment)
    except InvestmentNotFoundError:
        raise HTTPException(404, detail="Not found")
    except InvestmentForbiddenError:
        raise HTTPException(403, detail="Forbidden")
    except RepositoryError as e:
        logger.error(f"update_investment {investment_id} failed: {e}", exc_info=True)
        raise HTTPException(500, detail="Failed to update investment")


@router.delete("/{investment_id}", response_model=InvestmentDeleted)
def delete_investment(
        investment_id: str,
        caller: Caller = Depends(get_current_caller),
        service: InvestmentService = Depends(get_investment_service),
):
    try:
        deleted = service.delete_investment(caller, investment_id)
        return InvestmentDeleted(success=True, investment=deleted)
    except InvestmentNotFoundError:
        raise HTTPException(404, detail="Not found")
    except InvestmentForbiddenError:
        raise HTTPException(403, detail="Forbidden")
    except RepositoryError as e:
        logger.error(f"delete_investment {investment_id} failed: {e}", exc_info=True)
        raise HTTPException(500, detail="Failed to delete investment")
