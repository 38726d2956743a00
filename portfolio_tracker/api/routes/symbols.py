from typing import List

from fastapi import APIRouter, Depends, Query

from portfolio_tracker.api.dependencies import get_symbol_service
from portfolio_tracker.schemas.symbols import SymbolOut
from portfolio_tracker.services.symbol_service import SymbolService

router = APIRouter()


@router.get("", response_model=List[SymbolOut])
def search_symbols(
        q: str = Query(default="", description="Company name fragment or ticker prefix"),
        service: SymbolService = Depends(get_symbol_service),
):
    """
    Autocomplete candidates: name contains ``q`` or symbol starts with ``q``.
    Lookup errors degrade to an empty list.
    """
    return service.search(q)
