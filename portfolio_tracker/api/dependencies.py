from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from portfolio_tracker.core.config import settings
from portfolio_tracker.core.db import get_db
from portfolio_tracker.core.security import Caller, CallerVerifier, SupabaseCallerVerifier
from portfolio_tracker.managers.cache_manager import CacheManager
from portfolio_tracker.repositories.factory import RepositoryFactory
from portfolio_tracker.services.investment_service import InvestmentService
from portfolio_tracker.services.symbol_service import SYMBOL_CACHE_PREFIX, SymbolService

bearer_scheme = HTTPBearer(auto_error=False)


def get_factory(db: Session = Depends(get_db)) -> RepositoryFactory:
    return RepositoryFactory(db)


@lru_cache
def get_caller_verifier() -> CallerVerifier:
    return SupabaseCallerVerifier(
        settings.SUPABASE_URL,
        settings.SUPABASE_SERVICE_ROLE_KEY,
        timeout=settings.AUTH_TIMEOUT,
    )


def get_current_caller(
        credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
        verifier: CallerVerifier = Depends(get_caller_verifier),
) -> Caller:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    caller = verifier.verify(credentials.credentials)
    if caller is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return caller


def get_investment_service(factory: RepositoryFactory = Depends(get_factory)) -> InvestmentService:
    return InvestmentService(factory)


def get_symbol_cache() -> Optional[CacheManager]:
    if not settings.CACHE_ENABLED:
        return None
    return CacheManager(prefix=SYMBOL_CACHE_PREFIX)


def get_symbol_service(
        factory: RepositoryFactory = Depends(get_factory),
        cache: Optional[CacheManager] = Depends(get_symbol_cache),
) -> SymbolService:
    return SymbolService(
        factory.get_symbol_repository(),
        cache=cache,
        limit=settings.SYMBOL_SEARCH_LIMIT,
        cache_ttl=settings.SYMBOL_CACHE_TTL,
    )
