from typing import List, Optional

import redis

from portfolio_tracker.core.config import settings
from portfolio_tracker.core.logger import logger
from portfolio_tracker.managers.cache_manager import CacheManager
from portfolio_tracker.models import Symbol
from portfolio_tracker.repositories.symbols import SymbolRepository
from portfolio_tracker.schemas.symbols import SymbolOut

SYMBOL_CACHE_PREFIX = "symbols"


def clear_symbol_cache(client=None) -> int:
    """Drop cached lookup results after the symbols table changed."""
    if not settings.CACHE_ENABLED:
        return 0
    try:
        return CacheManager(prefix=SYMBOL_CACHE_PREFIX, client=client).clear()
    except redis.RedisError as e:
        logger.warning(f"Could not clear symbols cache: {e}")
        return 0


class SymbolService:
    """
    Autocomplete lookup over the symbols reference table.

    Never raises: store and cache failures are logged and the caller gets
    no suggestions instead of an error.
    """

    def __init__(
            self,
            repo: SymbolRepository,
            cache: Optional[CacheManager] = None,
            limit: int = 20,
            cache_ttl: int = 300,
    ):
        self.repo = repo
        self.cache = cache
        self.limit = limit
        self.cache_ttl = cache_ttl

    def search(self, query: Optional[str]) -> List[SymbolOut]:
        q = (query or "").strip()
        if not q:
            return []

        cached = self._cache_get(q)
        if cached is not None:
            return [SymbolOut.model_validate(r) for r in cached]

        try:
            rows = self.repo.search(q, limit=self.limit)
        except Exception as e:
            logger.error(f"Symbol search failed for '{q}': {e}", exc_info=True)
            return []

        results = [self.to_out(r) for r in rows]
        self._cache_set(q, [r.model_dump(mode="json") for r in results])
        return results

    @staticmethod
    def to_out(row: Symbol) -> SymbolOut:
        return SymbolOut(
            symbol=(row.symbol or "").upper(),
            name=row.name or "",
            exchange=row.exchange or None,
            metadata=row.meta or {},
        )

    def _cache_get(self, q: str):
        if self.cache is None:
            return None
        try:
            return self.cache.get(q.lower(), self.limit)
        except Exception as e:
            logger.warning(f"Symbol cache read failed: {e}")
            return None

    def _cache_set(self, q: str, records: list) -> None:
        if self.cache is None:
            return
        try:
            self.cache.set(records, q.lower(), self.limit, ttl=self.cache_ttl)
        except Exception as e:
            logger.warning(f"Symbol cache write failed: {e}")
