from portfolio_tracker.repositories.base import BaseRepository, RepositoryError
from portfolio_tracker.repositories.investments import InvestmentRepository
from portfolio_tracker.repositories.symbols import SymbolRepository
from portfolio_tracker.repositories.factory import RepositoryFactory

__all__ = [
    "BaseRepository",
    "RepositoryError",
    "InvestmentRepository",
    "SymbolRepository",
    "RepositoryFactory",
]
