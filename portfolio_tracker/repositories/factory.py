from typing import Type, TypeVar, Dict
from sqlalchemy.orm import Session
from portfolio_tracker.repositories.base import BaseRepository
from portfolio_tracker.repositories.investments import InvestmentRepository
from portfolio_tracker.repositories.symbols import SymbolRepository

T = TypeVar('T', bound=BaseRepository)


class RepositoryFactory:
    """
    Factory class for creating repository instances bound to one session.
    """

    _repository_mapping: Dict[str, Type[BaseRepository]] = {
        'investments': InvestmentRepository,
        'symbols': SymbolRepository,
    }

    def __init__(self, db: Session):
        self.db = db
        self._instances: Dict[str, BaseRepository] = {}

    def get_repository(self, repository_name: str) -> BaseRepository:
        """
        Get a repository instance by name. Creates a singleton instance per factory.

        Args:
            repository_name: Name of the repository ('investments', 'symbols')

        Returns:
            Repository instance

        Raises:
            ValueError: If repository name is not recognized
        """
        if repository_name not in self._repository_mapping:
            available = ', '.join(self._repository_mapping.keys())
            raise ValueError(f"Unknown repository '{repository_name}'. Available: {available}")

        if repository_name not in self._instances:
            repository_class = self._repository_mapping[repository_name]
            self._instances[repository_name] = repository_class(self.db)

        return self._instances[repository_name]

    def get_investment_repository(self) -> InvestmentRepository:
        """Get InvestmentRepository instance"""
        return self.get_repository('investments')

    def get_symbol_repository(self) -> SymbolRepository:
        """Get SymbolRepository instance"""
        return self.get_repository('symbols')
