from portfolio_tracker.models.investment import Investment, InvestmentType
from portfolio_tracker.models.symbol import Symbol

__all__ = ["Investment", "InvestmentType", "Symbol"]
