from decimal import Decimal
from typing import Iterable

from portfolio_tracker.models import Investment
from portfolio_tracker.schemas.portfolio import HoldingSummary, PortfolioSummary

ZERO = Decimal("0")


def _dec(value) -> Decimal:
    if value is None:
        return ZERO
    return value if isinstance(value, Decimal) else Decimal(str(value))


def return_pct(gain: Decimal, cost: Decimal) -> Decimal:
    """gain / cost * 100, or 0 for a zero cost basis."""
    if cost == 0:
        return ZERO
    return round(gain / cost * 100, 2)


def summarize_holding(investment: Investment) -> HoldingSummary:
    shares = _dec(investment.shares)
    value = shares * _dec(investment.current_price)
    cost = shares * _dec(investment.buy_price)
    gain = value - cost

    return HoldingSummary(
        id=investment.id,
        name=investment.name,
        symbol=investment.symbol,
        type=investment.type,
        shares=float(shares),
        value=float(value),
        cost=float(cost),
        gain=float(gain),
        return_pct=float(return_pct(gain, cost)),
    )


def summarize_portfolio(investments: Iterable[Investment]) -> PortfolioSummary:
    """Per-holding and total value, cost, gain and return% as the portfolio page shows them."""
    holdings = []
    total_value = ZERO
    total_cost = ZERO

    for inv in investments:
        shares = _dec(inv.shares)
        total_value += shares * _dec(inv.current_price)
        total_cost += shares * _dec(inv.buy_price)
        holdings.append(summarize_holding(inv))

    total_gain = total_value - total_cost
    return PortfolioSummary(
        holdings=holdings,
        total_value=float(total_value),
        total_cost=float(total_cost),
        total_gain=float(total_gain),
        total_return_pct=float(return_pct(total_gain, total_cost)),
    )
