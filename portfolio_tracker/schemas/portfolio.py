from typing import List
from uuid import UUID

from pydantic import BaseModel


class HoldingSummary(BaseModel):
    id: UUID
    name: str
    symbol: str
    type: str
    shares: float
    value: float
    cost: float
    gain: float
    return_pct: float


class PortfolioSummary(BaseModel):
    holdings: List[HoldingSummary]
    total_value: float
    total_cost: float
    total_gain: float
    total_return_pct: float
