from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class InvestmentCreate(BaseModel):
    """Body of POST /investments. Owner is never taken from the payload."""
    name: str = Field(min_length=1)
    symbol: str = Field(min_length=1)
    type: str = Field(min_length=1)
    shares: Decimal = Field(ge=0)
    buy_price: Decimal = Field(alias="buyPrice")
    current_price: Decimal = Field(alias="currentPrice")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class InvestmentUpdate(BaseModel):
    shares: Optional[Decimal] = Field(default=None, ge=0)
    current_price: Optional[Decimal] = Field(default=None, alias="currentPrice")
    name: Optional[str] = None
    symbol: Optional[str] = None
    type: Optional[str] = None
    buy_price: Optional[Decimal] = Field(default=None, alias="buyPrice")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def changes(self) -> Dict[str, Any]:
        """Fields present and non-null in the request, ready to apply."""
        values = {k: v for k, v in self.model_dump().items() if v is not None}
        if "symbol" in values:
            values["symbol"] = values["symbol"].upper()
        return values


class InvestmentOut(BaseModel):
    id: UUID
    user_id: str
    name: str
    symbol: str
    type: str
    shares: float
    buy_price: float
    current_price: float
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class InvestmentDeleted(BaseModel):
    success: bool = True
    investment: InvestmentOut
