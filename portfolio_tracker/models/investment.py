import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Column, String, Numeric, DateTime, Uuid, func
from portfolio_tracker.core.db import Base


class InvestmentType(str, Enum):
    STOCK = "Stock"
    ETF = "ETF"
    BOND = "Bond"
    CRYPTO = "Crypto"
    MUTUAL_FUND = "Mutual Fund"

    @classmethod
    def is_known(cls, value: str) -> bool:
        return value in {t.value for t in cls}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Investment(Base):
    __tablename__ = "investments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    symbol = Column(String, nullable=False)
    # open string, see InvestmentType for the values the client offers
    type = Column(String, nullable=False)
    shares = Column(Numeric(20, 8), nullable=False)
    buy_price = Column(Numeric(20, 8), nullable=False)
    current_price = Column(Numeric(20, 8), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
