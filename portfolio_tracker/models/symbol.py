from sqlalchemy import Column, String, JSON
from portfolio_tracker.core.db import Base


class Symbol(Base):
    __tablename__ = "symbols"

    symbol = Column(String, primary_key=True, unique=True, nullable=False)
    name = Column(String, nullable=False, default="")
    exchange = Column(String, nullable=True)
    isin = Column(String, nullable=True)
    instrument_type = Column(String, nullable=True)
    # "metadata" is reserved on declarative classes
    meta = Column("metadata", JSON, key="meta", nullable=False, default=dict)
