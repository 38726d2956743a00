from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class SymbolOut(BaseModel):
    symbol: str
    name: str
    exchange: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True)
