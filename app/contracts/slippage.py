from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class SlippageRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    symbol: str
    amount: float = Field(gt=0)
    side: Literal["buy", "sell"] = "buy"
    exchanges: list[str] = Field(default_factory=list)


class SlippageFees(BaseModel):
    model_config = ConfigDict(extra="ignore")

    trading_fee: float = 0.0
    slippage_cost: float = 0.0


class SlippageQuote(BaseModel):
    model_config = ConfigDict(extra="ignore")

    exchange: str
    quote_price: float
    predicted_slippage_pct: float
    total_cost: float
    fees: SlippageFees = Field(default_factory=SlippageFees)


class SlippageResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    best_venue: str
    quotes: list[SlippageQuote] = Field(default_factory=list)
