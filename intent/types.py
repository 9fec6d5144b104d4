from __future__ import annotations

import re
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

ADDRESS_SHAPE = re.compile(r"^0x[0-9a-fA-F]{40}$")
TRADING_PAIR_SHAPE = re.compile(r"^[A-Z]{2,10}/[A-Z]{2,10}$")


class IntentKind(str, Enum):
    GET_BALANCE = "GET_BALANCE"
    SEND = "SEND"
    SWAP = "SWAP"
    CONSULT_SLIPPAGE = "CONSULT_SLIPPAGE"
    UNKNOWN = "UNKNOWN"


class EntitySet(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    amount: Decimal | None = None
    token: str | None = None
    to_address: str | None = None
    chain_id: int | None = None
    chain_name: str | None = None
    trading_pair: str | None = None

    @field_validator("to_address")
    @classmethod
    def _validate_to_address(cls, value: str | None) -> str | None:
        if value is not None and not ADDRESS_SHAPE.match(value):
            raise ValueError("to_address must be 0x followed by 40 hex digits")
        return value

    @field_validator("trading_pair")
    @classmethod
    def _validate_trading_pair(cls, value: str | None) -> str | None:
        if value is not None and not TRADING_PAIR_SHAPE.match(value):
            raise ValueError("trading_pair must look like BASE/QUOTE")
        return value

    def merged_with(self, newer: "EntitySet") -> "EntitySet":
        """Return a new set where every field present in `newer` wins."""
        updates: dict[str, Any] = {
            name: value
            for name, value in newer.model_dump().items()
            if value is not None
        }
        return self.model_copy(update=updates)

    def is_empty(self) -> bool:
        return all(value is None for value in self.model_dump().values())


class ParsedIntent(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    intent: IntentKind
    confidence: float = Field(ge=0, le=1)
    entities: EntitySet = Field(default_factory=EntitySet)


class ResolvedIntent(BaseModel):
    """
    Result of folding a whole conversation.

    `entities` holds the accumulated values: for each field, the value from
    the most recent turn that mentioned it.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    intent: IntentKind
    confidence: float = Field(ge=0, le=1)
    entities: EntitySet = Field(default_factory=EntitySet)
    turns: int = 0
    continued_from_consultation: bool = False

    @property
    def is_send_ready(self) -> bool:
        return (
            self.intent == IntentKind.SEND
            and self.entities.amount is not None
            and self.entities.to_address is not None
        )
