from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.contracts.preview import TransactionPreview
from intent.types import EntitySet, IntentKind


class RouteKind(str, Enum):
    REPLY = "REPLY"
    PREVIEW = "PREVIEW"
    DEFER = "DEFER"


class WalletContext(BaseModel):
    model_config = ConfigDict(extra="forbid")

    address: str | None = None
    chain_id: int | None = None
    is_connected: bool = False


class ChatRouteRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    message: str
    conversation_id: str | None = None
    # Earlier user utterances, oldest first. When omitted the server-side
    # history for conversation_id is used instead.
    history: list[str] | None = None
    wallet_context: WalletContext = Field(default_factory=WalletContext)
    metadata: dict[str, Any] = Field(default_factory=dict)


class ChatRouteResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: RouteKind
    assistant_message: str = ""
    intent: IntentKind
    confidence: float = Field(ge=0, le=1)
    entities: EntitySet = Field(default_factory=EntitySet)
    questions: list[str] = Field(default_factory=list)
    missing_slots: list[str] = Field(default_factory=list)
    preview: TransactionPreview | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    reason: str | None = None
    retryable: bool = False
    conversation_id: str | None = None
