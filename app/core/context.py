from __future__ import annotations

from contextvars import ContextVar
from typing import Optional

conversation_id_ctx: ContextVar[Optional[str]] = ContextVar("conversation_id", default=None)


def set_conversation_id(conversation_id: Optional[str]) -> None:
    conversation_id_ctx.set(conversation_id)


def get_conversation_id() -> Optional[str]:
    return conversation_id_ctx.get()
