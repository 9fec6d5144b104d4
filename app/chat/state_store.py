from __future__ import annotations

import time
from threading import Lock
from typing import Any

MAX_HISTORY_TURNS = 20

_STORE: dict[str, dict[str, Any]] = {}
_lock = Lock()


def _now() -> float:
    return time.time()


def _live_state(conversation_id: str, now: float) -> dict[str, Any] | None:
    # caller holds _lock
    state = _STORE.get(conversation_id)
    if not state:
        return None
    expires_at = state.get("expires_at")
    if expires_at is not None and expires_at <= now:
        _STORE.pop(conversation_id, None)
        return None
    return state


def _store(conversation_id: str, state: dict[str, Any], now: float, ttl_seconds: int) -> None:
    # caller holds _lock
    state = dict(state)
    state["updated_at"] = now
    state["expires_at"] = now + ttl_seconds
    _STORE[conversation_id] = state


def get(conversation_id: str) -> dict[str, Any] | None:
    with _lock:
        state = _live_state(conversation_id, _now())
        return dict(state) if state else None


def set(
    conversation_id: str,
    state: dict[str, Any],
    *,
    ttl_seconds: int = 1200,
) -> None:
    with _lock:
        _store(conversation_id, state, _now(), ttl_seconds)


def delete(conversation_id: str) -> None:
    with _lock:
        _STORE.pop(conversation_id, None)


def cleanup() -> None:
    now = _now()
    with _lock:
        for key, state in list(_STORE.items()):
            expires_at = state.get("expires_at")
            if expires_at is not None and expires_at <= now:
                _STORE.pop(key, None)


def get_history(conversation_id: str) -> list[str]:
    state = get(conversation_id) or {}
    return list(state.get("messages") or [])


def append_message(
    conversation_id: str,
    message: str,
    *,
    ttl_seconds: int = 1200,
) -> list[str]:
    """Append a user utterance and return the conversation, oldest first."""
    with _lock:
        now = _now()
        state = _live_state(conversation_id, now) or {}
        messages = [*(state.get("messages") or []), message][-MAX_HISTORY_TURNS:]
        _store(conversation_id, {"messages": messages}, now, ttl_seconds)
    return list(messages)
