from __future__ import annotations

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.context import set_conversation_id


class ConversationContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        """
        Sets conversation_id into contextvars for the lifetime of the request.

        Source: X-Conversation-Id header. The chat route also sets it from the
        request body once parsed.
        """
        conversation_id = request.headers.get("X-Conversation-Id")

        try:
            if conversation_id:
                set_conversation_id(str(conversation_id))
            response = await call_next(request)
            return response
        finally:
            # always clear context
            set_conversation_id(None)
