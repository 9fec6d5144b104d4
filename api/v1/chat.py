from __future__ import annotations

import json
import logging

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from app.chat.contracts import ChatRouteRequest, ChatRouteResponse
from app.chat.router import route_chat

router = APIRouter(prefix="/chat", tags=["chat"])
logger = logging.getLogger(__name__)


@router.post("/route", response_model=ChatRouteResponse)
async def chat_route(req: ChatRouteRequest) -> ChatRouteResponse:
    return await route_chat(req)


def _sse_event(payload: dict) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=True)}\n\n"


@router.post("/route/stream")
async def chat_route_stream(req: ChatRouteRequest) -> StreamingResponse:
    async def event_stream():
        yield _sse_event({"type": "status", "status": "processing"})
        response = await route_chat(req)
        message = response.assistant_message or ""
        for i in range(0, len(message), 48):
            chunk = message[i : i + 48]
            yield _sse_event({"type": "delta", "content": chunk})
        yield _sse_event({"type": "final", "response": response.model_dump(mode="json")})

    return StreamingResponse(event_stream(), media_type="text/event-stream")
