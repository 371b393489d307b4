"""
Chat Router - One turn of the TubeGrow Assistant.

The dashboard keeps the conversation and sends the prior turns with every
message, so the backend stays stateless. POST /chat answers through the
fallback router; POST /chat/stream sends Gemini's answer as plain text
chunks while it is being generated.
"""

import asyncio
import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from tubegrow.ai.errors import RouterError
from tubegrow.ai.schemas.request import ChatMessage, Language
from tubegrow.deps import get_chat_service, router_error_to_http, validation_error_to_http
from tubegrow.services.chat_service import ChatService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])

STREAM_MEDIA_TYPE = "text/plain; charset=utf-8"


class ChatTurn(BaseModel):
    role: Literal["user", "model"]
    text: str


class ChatRequest(BaseModel):
    """
    Example:
    {
        "message": "How long should my intro be?",
        "history": [{"role": "user", "text": "Hi"}, {"role": "model", "text": "Hello!"}],
        "language": "en"
    }
    """
    message: str = Field(..., min_length=1, max_length=4000)
    history: List[ChatTurn] = Field(default_factory=list)
    language: Language = Language.EN


class ChatResponse(BaseModel):
    reply: str


@router.post("", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    service: ChatService = Depends(get_chat_service),
):
    history = [ChatMessage(role=t.role, text=t.text) for t in request.history]
    try:
        reply = await service.reply(request.message, history, request.language)
    except RouterError as e:
        raise router_error_to_http(e)
    except ValueError as e:
        raise validation_error_to_http(e)
    return ChatResponse(reply=reply)


@router.post("/stream")
async def chat_stream(
    request: ChatRequest,
    service: ChatService = Depends(get_chat_service),
):
    """
    Stream the assistant's answer as text/plain chunks.

    Errors raised before the first chunk (empty message, no Gemini key,
    failed stream) map to 422 / 503 / 502 exactly like POST /chat. A
    failure after the first chunk ends the stream early and is logged.
    """
    history = [ChatMessage(role=t.role, text=t.text) for t in request.history]
    queue: "asyncio.Queue[Optional[str]]" = asyncio.Queue()

    async def produce() -> str:
        try:
            return await service.stream_reply(
                request.message, history, request.language, queue.put_nowait
            )
        finally:
            # None marks the end of the stream
            queue.put_nowait(None)

    task = asyncio.create_task(produce())
    try:
        first = await queue.get()
    except asyncio.CancelledError:
        task.cancel()
        raise

    if first is None:
        try:
            reply = await task
        except RouterError as e:
            raise router_error_to_http(e)
        except ValueError as e:
            raise validation_error_to_http(e)
        return StreamingResponse(iter([reply] if reply else []), media_type=STREAM_MEDIA_TYPE)

    async def body():
        try:
            chunk = first
            while chunk is not None:
                yield chunk
                chunk = await queue.get()
            await task
        except RouterError as e:
            logger.error(f"Chat stream ended early: {e}")
        finally:
            if not task.done():
                task.cancel()

    return StreamingResponse(body(), media_type=STREAM_MEDIA_TYPE)
