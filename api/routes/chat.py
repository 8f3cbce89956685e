"""Chat routes proxying character conversations to OpenAI."""

import logging
from typing import Literal, Optional

import openai
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from core.services import OpenAIChatService, ServiceConfig

logger = logging.getLogger(__name__)

router = APIRouter()

# Lazy-loaded OpenAI service
_chat_service: Optional[OpenAIChatService] = None


def get_chat_service() -> OpenAIChatService:
    """Get or create chat service."""
    global _chat_service
    if _chat_service is None:
        _chat_service = OpenAIChatService(ServiceConfig.from_env())
    return _chat_service


class ChatMessage(BaseModel):
    """Chat message."""

    role: Literal["system", "user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Chat request."""

    system_prompt: str = Field(default="", alias="systemPrompt")
    messages: list[ChatMessage]


@router.post("")
async def chat(request: Request):
    """Get a completion for a character conversation."""
    service = get_chat_service()
    if not service.config.is_openai_configured():
        return JSONResponse({"error": "OPENAI_API_KEY is not set."}, status_code=500)

    try:
        body = ChatRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        return JSONResponse({"error": "Invalid request body."}, status_code=400)

    messages = [m.model_dump() for m in body.messages]

    try:
        completion = await service.complete(body.system_prompt, messages)
    except openai.APIStatusError as e:
        try:
            detail = e.response.json()
        except ValueError:
            detail = {"error": str(e)}
        return JSONResponse(detail, status_code=e.status_code)
    except openai.APIError as e:
        return JSONResponse({"error": str(e)}, status_code=502)

    return completion


@router.get("/status")
async def get_chat_status():
    """Check if chat service is available."""
    config = get_chat_service().config
    return {
        "available": config.is_openai_configured(),
        "provider": "openai" if config.is_openai_configured() else None,
        "model": config.openai_model if config.is_openai_configured() else None,
    }
