"""Chat routes: the file agent entry point plus plain language-model chat."""

import logging
import time
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from file_agent.agents.dialog_state import DEFAULT_SESSION_ID
from file_agent.agents.file_agent import FileAgent
from file_agent.agents.prompts import DEFAULT_CHAT_PROMPT
from file_agent.api.deps import get_file_agent, get_llm_client
from file_agent.core.events import AgentEvent
from file_agent.schemas.agent import AgentResponse
from file_agent.services.event_bus import event_bus
from file_agent.services.llm import LLMClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


class ChatRequest(BaseModel):
    message: Optional[str] = None
    session_id: Optional[str] = None


class ChatMessage(BaseModel):
    role: str
    content: str


class ConversationRequest(BaseModel):
    messages: List[ChatMessage] = []
    newMessage: Optional[str] = None


async def emit_event(event: AgentEvent):
    await event_bus.publish(event)


def _message_or_default(body: ChatRequest) -> str:
    if body.message is None or not body.message.strip():
        return DEFAULT_CHAT_PROMPT
    return body.message


# ── Agent ─────────────────────────────────────────────────────────────

@router.post("/agent", response_model=AgentResponse)
async def agent_chat(body: ChatRequest, agent: FileAgent = Depends(get_file_agent)):
    """Run one agent turn and return the raw {action, message, data} result."""
    return await agent.process(
        _message_or_default(body),
        session_id=body.session_id,
        on_event=emit_event,
    )


@router.post("/message")
async def chat_message(body: ChatRequest, agent: FileAgent = Depends(get_file_agent)):
    """Run one agent turn and wrap the result with the original message."""
    message = _message_or_default(body)
    result = await agent.process(message, session_id=body.session_id, on_event=emit_event)
    return {
        "message": message,
        "reply": result.message,
        "action": result.action,
        "data": result.data,
        "session_id": body.session_id or DEFAULT_SESSION_ID,
    }


@router.post("/debug/intent")
async def debug_intent(body: ChatRequest, agent: FileAgent = Depends(get_file_agent)):
    """Classify a message without acting on it."""
    if body.message is None or not body.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")

    intent = await agent.classify(body.message)
    return {
        "message": body.message,
        "intent": intent.type.value,
        "parameters": intent.parameters,
        "timestamp": int(time.time() * 1000),
    }


# ── Plain chat ────────────────────────────────────────────────────────

@router.get("/simple")
async def simple_chat(llm: LLMClient = Depends(get_llm_client)):
    try:
        return await llm.complete(DEFAULT_CHAT_PROMPT)
    except Exception as e:
        logger.exception("Simple chat failed: %s", str(e))
        raise HTTPException(status_code=502, detail=f"Language model error: {str(e)}")


@router.post("/stream")
async def stream_chat(body: ChatRequest, llm: LLMClient = Depends(get_llm_client)):
    """Stream the model's reply as plain text chunks."""
    message = _message_or_default(body)

    async def chunks():
        try:
            async for chunk in llm.stream(message):
                yield chunk
        except Exception as e:
            logger.exception("Streaming chat failed: %s", str(e))
            yield f"\n[error] {str(e)}"

    return StreamingResponse(chunks(), media_type="text/plain; charset=utf-8")


@router.post("/conversation")
async def conversation(body: ConversationRequest, llm: LLMClient = Depends(get_llm_client)):
    """Multi-turn chat with caller-supplied history."""
    if body.newMessage is None or not body.newMessage.strip():
        raise HTTPException(status_code=400, detail="New message is required")

    history = [
        {"role": "user" if m.role == "user" else "assistant", "content": m.content}
        for m in body.messages
    ]
    history.append({"role": "user", "content": body.newMessage})

    try:
        reply = await llm.chat(history)
    except Exception as e:
        logger.exception("Conversation failed: %s", str(e))
        raise HTTPException(status_code=502, detail=f"Language model error: {str(e)}")

    return {"newMessage": body.newMessage, "reply": reply, "conversationHistory": history}


@router.get("/health")
async def chat_health():
    return {"status": "OK", "message": "File agent chat service is running"}
