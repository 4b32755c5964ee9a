from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import APIRouter, Depends
from pydantic import BaseModel as PydanticBaseModel

from vitrine.dependencies import get_flow_controller, get_session_store
from vitrine.flow_controller import FlowController
from vitrine.session_state import SessionStore

router = APIRouter()


class ChatRequest(PydanticBaseModel):
    text: str
    tenant_id: str
    user_id: Optional[str] = None


class ChatResponse(PydanticBaseModel):
    reply: Optional[str] = None
    intent: str
    confidence: float
    needs_human: bool = False
    session_id: str
    session: Dict[str, Any]


@router.post("/chat", response_model=ChatResponse)
async def chat_endpoint(body: ChatRequest, controller: FlowController = Depends(get_flow_controller)):
    session_id = (body.user_id or "").strip() or uuid4().hex

    turn = controller.handle_message(user_id=session_id, tenant_id=body.tenant_id, text=body.text or "")

    return ChatResponse(
        reply=turn.reply,
        intent=turn.intent.value,
        confidence=turn.confidence,
        needs_human=turn.needs_human,
        session_id=session_id,
        session=turn.session,
    )


@router.get("/session/{user_id}")
async def get_session(user_id: str, sessions: SessionStore = Depends(get_session_store)):
    return {"session_id": user_id, "session": sessions.snapshot(user_id)}


@router.delete("/session/{user_id}")
async def reset_session(user_id: str, sessions: SessionStore = Depends(get_session_store)):
    sessions.reset(user_id)
    return {"session_id": user_id, "status": "reset"}
