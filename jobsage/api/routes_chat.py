import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..conversation.store import ConversationStore
from ..conversation.turns import ConversationTurns
from .deps import get_store, get_turns

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])


class SendMessageRequest(BaseModel):
    content: str


@router.post("/{conv_id}/messages", status_code=202)
async def send_message(
    conv_id: str,
    req: SendMessageRequest,
    store: ConversationStore = Depends(get_store),
    turns: ConversationTurns = Depends(get_turns),
):
    if not store.has_conversation(conv_id):
        raise HTTPException(status_code=404, detail="Conversation not found")
    # One turn at a time per conversation: input is locked while the assistant is typing
    if turns.is_awaiting(conv_id):
        raise HTTPException(status_code=409, detail="Assistant is still replying")
    if not req.content.strip():
        raise HTTPException(status_code=400, detail="Message is empty")

    conv = turns.send(conv_id, req.content)
    if conv is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    logger.info("Message queued for conversation %s", conv_id)
    return {"conversation": conv.model_dump(mode="json"), "awaiting_reply": True}


@router.get("/{conv_id}/status")
async def reply_status(
    conv_id: str,
    store: ConversationStore = Depends(get_store),
    turns: ConversationTurns = Depends(get_turns),
):
    if not store.has_conversation(conv_id):
        raise HTTPException(status_code=404, detail="Conversation not found")
    return {"awaiting_reply": turns.is_awaiting(conv_id)}
