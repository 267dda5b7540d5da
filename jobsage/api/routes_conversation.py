from fastapi import APIRouter, Depends, HTTPException

from ..conversation.store import ConversationStore
from ..conversation.turns import ConversationTurns
from .deps import get_store, get_turns

router = APIRouter(prefix="/api/conversations", tags=["conversations"])


@router.get("")
async def list_conversations(store: ConversationStore = Depends(get_store)):
    summaries = store.list_summaries()
    return {
        "conversations": [s.model_dump(mode="json") for s in summaries],
        "selected_id": store.selected_id,
    }


@router.post("")
async def create_conversation(store: ConversationStore = Depends(get_store)):
    conv = store.create_conversation()
    return {"conversation": conv.model_dump(mode="json"), "selected_id": store.selected_id}


@router.get("/{conv_id}")
async def get_conversation(
    conv_id: str,
    store: ConversationStore = Depends(get_store),
    turns: ConversationTurns = Depends(get_turns),
):
    conv = store.get_conversation(conv_id)
    if not conv:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return {
        "conversation": conv.model_dump(mode="json"),
        "awaiting_reply": turns.is_awaiting(conv_id),
    }


@router.post("/{conv_id}/select")
async def select_conversation(conv_id: str, store: ConversationStore = Depends(get_store)):
    if not store.select_conversation(conv_id):
        raise HTTPException(status_code=404, detail="Conversation not found")
    return {"selected_id": store.selected_id}


@router.delete("/{conv_id}")
async def delete_conversation(conv_id: str, store: ConversationStore = Depends(get_store)):
    if store.delete_conversation(conv_id):
        return {"status": "deleted", "selected_id": store.selected_id}
    raise HTTPException(status_code=404, detail="Conversation not found")
