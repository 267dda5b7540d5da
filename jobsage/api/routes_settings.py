from fastapi import APIRouter, HTTPException, Request

from ..config import AppConfig, update_config
from ..persona import PersonaConfig, save_persona

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("")
async def get_settings(request: Request):
    return request.app.state.config.model_dump()


@router.put("")
async def update_settings(config: AppConfig, request: Request):
    state = request.app.state
    # Stored data is not migrated; storage keys change only via config.json and a restart
    if (
        config.chat.storage_key != state.config.chat.storage_key
        or config.resumes.storage_key != state.config.resumes.storage_key
    ):
        raise HTTPException(
            status_code=409, detail="Storage keys cannot be changed while running"
        )

    updated = update_config(config)
    state.config = updated
    # Live components pick up the new values for subsequent operations
    state.conversation_store.config = updated.chat
    state.reply_simulator.delay_seconds = updated.chat.reply_delay_seconds
    state.resume_library.config = updated.resumes
    return updated.model_dump()


@router.get("/persona")
async def get_persona(request: Request):
    return request.app.state.conversation_store.persona.model_dump()


@router.put("/persona")
async def update_persona(persona: PersonaConfig, request: Request):
    save_persona(persona)
    request.app.state.conversation_store.persona = persona
    return persona.model_dump()
