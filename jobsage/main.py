import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobsage.api.routes_chat import router as chat_router
from jobsage.api.routes_conversation import router as conversation_router
from jobsage.api.routes_resumes import router as resumes_router
from jobsage.api.routes_settings import router as settings_router
from jobsage.config import AppConfig, get_config, get_config_dir
from jobsage.conversation.replies import ReplySimulator
from jobsage.conversation.store import ConversationStore
from jobsage.conversation.turns import ConversationTurns
from jobsage.errors import PersistenceError
from jobsage.local_storage import JsonFileKeyValueStore, KeyValueStore
from jobsage.persona import PersonaConfig, load_persona
from jobsage.resumes.library import ResumeLibrary

VERSION = "0.1.0"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


def create_app(
    config: Optional[AppConfig] = None,
    storage: Optional[KeyValueStore] = None,
    persona: Optional[PersonaConfig] = None,
    simulator: Optional[ReplySimulator] = None,
) -> FastAPI:
    config = config or get_config()
    storage = storage or JsonFileKeyValueStore(get_config_dir())
    store = ConversationStore(storage, config.chat, persona or load_persona())
    simulator = simulator or ReplySimulator(delay_seconds=config.chat.reply_delay_seconds)
    turns = ConversationTurns(store, simulator)

    @asynccontextmanager
    async def lifespan(app):
        store.initialize()
        logger.info("Conversation store ready (%d conversations)", len(store.list_summaries()))
        try:
            yield
        finally:
            # Pending replies always complete before shutdown
            await turns.drain()

    app = FastAPI(title="JobSage Backend", version=VERSION, lifespan=lifespan)
    app.state.config = config
    app.state.conversation_store = store
    app.state.reply_simulator = simulator
    app.state.turns = turns
    app.state.resume_library = ResumeLibrary(storage, config.resumes)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=507,
            content={"detail": "Change was applied but could not be saved"},
        )

    app.include_router(conversation_router)
    app.include_router(chat_router)
    app.include_router(resumes_router)
    app.include_router(settings_router)

    @app.get("/api/health")
    async def health_check():
        return {"status": "ok", "version": VERSION}

    return app


def main() -> None:
    import uvicorn

    config = get_config()
    uvicorn.run(create_app(config), host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()
