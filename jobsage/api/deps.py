"""Dependency providers reading the components held on app state."""

from fastapi import Request

from ..conversation.store import ConversationStore
from ..conversation.turns import ConversationTurns
from ..resumes.library import ResumeLibrary


def get_store(request: Request) -> ConversationStore:
    return request.app.state.conversation_store


def get_turns(request: Request) -> ConversationTurns:
    return request.app.state.turns


def get_library(request: Request) -> ResumeLibrary:
    return request.app.state.resume_library
