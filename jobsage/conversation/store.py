"""Conversation store: owns the conversation set and the current selection.

Every mutation writes the full set back to the key-value store before it
returns. If that write fails, ``PersistenceError`` propagates to the caller;
the in-memory change stays applied and is written by the next successful save.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from ..config import ChatConfig
from ..local_storage import KeyValueStore
from ..persona import PersonaConfig
from .models import Conversation, ConversationSummary, Message, new_id, utc_now
from .snapshot import dump_conversations, load_conversations

logger = logging.getLogger(__name__)


def derive_title(text: str, max_length: int = 30, ellipsis: str = "...") -> str:
    """Title for a conversation, taken from its first user message."""
    return text[:max_length] + ellipsis


class ConversationStore:
    def __init__(
        self,
        storage: KeyValueStore,
        config: Optional[ChatConfig] = None,
        persona: Optional[PersonaConfig] = None,
        id_factory: Callable[[], str] = new_id,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._storage = storage
        self.config = config or ChatConfig()
        self.persona = persona or PersonaConfig()
        self._new_id = id_factory
        self._now = clock
        self._conversations: list[Conversation] = []  # Newest-created first
        self._selected_id: Optional[str] = None

    # ---- Read access ----

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def conversations(self) -> list[Conversation]:
        return [c.model_copy(deep=True) for c in self._conversations]

    @property
    def selected_conversation(self) -> Optional[Conversation]:
        if self._selected_id is None:
            return None
        return self.get_conversation(self._selected_id)

    def has_conversation(self, conv_id: str) -> bool:
        return self._find(conv_id) is not None

    def get_conversation(self, conv_id: str) -> Optional[Conversation]:
        conv = self._find(conv_id)
        return conv.model_copy(deep=True) if conv else None

    def list_summaries(self) -> list[ConversationSummary]:
        return [ConversationSummary.from_conversation(c) for c in self._conversations]

    # ---- Mutations ----

    def initialize(self) -> None:
        """Load the persisted set, or start a fresh one if there is none."""
        loaded = load_conversations(self._storage.load_snapshot(self.config.storage_key))
        if loaded:
            self._conversations = loaded
            self._selected_id = loaded[0].id
            logger.info("Loaded %d conversations", len(loaded))
            return

        self._conversations = []
        self._selected_id = None
        self.create_conversation()

    def create_conversation(self) -> Conversation:
        now = self._now()
        conv = Conversation(
            id=self._new_id(),
            title=self.config.untitled_title,
            messages=[
                Message(
                    id=self._new_id(),
                    content=self.persona.greeting,
                    sender="assistant",
                    timestamp=now,
                )
            ],
            last_updated=now,
        )
        self._conversations.insert(0, conv)
        self._selected_id = conv.id
        logger.debug("Created conversation %s", conv.id)
        self._persist()
        return conv.model_copy(deep=True)

    def select_conversation(self, conv_id: str) -> bool:
        if self._find(conv_id) is None:
            return False
        self._selected_id = conv_id
        return True

    def delete_conversation(self, conv_id: str) -> bool:
        if self._find(conv_id) is None:
            return False

        self._conversations = [c for c in self._conversations if c.id != conv_id]
        logger.debug("Deleted conversation %s", conv_id)

        if not self._conversations:
            # An empty set is never left visible; the new conversation persists both changes
            self._selected_id = None
            self.create_conversation()
            return True

        if self._selected_id == conv_id:
            self._selected_id = self._conversations[0].id
        self._persist()
        return True

    def append_user_message(self, conv_id: str, text: str) -> Optional[Conversation]:
        if not text or not text.strip():
            return None
        conv = self._find(conv_id)
        if conv is None:
            return None

        # The title is derived once, from the first user message
        untitled = not conv.has_user_message()
        now = self._now()
        conv.messages.append(
            Message(id=self._new_id(), content=text, sender="user", timestamp=now)
        )
        conv.last_updated = now
        if untitled:
            conv.title = derive_title(
                text, self.config.title_max_length, self.config.title_ellipsis
            )
        self._persist()
        return conv.model_copy(deep=True)

    def append_assistant_message(self, conv_id: str, text: str) -> Optional[Conversation]:
        conv = self._find(conv_id)
        if conv is None:
            logger.debug("Dropping assistant message for missing conversation %s", conv_id)
            return None

        now = self._now()
        conv.messages.append(
            Message(id=self._new_id(), content=text, sender="assistant", timestamp=now)
        )
        conv.last_updated = now
        self._persist()
        return conv.model_copy(deep=True)

    # ---- Internals ----

    def _find(self, conv_id: str) -> Optional[Conversation]:
        for conv in self._conversations:
            if conv.id == conv_id:
                return conv
        return None

    def _persist(self) -> None:
        self._storage.save_snapshot(
            self.config.storage_key, dump_conversations(self._conversations)
        )
