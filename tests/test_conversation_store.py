"""Tests for ConversationStore state transitions and persistence."""

import json

import pytest

from jobsage.config import ChatConfig
from jobsage.conversation.snapshot import load_conversations
from jobsage.conversation.store import ConversationStore, derive_title
from jobsage.errors import PersistenceError
from jobsage.persona import DEFAULT_GREETING, PersonaConfig


@pytest.fixture
def store(storage, id_factory, clock) -> ConversationStore:
    s = ConversationStore(storage, ChatConfig(), PersonaConfig(), id_factory=id_factory, clock=clock)
    s.initialize()
    return s


_GREETING = '{"id": "m1", "content": "Hello!", "sender": "assistant", "timestamp": "2024-01-15T10:00:00Z"}'
_NO_MESSAGES = '[{"id": "a", "title": "t", "lastUpdated": "2024-01-15T10:00:00Z", "messages": []}]'
_DUPLICATE_IDS = (
    '[{"id": "a", "title": "t", "lastUpdated": "2024-01-15T10:00:00Z", "messages": [%s]},'
    ' {"id": "a", "title": "t", "lastUpdated": "2024-01-15T10:00:00Z", "messages": [%s]}]'
    % (_GREETING, _GREETING)
)


def _persisted(storage):
    return load_conversations(storage.load_snapshot("conversations"))


class TestInitialize:
    def test_fresh_start_creates_one_greeting_conversation(self, store, storage):
        convs = store.conversations
        assert len(convs) == 1
        conv = convs[0]
        assert conv.title == "New Conversation"
        assert len(conv.messages) == 1
        assert conv.messages[0].sender == "assistant"
        assert conv.messages[0].content == DEFAULT_GREETING
        assert store.selected_id == conv.id
        assert [c.id for c in _persisted(storage)] == [conv.id]

    def test_loads_existing_snapshot_and_selects_first(self, store, storage):
        first_id = store.selected_id
        second = store.create_conversation()
        store.append_user_message(first_id, "Who knows Django?")

        reloaded = ConversationStore(storage)
        reloaded.initialize()

        assert [c.id for c in reloaded.conversations] == [second.id, first_id]
        assert reloaded.selected_id == second.id
        assert reloaded.get_conversation(first_id).title == "Who knows Django?..."

    @pytest.mark.parametrize(
        "snapshot", ["", "[]", "{not json", '{"id": "x"}', "null", _NO_MESSAGES, _DUPLICATE_IDS]
    )
    def test_empty_or_corrupt_snapshot_starts_fresh(self, storage, snapshot):
        storage.save_snapshot("conversations", snapshot)

        store = ConversationStore(storage)
        store.initialize()

        assert len(store.conversations) == 1
        assert store.selected_id == store.conversations[0].id
        assert len(_persisted(storage)) == 1

    def test_uses_persona_greeting(self, storage):
        store = ConversationStore(storage, persona=PersonaConfig(greeting="Hi there"))
        store.initialize()

        assert store.selected_conversation.messages[0].content == "Hi there"


class TestCreateAndSelect:
    def test_create_prepends_and_selects(self, store):
        original = store.selected_id
        conv = store.create_conversation()

        assert [c.id for c in store.conversations] == [conv.id, original]
        assert store.selected_id == conv.id
        assert conv.title == "New Conversation"
        assert len(conv.messages) == 1

    def test_create_persists(self, store, storage):
        store.create_conversation()
        assert len(_persisted(storage)) == 2

    def test_select_existing(self, store):
        original = store.selected_id
        store.create_conversation()

        assert store.select_conversation(original) is True
        assert store.selected_id == original

    def test_select_unknown_is_noop(self, store):
        selected = store.selected_id
        assert store.select_conversation("missing") is False
        assert store.selected_id == selected


class TestDelete:
    def test_delete_selected_selects_new_first(self, store):
        older = store.selected_id
        middle = store.create_conversation().id
        newest = store.create_conversation().id

        assert store.delete_conversation(newest) is True

        assert [c.id for c in store.conversations] == [middle, older]
        assert store.selected_id == middle

    def test_delete_unselected_keeps_selection(self, store, storage):
        older = store.selected_id
        newest = store.create_conversation().id

        store.delete_conversation(older)

        assert store.selected_id == newest
        assert [c.id for c in _persisted(storage)] == [newest]

    def test_delete_only_conversation_creates_fresh_one(self, store, storage):
        only = store.selected_id
        store.append_user_message(only, "Find React devs")

        assert store.delete_conversation(only) is True

        convs = store.conversations
        assert len(convs) == 1
        assert convs[0].id != only
        assert len(convs[0].messages) == 1
        assert convs[0].title == "New Conversation"
        assert store.selected_id == convs[0].id
        assert [c.id for c in _persisted(storage)] == [convs[0].id]

    def test_delete_unknown_is_noop(self, store, storage):
        saves = storage.saves
        assert store.delete_conversation("missing") is False
        assert storage.saves == saves


class TestAppendUserMessage:
    def test_first_message_derives_title(self, store):
        conv = store.append_user_message(store.selected_id, "Find React devs")

        assert conv.title == "Find React devs..."
        assert len(conv.messages) == 2
        assert conv.messages[-1].sender == "user"
        assert conv.messages[-1].content == "Find React devs"

    def test_long_message_title_is_truncated(self, store):
        text = "Show me every backend engineer with Kubernetes experience"
        conv = store.append_user_message(store.selected_id, text)

        assert conv.title == text[:30] + "..."

    def test_title_changes_only_once(self, store):
        conv_id = store.selected_id
        store.append_user_message(conv_id, "First question")
        conv = store.append_user_message(conv_id, "Second question")

        assert conv.title == "First question..."

    def test_title_derived_after_untitled_title_changes(self, store):
        conv_id = store.selected_id
        store.config = ChatConfig(untitled_title="Untitled chat")

        conv = store.append_user_message(conv_id, "Find React devs")

        assert conv.title == "Find React devs..."

    def test_message_matching_untitled_title_does_not_reopen_title(self, store):
        conv_id = store.selected_id
        store.append_user_message(conv_id, "New Conversation")
        conv = store.append_user_message(conv_id, "second")

        assert conv.title == "New Conversation..."

    def test_title_fixed_after_reload(self, storage):
        first = ConversationStore(storage)
        first.initialize()
        conv_id = first.selected_id
        first.append_user_message(conv_id, "First question")

        reloaded = ConversationStore(storage, ChatConfig(untitled_title="First question..."))
        reloaded.initialize()
        conv = reloaded.append_user_message(conv_id, "Second question")

        assert conv.title == "First question..."

    def test_messages_grow_by_one_in_call_order(self, store):
        conv_id = store.selected_id
        texts = ["one", "two", "three", "four"]
        for i, text in enumerate(texts, start=1):
            conv = store.append_user_message(conv_id, text)
            assert len(conv.messages) == 1 + i

        assert [m.content for m in store.get_conversation(conv_id).messages[1:]] == texts

    @pytest.mark.parametrize("text", ["", "   ", "\n\t "])
    def test_blank_text_is_rejected(self, store, storage, text):
        conv_id = store.selected_id
        saves = storage.saves

        assert store.append_user_message(conv_id, text) is None

        conv = store.get_conversation(conv_id)
        assert len(conv.messages) == 1
        assert conv.title == "New Conversation"
        assert storage.saves == saves

    def test_unknown_conversation_is_rejected(self, store):
        assert store.append_user_message("missing", "hello") is None

    def test_content_is_stored_verbatim(self, store):
        conv = store.append_user_message(store.selected_id, "  padded  ")
        assert conv.messages[-1].content == "  padded  "

    def test_updates_last_updated(self, store):
        before = store.selected_conversation.last_updated
        conv = store.append_user_message(store.selected_id, "hello")

        assert conv.last_updated > before
        assert conv.last_updated == conv.messages[-1].timestamp

    def test_persists_each_append(self, store, storage):
        conv_id = store.selected_id
        store.append_user_message(conv_id, "hello")

        persisted = _persisted(storage)[0]
        assert [m.content for m in persisted.messages][-1] == "hello"
        assert persisted.title == "hello..."

    def test_returned_conversation_is_a_copy(self, store):
        conv = store.append_user_message(store.selected_id, "hello")
        conv.title = "tampered"

        assert store.selected_conversation.title == "hello..."


class TestAppendAssistantMessage:
    def test_appends_reply(self, store):
        conv_id = store.selected_id
        store.append_user_message(conv_id, "hello")
        conv = store.append_assistant_message(conv_id, "Hi! How can I help?")

        assert [m.sender for m in conv.messages] == ["assistant", "user", "assistant"]
        assert conv.title == "hello..."

    def test_missing_conversation_is_dropped_not_recreated(self, store):
        conv_id = store.selected_id
        store.create_conversation()
        store.delete_conversation(conv_id)

        assert store.append_assistant_message(conv_id, "late reply") is None
        assert conv_id not in [c.id for c in store.conversations]


class TestPersistenceFailure:
    def test_failure_surfaces_but_keeps_in_memory_change(self, store, storage):
        conv_id = store.selected_id
        storage.fail = True

        with pytest.raises(PersistenceError):
            store.append_user_message(conv_id, "hello")

        assert len(store.get_conversation(conv_id).messages) == 2
        assert len(_persisted(storage)[0].messages) == 1

    def test_next_successful_save_catches_up(self, store, storage):
        conv_id = store.selected_id
        storage.fail = True
        with pytest.raises(PersistenceError):
            store.append_user_message(conv_id, "lost?")

        storage.fail = False
        store.append_user_message(conv_id, "not lost")

        contents = [m.content for m in _persisted(storage)[0].messages]
        assert contents[1:] == ["lost?", "not lost"]


def test_snapshot_uses_camel_case_keys(store, storage):
    store.append_user_message(store.selected_id, "hello")
    raw = json.loads(storage.load_snapshot("conversations"))

    assert set(raw[0]) == {"id", "title", "lastUpdated", "messages"}
    assert set(raw[0]["messages"][0]) == {"id", "content", "sender", "timestamp"}


def test_derive_title():
    assert derive_title("Find React devs") == "Find React devs..."
    assert derive_title("x" * 45) == "x" * 30 + "..."
    assert derive_title("abcdef", max_length=3, ellipsis="…") == "abc…"
