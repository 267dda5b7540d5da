import json
import logging
from typing import Iterable, Optional

from pydantic import TypeAdapter, ValidationError

from .models import Conversation

logger = logging.getLogger(__name__)

_conversation_list = TypeAdapter(list[Conversation])


def dump_conversations(conversations: Iterable[Conversation]) -> str:
    """Serialize the whole conversation set, camelCase keys and ISO-8601 timestamps."""
    return json.dumps(
        [c.model_dump(mode="json", by_alias=True) for c in conversations],
        ensure_ascii=False,
    )


def load_conversations(text: Optional[str]) -> Optional[list[Conversation]]:
    """Parse a stored snapshot.

    Returns None when the snapshot is absent or cannot be parsed, so callers can
    fall back to a fresh conversation set instead of failing.
    """
    if text is None or not text.strip():
        return None
    try:
        conversations = _conversation_list.validate_python(json.loads(text))
    except json.JSONDecodeError as e:
        logger.warning("Conversation snapshot is not valid JSON: %s", e)
        return None
    except ValidationError as e:
        logger.warning(
            "Conversation snapshot failed validation (%d errors)", e.error_count()
        )
        return None

    if not _ids_unique(conversations):
        logger.warning("Conversation snapshot has duplicate conversation or message ids")
        return None
    return conversations


def _ids_unique(conversations: list[Conversation]) -> bool:
    if len({c.id for c in conversations}) != len(conversations):
        return False
    return all(len({m.id for m in c.messages}) == len(c.messages) for c in conversations)
