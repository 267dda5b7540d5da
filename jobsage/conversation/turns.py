"""Chat turns: user message in, simulated assistant reply out.

A turn moves a conversation from idle to awaiting-reply and back. Replies run
as fire-and-forget background tasks; they are never cancelled and always land
on the conversation they were started for, even if another one has been
selected since. Overlapping turns are not rejected here; the chat route does
that.
"""

import asyncio
import logging
from typing import Optional

from ..errors import PersistenceError
from .models import Conversation
from .replies import ReplySimulator
from .store import ConversationStore

logger = logging.getLogger(__name__)


class ConversationTurns:
    def __init__(self, store: ConversationStore, simulator: ReplySimulator) -> None:
        self.store = store
        self.simulator = simulator
        self._awaiting: dict[str, int] = {}  # conversation id -> outstanding replies
        self._tasks: set[asyncio.Task] = set()

    def is_awaiting(self, conv_id: str) -> bool:
        return self._awaiting.get(conv_id, 0) > 0

    @property
    def pending_count(self) -> int:
        return sum(self._awaiting.values())

    def send(self, conv_id: str, text: str) -> Optional[Conversation]:
        """Append the user's message and schedule the assistant reply.

        Returns None (and schedules nothing) when the store rejects the message.
        """
        conv = self.store.append_user_message(conv_id, text)
        if conv is None:
            return None
        self._trigger_reply(conv_id, text)
        return conv

    async def drain(self) -> None:
        """Wait until every scheduled reply has been delivered."""
        while self._tasks:
            results = await asyncio.gather(*list(self._tasks), return_exceptions=True)
            for result in results:
                if isinstance(result, Exception):
                    logger.error("Reply task failed: %s", result)

    def _trigger_reply(self, conv_id: str, text: str) -> None:
        self._awaiting[conv_id] = self._awaiting.get(conv_id, 0) + 1
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop (sync caller): deliver the reply before returning
            asyncio.run(self._complete_turn(conv_id, text))
            return
        task = loop.create_task(self._complete_turn(conv_id, text))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _complete_turn(self, conv_id: str, text: str) -> None:
        try:
            reply = await self.simulator.simulate_reply(text)
            self.store.append_assistant_message(conv_id, reply.content)
        except PersistenceError as e:
            logger.error("Reply for conversation %s was not persisted: %s", conv_id, e)
        finally:
            remaining = self._awaiting.get(conv_id, 1) - 1
            if remaining > 0:
                self._awaiting[conv_id] = remaining
            else:
                self._awaiting.pop(conv_id, None)
