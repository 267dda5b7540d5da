import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional, Sequence

from .models import Message

logger = logging.getLogger(__name__)

# Replies do not depend on what the user asked; there is no inference behind them.
CANNED_RESPONSES: tuple[str, ...] = (
    "Based on the uploaded resumes, I can see several qualified candidates. "
    "Would you like me to filter by specific skills or experience level?",
    "I found 3 candidates with React experience. John Doe has 5 years, Sarah Smith "
    "has experience with related technologies, and Mike Johnson has 7 years of "
    "full-stack development.",
    "Here are the top candidates matching your criteria. Would you like me to "
    "provide more detailed analysis of their skills and experience?",
    "I can help you compare candidates based on their technical skills, experience "
    "level, or education background. What would you like to focus on?",
    "The uploaded resumes show a good mix of frontend and backend skills. Let me "
    "know if you'd like me to categorize them by expertise area.",
)


class ReplySimulator:
    """Produces a canned assistant reply after a fixed "thinking" delay."""

    def __init__(
        self,
        delay_seconds: float = 1.5,
        responses: Sequence[str] = CANNED_RESPONSES,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if not responses:
            raise ValueError("ReplySimulator needs at least one response")
        self.delay_seconds = delay_seconds
        self.responses = tuple(responses)
        self._rng = rng or random.Random()
        self._sleep = sleep

    def choose_response(self, user_message: str) -> str:
        """Pick a canned reply. The user message does not influence the choice."""
        return self._rng.choice(self.responses)

    async def simulate_reply(self, user_message: str) -> Message:
        await self._sleep(self.delay_seconds)
        content = self.choose_response(user_message)
        logger.debug("Simulated reply after %.2fs", self.delay_seconds)
        return Message(content=content, sender="assistant")
