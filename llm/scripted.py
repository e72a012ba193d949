"""
Scripted response service.

Returns canned persona lines instead of calling a backend. Used for demos,
offline practice and tests; selected with RESPONSE_SERVICE=scripted.
"""

from __future__ import annotations

import asyncio
import random
from typing import Optional, Sequence

from constants import SCRIPTED_RESPONSE_DELAY_SECONDS
from exceptions import ScenarioNotFoundError
from llm.base import ChatMessage, ChatResponse, ResponseService
from scenarios import get_scenario

PARENT_RESPONSES: tuple[str, ...] = (
    "I appreciate you taking the time to explain that. But I'm still worried about the side effects I've read about online...",
    "That makes sense, but my child is still so young. Do they really need this vaccine now?",
    "I understand what you're saying, but I've heard that this vaccine might not be necessary if my child isn't sexually active yet.",
    "Thank you for listening to my concerns. Can you tell me more about how this vaccine actually works?",
)

AGENT_RESPONSES: tuple[str, ...] = (
    "Good start. You made a clear recommendation. Try restating the parent's concern before you answer it.",
    "I can hear empathy in that response. Consider adding a direct answer to the safety question.",
    "Nice use of listening language. Now follow up with an open question to explore what worries them most.",
)


class ScriptedResponseService(ResponseService):
    """Picks a canned reply for the scenario's persona type."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        delay_seconds: float = SCRIPTED_RESPONSE_DELAY_SECONDS,
        parent_responses: Sequence[str] = PARENT_RESPONSES,
        agent_responses: Sequence[str] = AGENT_RESPONSES,
    ) -> None:
        self.rng = rng or random.Random()
        self.delay_seconds = delay_seconds
        self.parent_responses = tuple(parent_responses)
        self.agent_responses = tuple(agent_responses)

    @property
    def model_name(self) -> str:
        return "scripted"

    def _responses_for(self, scenario_id: str) -> tuple[str, ...]:
        try:
            is_agent = get_scenario(scenario_id).is_agent
        except ScenarioNotFoundError:
            is_agent = False
        return self.agent_responses if is_agent else self.parent_responses

    async def complete(
        self,
        history: list[ChatMessage],
        new_user_text: str,
        scenario_id: str,
    ) -> ChatResponse:
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)
        return ChatResponse(content=self.rng.choice(self._responses_for(scenario_id)))

    async def ping(self) -> None:
        return None
