"""
Session data model.

Messages are frozen; the only change a message ever sees is the later
attachment of synthesized audio, which swaps in a copy carrying the handle.
A ``Session`` is owned by one orchestrator and mutated only by it.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from feedback_tagger import ClearTag
from scenarios.base import Scenario
from speech.audio import AudioHandle

PARENT_GREETING_TEMPLATE = (
    "Hi Doctor, I'm {name}. I'm here with my {child_age}-year-old for their check-up. "
    "I have some questions about vaccines..."
)

AGENT_GREETING_TEMPLATE = (
    "Hi, I'm the {name}. I'm here to help you practice your vaccine conversations. "
    "Share what you would say to a parent and we'll work through it together."
)


def opening_line(scenario: Scenario) -> str:
    """Persona greeting that seeds every new session."""
    persona = scenario.persona
    if persona.is_agent:
        return AGENT_GREETING_TEMPLATE.format(name=persona.name)
    return PARENT_GREETING_TEMPLATE.format(name=persona.name, child_age=persona.child_age)


class Sender(str, Enum):
    USER = "user"
    AVATAR = "avatar"


class SessionState(str, Enum):
    """Orchestrator states."""

    IDLE = "idle"
    ACTIVE = "active"
    TURN_PENDING = "turn_pending"


@dataclass(frozen=True)
class Message:
    """
    One chat message.

    Attributes:
        id: Unique id, ordered by creation
        sender: USER (the trainee) or AVATAR (the persona)
        content: Message text
        timestamp: Creation time (UTC)
        clear_components: C-LEAR tags earned by the trainee's message, shown
            on the avatar reply that answered it
        audio: Synthesized speech, attached after the message exists
        is_fallback: True when content is a fallback string, not a persona reply
    """

    id: str
    sender: Sender
    content: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    clear_components: tuple[ClearTag, ...] = ()
    audio: Optional[AudioHandle] = field(default=None, compare=False, repr=False)
    is_fallback: bool = False

    def with_audio(self, handle: AudioHandle) -> Message:
        return replace(self, audio=handle)

    def to_dict(self, playing_id: str | None = None) -> dict[str, Any]:
        has_audio = self.audio is not None and not self.audio.released
        return {
            "id": self.id,
            "sender": self.sender.value,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
            "clearComponents": [tag.value for tag in self.clear_components],
            "audioReference": self.audio.reference if has_audio else None,
            "isPlaying": playing_id == self.id,
            "isFallback": self.is_fallback,
        }


@dataclass
class Session:
    """
    State of one practice session.

    ``messages`` is append-only while the session lives; ``pending_turn``
    and ``currently_playing`` each hold at most one value.
    """

    scenario: Scenario
    session_id: str = field(default_factory=lambda: secrets.token_urlsafe(16))
    messages: list[Message] = field(default_factory=list)
    active: bool = True
    pending_turn: bool = False
    currently_playing: Optional[str] = None

    def index_of(self, message_id: str) -> int | None:
        for index, message in enumerate(self.messages):
            if message.id == message_id:
                return index
        return None

    def get_message(self, message_id: str) -> Message | None:
        index = self.index_of(message_id)
        return None if index is None else self.messages[index]

    def attach_audio(self, message_id: str, handle: AudioHandle) -> bool:
        """Attach ``handle`` to the message with this id, if it is still here."""
        index = self.index_of(message_id)
        if index is None:
            return False
        self.messages[index] = self.messages[index].with_audio(handle)
        return True

    def audio_handles(self) -> list[AudioHandle]:
        return [message.audio for message in self.messages if message.audio is not None]


@dataclass(frozen=True)
class SessionEvent:
    """Change notification sent to orchestrator subscribers."""

    type: str
    session_id: str | None
    message_id: str | None = None
