"""
Base interface for response services.

A response service turns the conversation so far plus the trainee's new
message into the persona's reply. Every failure is absorbed here: callers
always receive a ``ChatResponse``, which is either a real reply or a
trainee-visible fallback message carrying the classified error kind.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Iterable, Literal, Optional

import openai
from pydantic import BaseModel, ConfigDict

from exceptions import (
    AuthError,
    EmptyResponseError,
    NetworkError,
    PromptUnavailableError,
    ServiceUnavailableError,
    UnknownResponseError,
)

logger = logging.getLogger(__name__)


class FallbackKind(str, Enum):
    """Classified reasons for substituting a fallback message."""

    AUTH = "auth"
    SERVICE_UNAVAILABLE = "service_unavailable"
    NETWORK = "network"
    EMPTY_RESPONSE = "empty_response"
    PROMPT_UNAVAILABLE = "prompt_unavailable"
    UNKNOWN = "unknown"


GENERIC_FALLBACK_MESSAGE = "I'm sorry, I'm having trouble responding right now. Please try again."

FALLBACK_MESSAGES: dict[FallbackKind, str] = {
    FallbackKind.AUTH: "Authentication error. Please check your API key in the .env file.",
    FallbackKind.SERVICE_UNAVAILABLE: (
        "Service connection error. The language model service may be temporarily unavailable."
    ),
    FallbackKind.NETWORK: "Network error. Please check your internet connection.",
    FallbackKind.EMPTY_RESPONSE: GENERIC_FALLBACK_MESSAGE,
    FallbackKind.PROMPT_UNAVAILABLE: GENERIC_FALLBACK_MESSAGE,
    FallbackKind.UNKNOWN: GENERIC_FALLBACK_MESSAGE,
}

# Message substrings checked when the exception type alone is not conclusive
_AUTH_SIGNALS = ("401", "403", "authentication", "api key", "api_key", "unauthorized")
_SERVICE_SIGNALS = ("database server", "service unavailable", "503", "502", "overloaded")
_NETWORK_SIGNALS = ("network", "fetch", "connection", "timed out", "timeout")


class ChatMessage(BaseModel):
    """One entry of the outbound chat-completion message list."""

    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"]
    content: str


class ChatResponse(BaseModel):
    """
    Normalized result of one completion.

    Attributes:
        content: Reply text, or the fallback message when the call failed
        kind: Classified failure kind; None for a real reply
        error: Raw error text of the failure, for logs and diagnostics
    """

    content: str
    kind: Optional[FallbackKind] = None
    error: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.kind is not None


def classify_error(error: BaseException) -> FallbackKind:
    """
    Map an exception from the LM path to a fallback kind.

    Typed errors (ours and the OpenAI SDK's) are checked first, then the
    message text is searched for authentication, availability and network
    signals.
    """
    if isinstance(error, AuthError):
        return FallbackKind.AUTH
    if isinstance(error, ServiceUnavailableError):
        return FallbackKind.SERVICE_UNAVAILABLE
    if isinstance(error, NetworkError):
        return FallbackKind.NETWORK
    if isinstance(error, EmptyResponseError):
        return FallbackKind.EMPTY_RESPONSE
    if isinstance(error, PromptUnavailableError):
        return FallbackKind.PROMPT_UNAVAILABLE
    if isinstance(error, UnknownResponseError):
        return FallbackKind.UNKNOWN

    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return FallbackKind.AUTH
    if isinstance(error, openai.APIConnectionError):
        return FallbackKind.NETWORK
    if isinstance(error, openai.InternalServerError):
        return FallbackKind.SERVICE_UNAVAILABLE
    if isinstance(error, (ConnectionError, TimeoutError)):
        return FallbackKind.NETWORK

    message = str(error).lower()
    if any(signal in message for signal in _AUTH_SIGNALS):
        return FallbackKind.AUTH
    if any(signal in message for signal in _SERVICE_SIGNALS):
        return FallbackKind.SERVICE_UNAVAILABLE
    if any(signal in message for signal in _NETWORK_SIGNALS):
        return FallbackKind.NETWORK
    return FallbackKind.UNKNOWN


def fallback_response(error: BaseException) -> ChatResponse:
    """Build the trainee-visible fallback for ``error``."""
    kind = classify_error(error)
    return ChatResponse(
        content=FALLBACK_MESSAGES[kind],
        kind=kind,
        error=str(error) or error.__class__.__name__,
    )


def to_chat_history(messages: Iterable[Any]) -> list[ChatMessage]:
    """
    Convert session messages to chat history entries.

    Trainee messages become ``user`` entries and everything else becomes
    an ``assistant`` entry, in original order. Fallback replies are left
    out since the persona never said them.
    """
    history = []
    for message in messages:
        if getattr(message, "is_fallback", False):
            continue
        role = "user" if message.sender == "user" else "assistant"
        history.append(ChatMessage(role=role, content=message.content))
    return history


def build_messages(
    system_prompt: str,
    history: Iterable[ChatMessage],
    new_user_text: str,
) -> list[ChatMessage]:
    """Instruction entry, then prior turns, then the new trainee entry."""
    return [
        ChatMessage(role="system", content=system_prompt),
        *history,
        ChatMessage(role="user", content=new_user_text),
    ]


class ResponseService(ABC):
    """
    Capability interface for producing persona replies.

    Subclasses must implement:
    - complete(): produce a reply or a fallback, never raising for backend errors
    - ping(): minimal round-trip used by the connection monitor
    - model_name / base_url: identifying values for the status surface
    """

    @property
    @abstractmethod
    def model_name(self) -> str:
        pass

    @property
    def base_url(self) -> str:
        return ""

    @abstractmethod
    async def complete(
        self,
        history: list[ChatMessage],
        new_user_text: str,
        scenario_id: str,
    ) -> ChatResponse:
        """
        Produce the persona's reply to ``new_user_text``.

        Args:
            history: Prior turns in chronological order
            new_user_text: The trainee's new message
            scenario_id: Scenario whose persona should answer

        Returns:
            The reply, or a fallback response describing the failure
        """
        pass

    @abstractmethod
    async def ping(self) -> None:
        """Issue a minimal request; raise if the backend is unreachable."""
        pass
