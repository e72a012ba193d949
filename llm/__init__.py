"""
Response services for persona replies.

Provides the live OpenAI-compatible backend, a scripted variant, error
classification into fallback messages, and the connection monitor.
"""

from llm.base import (
    FALLBACK_MESSAGES,
    ChatMessage,
    ChatResponse,
    FallbackKind,
    ResponseService,
    classify_error,
    to_chat_history,
)
from llm.factory import create_response_service
from llm.health import ConnectionMonitor, ConnectionStatus
from llm.openai import LiveResponseService
from llm.scripted import ScriptedResponseService

__all__ = [
    "FALLBACK_MESSAGES",
    "ChatMessage",
    "ChatResponse",
    "ConnectionMonitor",
    "ConnectionStatus",
    "FallbackKind",
    "LiveResponseService",
    "ResponseService",
    "ScriptedResponseService",
    "classify_error",
    "create_response_service",
    "to_chat_history",
]
