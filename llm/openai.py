"""
OpenAI-compatible response service.

Talks to any chat-completion endpoint that speaks the OpenAI protocol (the
deployment points it at a LiteLLM proxy). The SDK call is synchronous, so it
runs in the default executor to keep the event loop free.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from constants import (
    LLM_DEFAULT_MODEL,
    LLM_HEALTH_CHECK_PROMPT,
    LLM_MAX_RETRIES,
    LLM_MAX_TOKENS_DIALOGUE,
    LLM_MAX_TOKENS_HEALTH_CHECK,
    LLM_REQUEST_TIMEOUT_SECONDS,
    LLM_TEMPERATURE_DIALOGUE,
)
from exceptions import AuthError, EmptyResponseError, PromptUnavailableError
from llm.base import (
    ChatMessage,
    ChatResponse,
    ResponseService,
    build_messages,
    fallback_response,
)
from metrics import track_fallback, track_llm_call
from prompts import PromptResolver

logger = logging.getLogger(__name__)


class LiveResponseService(ResponseService):
    """
    Persona replies from a live chat-completion backend.

    Temperature and max_tokens are fixed policy values, not per-call options.
    The API key is only checked when the first request is made.
    """

    def __init__(
        self,
        prompt_resolver: PromptResolver,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: str = LLM_DEFAULT_MODEL,
        client: Any = None,
    ) -> None:
        self.prompt_resolver = prompt_resolver
        self.api_key = api_key
        self._base_url = base_url
        self._model = model
        self.temperature = LLM_TEMPERATURE_DIALOGUE
        self.max_tokens = LLM_MAX_TOKENS_DIALOGUE
        self._client = client

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def base_url(self) -> str:
        return self._base_url or ""

    def _get_client(self) -> Any:
        """
        Return the SDK client, creating it on first use.

        Raises:
            AuthError: If no API key is configured
        """
        if self._client is not None:
            return self._client
        if not self.api_key:
            raise AuthError("NAVIGATOR_API_KEY environment variable must be set (401 Authentication)")

        from openai import OpenAI

        self._client = OpenAI(
            api_key=self.api_key,
            base_url=self._base_url,
            max_retries=LLM_MAX_RETRIES,
            timeout=LLM_REQUEST_TIMEOUT_SECONDS,
        )
        return self._client

    def _create_completion(
        self,
        client: Any,
        messages: list[ChatMessage],
        max_tokens: int,
        temperature: Optional[float],
    ) -> Optional[str]:
        """Synchronous SDK call (run in thread pool)."""
        params: dict[str, Any] = {
            "model": self._model,
            "messages": [message.model_dump() for message in messages],
            "max_tokens": max_tokens,
        }
        if temperature is not None:
            params["temperature"] = temperature

        response = client.chat.completions.create(**params)
        if not response.choices:
            return None
        return response.choices[0].message.content

    async def _run_completion(
        self,
        messages: list[ChatMessage],
        max_tokens: int,
        temperature: Optional[float],
    ) -> Optional[str]:
        client = self._get_client()
        loop = asyncio.get_running_loop()
        with track_llm_call(self._model):
            return await loop.run_in_executor(
                None,
                self._create_completion,
                client,
                messages,
                max_tokens,
                temperature,
            )

    def _fallback(self, error: BaseException, scenario_id: str) -> ChatResponse:
        response = fallback_response(error)
        track_fallback(response.kind.value)
        logger.error(
            "Error calling LLM API for scenario '%s' (%s): %s",
            scenario_id,
            response.kind.value,
            response.error,
        )
        return response

    async def complete(
        self,
        history: list[ChatMessage],
        new_user_text: str,
        scenario_id: str,
    ) -> ChatResponse:
        # No prompt means no request at all
        try:
            system_prompt = self.prompt_resolver.resolve(scenario_id)
        except PromptUnavailableError as e:
            return self._fallback(e, scenario_id)

        messages = build_messages(system_prompt, history, new_user_text)
        logger.debug(
            "Sending %d messages to %s for scenario '%s'", len(messages), self._model, scenario_id
        )

        try:
            content = await self._run_completion(messages, self.max_tokens, self.temperature)
            if not content or not content.strip():
                raise EmptyResponseError("No response received from AI")
        except Exception as e:
            return self._fallback(e, scenario_id)

        return ChatResponse(content=content.strip())

    async def ping(self) -> None:
        """Send a 5-token "Hello" request; any failure propagates."""
        await self._run_completion(
            [ChatMessage(role="user", content=LLM_HEALTH_CHECK_PROMPT)],
            LLM_MAX_TOKENS_HEALTH_CHECK,
            None,
        )
