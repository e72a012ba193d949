"""
Configuration loader module.

Reads the environment (and a local .env file) once and exposes the values
the services need. Keys are optional at load time: a missing LM or TTS key
only surfaces when the corresponding service is first used.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from constants import DEFAULT_SERVER_HOST, DEFAULT_SERVER_PORT, LLM_DEFAULT_MODEL

_PROJECT_DIR = Path(__file__).resolve().parent.parent
_DEFAULT_PROMPT_DIR = _PROJECT_DIR / "prompts" / "text"

RESPONSE_SERVICE_LIVE = "live"
RESPONSE_SERVICE_SCRIPTED = "scripted"

# Cache for loaded settings
_settings: Settings | None = None


@dataclass(frozen=True)
class Settings:
    """
    Environment-supplied configuration.

    Attributes:
        llm_api_key: Key for the chat-completion endpoint (NAVIGATOR_API_KEY)
        llm_base_url: Base URL of the OpenAI-compatible endpoint (NAVIGATOR_BASE_URL)
        llm_model: Model identifier (MODEL_NAME)
        tts_api_key: ElevenLabs key (ELEVENLABS_API_KEY)
        response_service: "live" for the LM backend, "scripted" for canned replies
        prompt_dir: Directory holding one <scenario-id>.txt prompt per scenario
    """

    llm_api_key: str | None = None
    llm_base_url: str | None = None
    llm_model: str = LLM_DEFAULT_MODEL
    tts_api_key: str | None = None
    response_service: str = RESPONSE_SERVICE_LIVE
    prompt_dir: Path = _DEFAULT_PROMPT_DIR
    server_host: str = DEFAULT_SERVER_HOST
    server_port: int = DEFAULT_SERVER_PORT


def _optional(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    return value or None


def load_settings() -> Settings:
    """Build settings from the current environment, bypassing the cache."""
    load_dotenv()

    response_service = os.getenv("RESPONSE_SERVICE", RESPONSE_SERVICE_LIVE).strip().lower()
    if response_service not in (RESPONSE_SERVICE_LIVE, RESPONSE_SERVICE_SCRIPTED):
        raise ValueError(
            f"RESPONSE_SERVICE must be '{RESPONSE_SERVICE_LIVE}' or "
            f"'{RESPONSE_SERVICE_SCRIPTED}', got '{response_service}'"
        )

    prompt_dir = _optional("PROMPT_DIR")

    return Settings(
        llm_api_key=_optional("NAVIGATOR_API_KEY"),
        llm_base_url=_optional("NAVIGATOR_BASE_URL"),
        llm_model=_optional("MODEL_NAME") or LLM_DEFAULT_MODEL,
        tts_api_key=_optional("ELEVENLABS_API_KEY"),
        response_service=response_service,
        prompt_dir=Path(prompt_dir) if prompt_dir else _DEFAULT_PROMPT_DIR,
        server_host=os.getenv("SERVER_HOST", DEFAULT_SERVER_HOST),
        server_port=int(os.getenv("SERVER_PORT", str(DEFAULT_SERVER_PORT))),
    )


def get_settings() -> Settings:
    """
    Return process settings.

    Returns cached version after first load.
    """
    global _settings

    if _settings is None:
        _settings = load_settings()

    return _settings


__all__ = [
    "RESPONSE_SERVICE_LIVE",
    "RESPONSE_SERVICE_SCRIPTED",
    "Settings",
    "get_settings",
    "load_settings",
]
