"""
Project-wide constants.

Centralizes policy values and configuration defaults for maintainability.
"""

from __future__ import annotations

from typing import Final

# =============================================================================
# LLM Configuration
# =============================================================================
LLM_DEFAULT_MODEL: Final[str] = "gpt-oss-120b"
LLM_TEMPERATURE_DIALOGUE: Final[float] = 0.7
LLM_MAX_TOKENS_DIALOGUE: Final[int] = 500
LLM_MAX_TOKENS_HEALTH_CHECK: Final[int] = 5
LLM_HEALTH_CHECK_PROMPT: Final[str] = "Hello"
LLM_MAX_RETRIES: Final[int] = 0  # one request per turn
LLM_REQUEST_TIMEOUT_SECONDS: Final[float] = 60.0

# =============================================================================
# Connection Monitor
# =============================================================================
HEALTH_CHECK_INTERVAL_SECONDS: Final[float] = 30.0

# =============================================================================
# Scripted Responses
# =============================================================================
SCRIPTED_RESPONSE_DELAY_SECONDS: Final[float] = 1.5

# =============================================================================
# Speech Synthesis
# =============================================================================
TTS_MODEL_ID: Final[str] = "eleven_multilingual_v2"
TTS_OUTPUT_FORMAT: Final[str] = "mp3_44100_128"
TTS_MEDIA_TYPE: Final[str] = "audio/mpeg"
TTS_STABILITY: Final[float] = 0.6
TTS_SIMILARITY_BOOST: Final[float] = 0.75
TTS_STYLE: Final[float] = 0.0
TTS_USE_SPEAKER_BOOST: Final[bool] = True

# =============================================================================
# Audio Playback
# =============================================================================
PLAYBACK_START_TIMEOUT_SECONDS: Final[float] = 10.0

# =============================================================================
# Server Configuration
# =============================================================================
DEFAULT_SERVER_HOST: Final[str] = "0.0.0.0"
DEFAULT_SERVER_PORT: Final[int] = 8080

# =============================================================================
# Logging Configuration
# =============================================================================
LOG_LEVEL_PRODUCTION: Final[str] = "INFO"
LOG_LEVEL_DEVELOPMENT: Final[str] = "DEBUG"
LOG_FORMAT_JSON: Final[bool] = True  # Set to False for development readable format
QUIET_LOGGERS: Final[tuple[str, ...]] = ("httpx", "httpcore", "openai", "elevenlabs")
