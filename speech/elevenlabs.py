"""
ElevenLabs Text-to-Speech Integration

Provides voice synthesis for the parent personas that have a registered
voice. Audio comes back as an ``AudioHandle`` whose ownership passes to the
caller; this module never releases what it creates.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
from dataclasses import dataclass
from enum import Enum
from io import BytesIO
from typing import Any, Optional

from constants import (
    TTS_MEDIA_TYPE,
    TTS_MODEL_ID,
    TTS_OUTPUT_FORMAT,
    TTS_SIMILARITY_BOOST,
    TTS_STABILITY,
    TTS_STYLE,
    TTS_USE_SPEAKER_BOOST,
)
from exceptions import SynthesisError
from metrics import track_error, track_tts_call
from speech.audio import AudioHandle, AudioStore

logger = logging.getLogger(__name__)


class VoicePersona(str, Enum):
    """Personas with a registered synthesis voice."""

    ANNE = "anne"
    MAYA = "maya"


@dataclass(frozen=True)
class VoiceProfile:
    voice_id: str
    name: str


# Voice IDs can be overridden via environment variables
VOICE_CONFIG: dict[VoicePersona, VoiceProfile] = {
    # Rachel - professional female voice
    VoicePersona.ANNE: VoiceProfile(
        voice_id=os.getenv("ELEVENLABS_VOICE_ANNE", "21m00Tcm4TlvDq8ikWAM"),
        name="Anne Palmer",
    ),
    # Bella - warm, friendly female voice
    VoicePersona.MAYA: VoiceProfile(
        voice_id=os.getenv("ELEVENLABS_VOICE_MAYA", "EXAVITQu4vr4xnSDxMaL"),
        name="Maya Pena",
    ),
}


def voice_persona_for(voice: Optional[str]) -> VoicePersona | None:
    """Return the voice persona for a scenario's voice key, if it has one."""
    if voice is None:
        return None
    try:
        return VoicePersona(voice)
    except ValueError:
        return None


def clean_text_for_tts(text: str) -> str:
    """
    Strip stage directions and tidy whitespace before synthesis.

    Removes [bracketed] and *asterisk* annotations so only spoken words
    reach the voice.
    """
    text = re.sub(r'\[[^\]]*\]', ' ', text)
    text = re.sub(r'\*[^*]+\*', ' ', text)
    text = re.sub(r'\.{4,}', '...', text)
    text = re.sub(r'\s+', ' ', text)
    return text.strip()


class SpeechService:
    """Synthesizes persona speech into audio handles."""

    def __init__(
        self,
        store: AudioStore,
        api_key: Optional[str] = None,
        client: Any = None,
    ) -> None:
        self.store = store
        self.api_key = api_key
        self._client = client

    def _get_client(self) -> Any:
        """
        Return the ElevenLabs client, creating it on first use.

        Raises:
            SynthesisError: If no API key is configured
        """
        if self._client is not None:
            return self._client
        if not self.api_key:
            raise SynthesisError("ELEVENLABS_API_KEY environment variable must be set")

        from elevenlabs.client import ElevenLabs

        self._client = ElevenLabs(api_key=self.api_key)
        return self._client

    async def synthesize(self, text: str, persona: VoicePersona | str) -> AudioHandle:
        """
        Convert text to speech in the persona's voice.

        Args:
            text: The reply to speak
            persona: A registered voice persona

        Returns:
            A live audio handle owned by the caller

        Raises:
            SynthesisError: On unknown persona, empty text, missing key or backend failure
        """
        try:
            voice = VOICE_CONFIG[VoicePersona(persona)]
        except ValueError:
            raise SynthesisError(f"No voice registered for persona '{persona}'") from None

        cleaned_text = clean_text_for_tts(text)
        if len(cleaned_text) < 2:
            raise SynthesisError(f"Text too short for TTS after cleaning: '{text}'")

        try:
            client = self._get_client()
            loop = asyncio.get_running_loop()
            with track_tts_call():
                audio_bytes = await loop.run_in_executor(
                    None,
                    self._sync_synthesize,
                    client,
                    cleaned_text,
                    voice.voice_id,
                )
        except SynthesisError:
            track_error("synthesis_error")
            raise
        except Exception as e:
            track_error("synthesis_error")
            logger.error("Error generating speech for %s: %s", voice.name, e)
            raise SynthesisError("Failed to generate speech") from e

        if not audio_bytes:
            track_error("synthesis_error")
            raise SynthesisError("Speech backend returned no audio")

        handle = self.store.create(audio_bytes, TTS_MEDIA_TYPE)
        logger.info(
            "Synthesized %d bytes of speech for %s (%s)", handle.size, voice.name, handle.reference
        )
        return handle

    def _sync_synthesize(self, client: Any, text: str, voice_id: str) -> bytes:
        """Synchronous synthesis (run in thread pool)."""
        from elevenlabs import VoiceSettings

        response = client.text_to_speech.convert(
            voice_id=voice_id,
            text=text,
            model_id=TTS_MODEL_ID,
            output_format=TTS_OUTPUT_FORMAT,
            voice_settings=VoiceSettings(
                stability=TTS_STABILITY,
                similarity_boost=TTS_SIMILARITY_BOOST,
                style=TTS_STYLE,
                use_speaker_boost=TTS_USE_SPEAKER_BOOST,
            ),
        )

        # The SDK streams the body as an iterator of byte chunks
        audio_buffer = BytesIO()
        for chunk in response:
            if chunk:
                audio_buffer.write(chunk)
        return audio_buffer.getvalue()
