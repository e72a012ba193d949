"""
Speech synthesis and playback for persona replies.

Usage:
    from speech import AudioStore, SpeechService

    store = AudioStore()
    speech = SpeechService(store, api_key=settings.tts_api_key)
    handle = await speech.synthesize("Hi Doctor...", "anne")
"""

from speech.audio import AudioHandle, AudioStore
from speech.elevenlabs import (
    VOICE_CONFIG,
    SpeechService,
    VoicePersona,
    VoiceProfile,
    clean_text_for_tts,
    voice_persona_for,
)
from speech.playback import AudioPlayer, ClientAudioPlayer

__all__ = [
    "VOICE_CONFIG",
    "AudioHandle",
    "AudioPlayer",
    "AudioStore",
    "ClientAudioPlayer",
    "SpeechService",
    "VoicePersona",
    "VoiceProfile",
    "clean_text_for_tts",
    "voice_persona_for",
]
