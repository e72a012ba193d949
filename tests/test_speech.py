"""
Tests for audio handles and ElevenLabs synthesis.

The ElevenLabs client is mocked; no network calls are made.
"""

import pytest

from doubles import make_tts_client
from exceptions import SynthesisError
from speech.audio import AudioStore
from speech.elevenlabs import VOICE_CONFIG, SpeechService, VoicePersona, clean_text_for_tts, voice_persona_for


class TestAudioStore:
    """Test reference issuing and revocation."""

    def test_create_and_resolve(self, audio_store):
        handle = audio_store.create(b"mp3-bytes", "audio/mpeg")

        assert handle.reference.startswith("audio/")
        assert handle.reference in audio_store
        assert audio_store.resolve(handle.reference) == (b"mp3-bytes", "audio/mpeg")
        assert handle.size == 9

    def test_references_are_unique(self, audio_store):
        first = audio_store.create(b"a")
        second = audio_store.create(b"a")

        assert first.reference != second.reference

    def test_release_is_idempotent(self, audio_store):
        handle = audio_store.create(b"mp3-bytes")

        assert handle.release() is True
        assert handle.release() is False
        assert handle.released is True
        assert audio_store.revoked_count == 1
        assert audio_store.resolve(handle.reference) is None
        assert len(audio_store) == 0

    def test_revoke_unknown_reference(self):
        assert AudioStore().revoke("audio/unknown") is False


class TestTextCleaning:
    """Test stage-direction removal before synthesis."""

    def test_strips_annotations(self):
        assert clean_text_for_tts("[sighs] I just *really* worry.....  about it") == "I just worry... about it"

    def test_plain_text_unchanged(self):
        assert clean_text_for_tts("Is it safe?") == "Is it safe?"


class TestVoicePersona:
    """Test voice persona lookup."""

    def test_known_voices(self):
        assert voice_persona_for("anne") is VoicePersona.ANNE
        assert voice_persona_for("maya") is VoicePersona.MAYA

    def test_unknown_or_missing_voice(self):
        assert voice_persona_for(None) is None
        assert voice_persona_for("fatima") is None


class TestSpeechService:
    """Test synthesis into audio handles."""

    async def test_synthesize_returns_live_handle(self, speech_service, tts_client, audio_store):
        handle = await speech_service.synthesize("Hi Doctor, I'm Anne.", VoicePersona.ANNE)

        assert handle.data == b"ID3-fake-mp3-bytes"
        assert handle.media_type == "audio/mpeg"
        assert handle.released is False
        assert handle.reference in audio_store

        kwargs = tts_client.text_to_speech.convert.call_args.kwargs
        assert kwargs["voice_id"] == VOICE_CONFIG[VoicePersona.ANNE].voice_id
        assert kwargs["text"] == "Hi Doctor, I'm Anne."
        assert kwargs["output_format"] == "mp3_44100_128"
        settings = kwargs["voice_settings"]
        assert settings.stability == 0.6
        assert settings.similarity_boost == 0.75
        assert settings.use_speaker_boost is True

    async def test_persona_given_as_string(self, speech_service, tts_client):
        await speech_service.synthesize("Hello there", "maya")

        kwargs = tts_client.text_to_speech.convert.call_args.kwargs
        assert kwargs["voice_id"] == VOICE_CONFIG[VoicePersona.MAYA].voice_id

    async def test_unknown_persona(self, speech_service):
        with pytest.raises(SynthesisError):
            await speech_service.synthesize("Hello", "fatima")

    async def test_missing_api_key(self, audio_store):
        service = SpeechService(audio_store, api_key=None)

        with pytest.raises(SynthesisError):
            await service.synthesize("Hello there", VoicePersona.ANNE)
        assert len(audio_store) == 0

    async def test_backend_failure(self, speech_service, tts_client, audio_store):
        tts_client.text_to_speech.convert.side_effect = RuntimeError("quota exceeded")

        with pytest.raises(SynthesisError) as exc_info:
            await speech_service.synthesize("Hello there", VoicePersona.ANNE)

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert len(audio_store) == 0

    async def test_empty_audio(self, audio_store):
        service = SpeechService(audio_store, api_key="test-key", client=make_tts_client(b""))

        with pytest.raises(SynthesisError):
            await service.synthesize("Hello there", VoicePersona.ANNE)

    async def test_text_only_stage_directions(self, speech_service, tts_client):
        with pytest.raises(SynthesisError):
            await speech_service.synthesize("[pauses]", VoicePersona.ANNE)

        tts_client.text_to_speech.convert.assert_not_called()
