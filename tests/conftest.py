"""Shared fixtures for the simulator tests."""

import pytest

from doubles import FakePlayer, make_tts_client
from llm.scripted import ScriptedResponseService
from speech.audio import AudioStore
from speech.elevenlabs import SpeechService


@pytest.fixture
def audio_store():
    return AudioStore()


@pytest.fixture
def tts_client():
    return make_tts_client()


@pytest.fixture
def speech_service(audio_store, tts_client):
    return SpeechService(audio_store, api_key="test-key", client=tts_client)


@pytest.fixture
def player():
    return FakePlayer()


@pytest.fixture
def scripted_service():
    """Scripted replies with no artificial delay."""
    return ScriptedResponseService(delay_seconds=0)
