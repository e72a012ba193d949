"""
Tests for awaitable playback over a client message channel.
"""

import asyncio

import pytest

from doubles import wait_until
from exceptions import LoadTimeoutError, PlaybackError
from speech.playback import ClientAudioPlayer


@pytest.fixture
def sent():
    return []


@pytest.fixture
def client_player(sent):
    async def send(message):
        sent.append(message)

    return ClientAudioPlayer(send, start_timeout=1.0)


@pytest.fixture
def handle(audio_store):
    return audio_store.create(b"mp3-bytes", "audio/mpeg")


class TestClientAudioPlayer:
    """Test the load / ready / play / playing / ended handshake."""

    async def test_full_handshake(self, client_player, sent, handle):
        task = asyncio.create_task(client_player.play(handle))

        await wait_until(lambda: len(sent) == 1)
        assert sent[0] == {
            "type": "load_audio",
            "reference": handle.reference,
            "url": f"/api/{handle.reference}",
            "media_type": "audio/mpeg",
        }
        client_player.notify_ready(handle.reference)

        await wait_until(lambda: len(sent) == 2)
        assert sent[1] == {"type": "play_audio", "reference": handle.reference}
        client_player.notify_playing(handle.reference)

        finished = await task
        assert not finished.done()

        client_player.notify_ended(handle.reference)
        assert await finished is True

    async def test_playing_without_ready(self, client_player, sent, handle):
        task = asyncio.create_task(client_player.play(handle))
        await wait_until(lambda: len(sent) == 1)

        client_player.notify_playing(handle.reference)
        await wait_until(lambda: len(sent) == 2)
        client_player.notify_playing(handle.reference)

        finished = await task
        client_player.notify_ended(handle.reference)
        assert await finished is True

    async def test_start_timeout(self, sent, handle):
        async def send(message):
            sent.append(message)

        player = ClientAudioPlayer(send, start_timeout=0.05)

        with pytest.raises(LoadTimeoutError) as exc_info:
            await player.play(handle)

        assert exc_info.value.reference == handle.reference
        assert player._pending == {}

    async def test_error_before_start(self, client_player, sent, handle):
        task = asyncio.create_task(client_player.play(handle))
        await wait_until(lambda: len(sent) == 1)

        client_player.notify_error(handle.reference, "MEDIA_ERR_DECODE")

        with pytest.raises(PlaybackError):
            await task
        assert client_player._pending == {}

    async def test_error_after_start_ends_playback(self, client_player, sent, handle):
        task = asyncio.create_task(client_player.play(handle))
        await wait_until(lambda: len(sent) == 1)
        client_player.notify_ready(handle.reference)
        await wait_until(lambda: len(sent) == 2)
        client_player.notify_playing(handle.reference)
        finished = await task

        client_player.notify_error(handle.reference, "stalled")

        assert await finished is False

    async def test_released_handle_rejected(self, client_player, sent, handle):
        handle.release()

        with pytest.raises(PlaybackError):
            await client_player.play(handle)
        assert sent == []

    async def test_send_failure_is_playback_error(self, handle):
        async def send(message):
            raise ConnectionResetError("socket closed")

        player = ClientAudioPlayer(send)

        with pytest.raises(PlaybackError):
            await player.play(handle)

    async def test_cancel_all_ends_pending(self, client_player, sent, handle):
        task = asyncio.create_task(client_player.play(handle))
        await wait_until(lambda: len(sent) == 1)
        client_player.notify_ready(handle.reference)
        await wait_until(lambda: len(sent) == 2)
        client_player.notify_playing(handle.reference)
        finished = await task

        client_player.cancel_all()

        assert await finished is False

    async def test_stop_ends_playback_and_tells_client(self, client_player, sent, handle):
        task = asyncio.create_task(client_player.play(handle))
        await wait_until(lambda: len(sent) == 1)
        client_player.notify_playing(handle.reference)
        await wait_until(lambda: len(sent) == 2)
        client_player.notify_playing(handle.reference)
        finished = await task

        await client_player.stop(handle)

        assert await finished is False
        assert client_player._pending == {}
        assert sent[-1] == {"type": "stop_audio", "reference": handle.reference}

    async def test_unknown_references_ignored(self, client_player):
        client_player.notify_ready("audio/nope")
        client_player.notify_playing("audio/nope")
        client_player.notify_ended("audio/nope")
        client_player.notify_error("audio/nope", "boom")
