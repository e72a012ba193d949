"""
Test doubles for the speech path.

``FakePlayer`` starts immediately and ends when the test says so or on stop;
``make_tts_client`` mocks the ElevenLabs client used by ``SpeechService``.
"""

import asyncio
from unittest.mock import Mock

from speech.playback import AudioPlayer


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Poll ``predicate`` until it is true, failing the test on timeout."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met before timeout")
        await asyncio.sleep(0.005)


class FakePlayer(AudioPlayer):
    """Player that records starts and lets the test end playback."""

    def __init__(self, start_timeout: float = 1.0, load_error: Exception | None = None, hang: bool = False):
        super().__init__(start_timeout=start_timeout)
        self.load_error = load_error
        self.hang = hang
        self.started: list[str] = []
        self.stopped: list[str] = []
        self._finished: dict[str, asyncio.Future] = {}

    async def _load(self, handle):
        if self.load_error is not None:
            raise self.load_error
        if self.hang:
            await asyncio.Event().wait()

    async def _start(self, handle):
        finished = asyncio.get_running_loop().create_future()
        self._finished[handle.reference] = finished
        self.started.append(handle.reference)
        return finished

    def end(self, reference: str, ok: bool = True) -> None:
        self._finished[reference].set_result(ok)

    async def stop(self, handle):
        self.stopped.append(handle.reference)
        finished = self._finished.get(handle.reference)
        if finished is not None and not finished.done():
            finished.set_result(False)


def make_tts_client(audio: bytes = b"ID3-fake-mp3-bytes") -> Mock:
    """Mock ElevenLabs client whose convert() streams ``audio`` in two chunks."""
    client = Mock()
    half = len(audio) // 2
    client.text_to_speech.convert.side_effect = lambda **kwargs: iter([audio[:half], audio[half:]])
    return client
