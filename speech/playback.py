"""
Awaitable audio playback.

``AudioPlayer.play(handle)`` resolves once playback has actually started and
hands back a future that completes when playback ends; ``stop(handle)`` ends it
early. Loading and starting must both happen within the start timeout.
Problems after the start are not raised to the caller; they are logged and end
the playback future.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from constants import PLAYBACK_START_TIMEOUT_SECONDS
from exceptions import LoadTimeoutError, PlaybackError, SpeechError
from metrics import track_error
from speech.audio import AudioHandle

logger = logging.getLogger(__name__)


class AudioPlayer(ABC):
    """
    Base class for playback backends.

    Subclasses implement:
    - _load(): return once the audio is ready to play
    - _start(): start playback and return a future completing when it ends
    """

    def __init__(self, start_timeout: float = PLAYBACK_START_TIMEOUT_SECONDS) -> None:
        self.start_timeout = start_timeout

    async def _load_and_start(self, handle: AudioHandle) -> asyncio.Future:
        await self._load(handle)
        logger.debug("Audio can play: %s", handle.reference)
        return await self._start(handle)

    async def play(self, handle: AudioHandle) -> asyncio.Future:
        """
        Start playing ``handle``.

        Returns:
            Future resolving to True when playback ends normally, False on a
            post-start error

        Raises:
            LoadTimeoutError: If playback has not begun within the timeout
            PlaybackError: If the handle is released or the backend fails
        """
        if handle.released:
            raise PlaybackError(f"Audio reference was released: {handle.reference}")

        try:
            finished = await asyncio.wait_for(self._load_and_start(handle), self.start_timeout)
        except asyncio.TimeoutError:
            track_error("load_timeout")
            logger.error("Audio loading timeout: %s", handle.reference)
            self._abandon(handle)
            raise LoadTimeoutError(handle.reference, self.start_timeout) from None
        except asyncio.CancelledError:
            self._abandon(handle)
            raise
        except SpeechError:
            track_error("playback_error")
            self._abandon(handle)
            raise
        except Exception as e:
            track_error("playback_error")
            logger.error("Audio playback error for %s: %s", handle.reference, e)
            self._abandon(handle)
            raise PlaybackError("Audio playback failed") from e

        logger.info("Audio started playing: %s", handle.reference)
        return finished

    async def stop(self, handle: AudioHandle) -> None:
        """Stop playback of ``handle`` and end its playback future with False."""
        self._abandon(handle)

    def _abandon(self, handle: AudioHandle) -> None:
        """Forget any backend state for ``handle``."""

    @abstractmethod
    async def _load(self, handle: AudioHandle) -> None:
        pass

    @abstractmethod
    async def _start(self, handle: AudioHandle) -> asyncio.Future:
        pass


@dataclass
class _PendingPlayback:
    ready: asyncio.Future
    started: asyncio.Future
    finished: asyncio.Future
    handle: AudioHandle = field(repr=False)


def _default_url(handle: AudioHandle) -> str:
    return f"/api/{handle.reference}"


def _settle(future: asyncio.Future, result: Any = None, error: BaseException | None = None) -> None:
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)


class ClientAudioPlayer(AudioPlayer):
    """
    Plays audio on a remote client (the browser) over a message channel.

    The player sends ``load_audio``, ``play_audio`` and ``stop_audio`` messages
    through ``send`` and waits for the client to report back via the ``notify_*``
    methods: ready (can play), playing (started), ended, or error.
    """

    def __init__(
        self,
        send: Callable[[dict[str, Any]], Awaitable[None]],
        url_for: Callable[[AudioHandle], str] = _default_url,
        start_timeout: float = PLAYBACK_START_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(start_timeout)
        self._send = send
        self._url_for = url_for
        self._pending: dict[str, _PendingPlayback] = {}

    async def _load(self, handle: AudioHandle) -> None:
        loop = asyncio.get_running_loop()
        stale = self._pending.pop(handle.reference, None)
        if stale is not None:
            self._finish(stale, False)

        pending = _PendingPlayback(
            ready=loop.create_future(),
            started=loop.create_future(),
            finished=loop.create_future(),
            handle=handle,
        )
        self._pending[handle.reference] = pending

        await self._send({
            "type": "load_audio",
            "reference": handle.reference,
            "url": self._url_for(handle),
            "media_type": handle.media_type,
        })
        await pending.ready

    async def _start(self, handle: AudioHandle) -> asyncio.Future:
        pending = self._pending.get(handle.reference)
        if pending is None:
            raise PlaybackError(f"Playback was cancelled: {handle.reference}")

        await self._send({"type": "play_audio", "reference": handle.reference})
        await pending.started
        return pending.finished

    async def stop(self, handle: AudioHandle) -> None:
        self._abandon(handle)
        try:
            await self._send({"type": "stop_audio", "reference": handle.reference})
        except Exception as e:
            logger.warning("Could not send stop for %s: %s", handle.reference, e)
        logger.info("Audio playback stopped: %s", handle.reference)

    def _abandon(self, handle: AudioHandle) -> None:
        pending = self._pending.pop(handle.reference, None)
        if pending is not None:
            self._finish(pending, False)

    @staticmethod
    def _finish(pending: _PendingPlayback, result: bool) -> None:
        cancelled = PlaybackError(f"Playback was cancelled: {pending.handle.reference}")
        # Nobody awaits these once playback is over; mark errors retrieved
        for future in (pending.ready, pending.started):
            if not future.done():
                future.set_exception(cancelled)
                future.exception()
        _settle(pending.finished, result)

    def notify_ready(self, reference: str) -> None:
        pending = self._pending.get(reference)
        if pending is None:
            logger.debug("Ignoring ready signal for unknown audio %s", reference)
            return
        _settle(pending.ready)

    def notify_playing(self, reference: str) -> None:
        pending = self._pending.get(reference)
        if pending is None:
            logger.debug("Ignoring playing signal for unknown audio %s", reference)
            return
        _settle(pending.ready)
        _settle(pending.started)

    def notify_ended(self, reference: str) -> None:
        pending = self._pending.pop(reference, None)
        if pending is None:
            return
        logger.info("Audio playback ended: %s", reference)
        self._finish(pending, True)

    def notify_error(self, reference: str, message: str = "") -> None:
        pending = self._pending.get(reference)
        if pending is None:
            return
        if pending.started.done():
            # After start: observable in logs only
            self._pending.pop(reference, None)
            track_error("playback_error")
            logger.error("Audio playback error after start for %s: %s", reference, message)
            self._finish(pending, False)
            return

        error = PlaybackError(f"Audio playback failed: {message or reference}")
        if not pending.ready.done():
            pending.ready.set_exception(error)
            # _load raises first, so nothing will await the start signal
            pending.started.set_exception(error)
            pending.started.exception()
        else:
            _settle(pending.started, error=error)

    def cancel_all(self) -> None:
        """End every pending playback, e.g. when the client disconnects."""
        pending_items = list(self._pending.values())
        self._pending.clear()
        for pending in pending_items:
            self._finish(pending, False)
