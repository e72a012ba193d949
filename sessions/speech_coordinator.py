"""
Speech Coordinator Module

Manages synthesis, attachment and playback of avatar audio for a session.
Nothing here can fail a turn: every speech error is logged and the
conversation continues without audio.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

from exceptions import LoadTimeoutError, PlaybackError, SynthesisError
from logging_config import get_session_logger
from scenarios.base import Scenario
from sessions.models import Session
from speech.audio import AudioHandle
from speech.elevenlabs import SpeechService, VoicePersona, voice_persona_for
from speech.playback import AudioPlayer

EmitCallback = Callable[[str, Session, Optional[str]], None]


class SpeechCoordinator:
    """Synthesizes, attaches and plays avatar audio, one stream at a time."""

    def __init__(
        self,
        speech_service: SpeechService | None,
        player: AudioPlayer | None,
        emit: EmitCallback,
        is_current: Callable[[Session], bool],
    ) -> None:
        """
        Args:
            speech_service: Synthesis backend; None disables audio entirely
            player: Playback backend; None means audio is attached but never played
            emit: Change notification callback (event type, session, message id)
            is_current: Whether a session is still the orchestrator's live one
        """
        self.speech_service = speech_service
        self.player = player
        self._emit = emit
        self._is_current = is_current

    def voice_for(self, scenario: Scenario) -> VoicePersona | None:
        """Voice persona to synthesize with, or None when audio is not offered."""
        if self.speech_service is None:
            return None
        return voice_persona_for(scenario.voice)

    async def speak(self, session: Session, message_id: str, text: str, persona: VoicePersona) -> None:
        """Synthesize ``text``, attach it to the message and start playback."""
        log = get_session_logger(__name__, session)
        try:
            handle = await self.speech_service.synthesize(text, persona)
        except SynthesisError as e:
            log.warning_event(
                "synthesis_failed", "Continuing without audio", message_id=message_id, error=str(e)
            )
            return

        if not self._is_current(session) or not session.attach_audio(message_id, handle):
            handle.release()
            log.info_event(
                "stale_audio_released",
                "Released audio for a message that is gone",
                message_id=message_id,
                reference=handle.reference,
            )
            return

        log.info_event(
            "audio_attached", "Attached synthesized audio", message_id=message_id, reference=handle.reference
        )
        self._emit("audio_attached", session, message_id)

        claimed = self.claim(session, message_id)
        if claimed is None:
            return
        await self.play_claimed(session, message_id, claimed)

    def claim(self, session: Session, message_id: str) -> AudioHandle | None:
        """
        Reserve the single playback slot for a message.

        Returns the message's handle, or None if playback is not possible:
        no player, another message is playing, or the message has no live audio.
        """
        log = get_session_logger(__name__, session)
        if self.player is None:
            return None
        if session.currently_playing is not None:
            log.info_event(
                "playback_skipped",
                "Another message is already playing",
                message_id=message_id,
                playing=session.currently_playing,
            )
            return None

        message = session.get_message(message_id)
        if message is None or message.audio is None or message.audio.released:
            return None

        session.currently_playing = message_id
        self._emit("playback_requested", session, message_id)
        return message.audio

    async def play_claimed(self, session: Session, message_id: str, handle: AudioHandle) -> None:
        """Play a claimed handle and free the slot when playback ends or fails."""
        log = get_session_logger(__name__, session)
        try:
            finished = await self.player.play(handle)
            self._emit("playback_started", session, message_id)
            ended_normally = await finished
            log.debug_event(
                "playback_ended", "Audio playback ended", message_id=message_id, ended_normally=ended_normally
            )
        except asyncio.CancelledError:
            await self.player.stop(handle)
            log.info_event("playback_stopped", "Audio playback stopped", message_id=message_id)
            raise
        except (LoadTimeoutError, PlaybackError) as e:
            log.warning_event(
                "playback_failed", "Audio could not be played", message_id=message_id, error=str(e)
            )
        finally:
            if session.currently_playing == message_id:
                session.currently_playing = None
                if self._is_current(session):
                    self._emit("playback_finished", session, message_id)

    @staticmethod
    def release_all(session: Session) -> int:
        """Release every live handle in the session; returns how many were released."""
        released = 0
        for handle in session.audio_handles():
            if handle.release():
                released += 1
        return released
