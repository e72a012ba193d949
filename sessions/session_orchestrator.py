"""
Session Orchestrator Module

Owns one trainee's practice session and is the only code that mutates it.

The orchestrator delegates responsibilities to:
- ResponseService: persona replies (live backend or scripted)
- FeedbackTagger: C-LEAR tags for each trainee message
- SpeechCoordinator: synthesis, attachment and playback of avatar audio

Presentation code reads ``snapshot()`` and subscribes to change events; it
never touches the message list directly.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Coroutine

from feedback_tagger import FeedbackTagger, KeywordFeedbackTagger
from llm.base import ChatResponse, ResponseService, fallback_response, to_chat_history
from logging_config import StructuredLoggerAdapter, get_session_logger
from metrics import active_sessions_gauge, track_fallback, track_turn
from scenarios.base import Scenario
from sessions.models import Message, Sender, Session, SessionEvent, SessionState, opening_line
from sessions.speech_coordinator import SpeechCoordinator
from speech.elevenlabs import SpeechService
from speech.playback import AudioPlayer

logger = logging.getLogger(__name__)

Listener = Callable[[SessionEvent], None]


class SessionOrchestrator:
    """
    State machine for a practice session.

    IDLE -> ACTIVE on select_scenario, ACTIVE -> TURN_PENDING while a reply
    is awaited, back to ACTIVE when it lands, and IDLE again on reset from
    any state.
    """

    def __init__(
        self,
        response_service: ResponseService,
        speech_service: SpeechService | None = None,
        player: AudioPlayer | None = None,
        tagger: FeedbackTagger | None = None,
        audio_enabled: bool = False,
    ) -> None:
        """
        Initialize the session orchestrator.

        Args:
            response_service: Produces persona replies
            speech_service: Synthesizes avatar audio; None disables audio
            player: Plays avatar audio; None attaches audio without playing it
            tagger: C-LEAR tagger (keyword rules by default)
            audio_enabled: Whether new turns request audio
        """
        self.response_service = response_service
        self.tagger = tagger or KeywordFeedbackTagger()
        self.audio_enabled = audio_enabled

        self._state = SessionState.IDLE
        self._session: Session | None = None
        self._listeners: list[Listener] = []
        self._message_counter = 0

        self.speech = SpeechCoordinator(
            speech_service=speech_service,
            player=player,
            emit=self._emit_for,
            is_current=self._is_current,
        )

        self.logger = get_session_logger(__name__)

        # Background task tracking
        self._background_tasks: set[asyncio.Task] = set()

    # === STATE ===

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def messages(self) -> list[Message]:
        if self._session is None:
            return []
        return list(self._session.messages)

    def _is_current(self, session: Session) -> bool:
        return session is self._session

    def _next_message_id(self) -> str:
        self._message_counter += 1
        return f"{int(time.time() * 1000)}-{self._message_counter}"

    # === CHANGE NOTIFICATION ===

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a change listener.

        Returns:
            A callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event_type: str, message_id: str | None = None) -> None:
        session_id = self._session.session_id if self._session else None
        event = SessionEvent(type=event_type, session_id=session_id, message_id=message_id)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(
                    f"[SessionOrchestrator] Listener failed on '{event_type}': {e}", exc_info=True
                )

    def _emit_for(self, event_type: str, session: Session, message_id: str | None = None) -> None:
        if self._is_current(session):
            self._emit(event_type, message_id)

    # === OPERATIONS ===

    def select_scenario(self, scenario: Scenario) -> bool:
        """
        Start a session for ``scenario``, seeded with the persona's greeting.

        Returns:
            True if the session started, False if one is already running
        """
        if self._state is not SessionState.IDLE:
            self.logger.warning_event(
                "select_ignored", "A session is already running; reset first", state=self._state.value
            )
            return False

        session = Session(scenario=scenario)
        session.messages.append(
            Message(id=self._next_message_id(), sender=Sender.AVATAR, content=opening_line(scenario))
        )
        self._session = session
        self._state = SessionState.ACTIVE
        self.logger = get_session_logger(__name__, session)
        active_sessions_gauge.inc()

        self.logger.info_event(
            "session_started",
            "Started practice session",
            persona=scenario.persona.name,
            session_token_preview=session.session_id[:8],
        )
        self._emit("session_started", session.messages[0].id)
        return True

    async def submit_user_turn(self, text: str) -> Message | None:
        """
        Send the trainee's message and append the persona's reply.

        The user message is appended before anything is awaited. Backend
        failures come back as a fallback reply, so this never raises for them.

        Returns:
            The appended avatar message, or None if the call was a no-op or
            the session was reset while the reply was pending
        """
        if self._state is not SessionState.ACTIVE:
            self.logger.debug_event("submit_ignored", "Turn not accepted", state=self._state.value)
            return None

        text = text.strip()
        if not text:
            return None

        session = self._session
        scenario = session.scenario
        history = to_chat_history(session.messages)
        audio_enabled = self.audio_enabled
        log = self.logger

        user_message = Message(id=self._next_message_id(), sender=Sender.USER, content=text)
        session.messages.append(user_message)
        session.pending_turn = True
        self._state = SessionState.TURN_PENDING
        self._emit("user_message", user_message.id)

        log.info_event(
            "turn_submitted", "Trainee message sent", message_id=user_message.id, history_len=len(history)
        )

        try:
            response = await self.response_service.complete(history, text, scenario.id)
        except Exception as e:
            response = self._unexpected_failure(e, log)
        finally:
            session.pending_turn = False

        if not self._is_current(session):
            log.info_event(
                "stale_reply_dropped", "Session was reset before the reply arrived", message_id=user_message.id
            )
            return None

        avatar_message = Message(
            id=self._next_message_id(),
            sender=Sender.AVATAR,
            content=response.content,
            clear_components=self.tagger.tag_ordered(text),
            is_fallback=response.is_fallback,
        )
        session.messages.append(avatar_message)
        self._state = SessionState.ACTIVE

        outcome = "fallback" if response.is_fallback else "reply"
        track_turn(scenario.id, outcome)
        log.info_event(
            "turn_completed",
            "Persona reply appended",
            message_id=avatar_message.id,
            outcome=outcome,
            fallback_kind=response.kind.value if response.kind else None,
            clear_components=[tag.value for tag in avatar_message.clear_components],
        )
        self._emit("avatar_message", avatar_message.id)

        if audio_enabled:
            persona = self.speech.voice_for(scenario)
            if persona is not None:
                self._create_tracked_task(
                    self.speech.speak(session, avatar_message.id, avatar_message.content, persona),
                    name=f"speech-{avatar_message.id}",
                )

        return avatar_message

    def submit_in_background(self, text: str) -> asyncio.Task | None:
        """
        Run ``submit_user_turn`` as a tracked task so the caller stays responsive.

        Returns None when the turn would be a no-op. A reset cancels the task.
        """
        if self._state is not SessionState.ACTIVE or not text.strip():
            return None
        return self._create_tracked_task(self.submit_user_turn(text), name="turn")

    def _unexpected_failure(self, error: Exception, log: StructuredLoggerAdapter) -> ChatResponse:
        response = fallback_response(error)
        track_fallback(response.kind.value)
        log.error_event(
            "response_service_failed",
            "Response service raised instead of returning a fallback",
            error=str(error),
            fallback_kind=response.kind.value,
        )
        return response

    def replay(self, message_id: str) -> bool:
        """
        Play a message's audio again.

        Returns:
            True if playback was started, False if the message has no audio
            or another message is playing
        """
        session = self._session
        if session is None:
            return False

        handle = self.speech.claim(session, message_id)
        if handle is None:
            return False

        self.logger.info_event("replay_requested", "Replaying message audio", message_id=message_id)
        self._create_tracked_task(
            self.speech.play_claimed(session, message_id, handle),
            name=f"replay-{message_id}",
        )
        return True

    def reset(self) -> None:
        """
        End the current session from any state.

        Releases every outstanding audio handle (each exactly once), cancels
        speech work and returns to IDLE. Calling it again is harmless.
        """
        session = self._session
        had_session = session is not None

        for task in list(self._background_tasks):
            if not task.done():
                task.cancel()

        released = 0
        if session is not None:
            released = self.speech.release_all(session)
            session.messages.clear()
            session.active = False
            session.pending_turn = False
            session.currently_playing = None
            active_sessions_gauge.dec()

        self._session = None
        self._state = SessionState.IDLE

        if had_session:
            self.logger.info_event("session_reset", "Session reset", handles_released=released)
            self.logger = get_session_logger(__name__)
        self._emit("session_reset")

    def toggle_audio(self) -> bool:
        """Flip audio for future turns; returns the new setting."""
        self.audio_enabled = not self.audio_enabled
        self.logger.info_event("audio_toggled", "Audio setting changed", audio_enabled=self.audio_enabled)
        self._emit("audio_toggled")
        return self.audio_enabled

    def snapshot(self) -> dict[str, Any]:
        """Read-only view of the session for presentation code."""
        session = self._session
        playing = session.currently_playing if session else None
        return {
            "state": self._state.value,
            "sessionId": session.session_id if session else None,
            "scenario": session.scenario.to_dict() if session else None,
            "messages": [message.to_dict(playing) for message in session.messages] if session else [],
            "active": session.active if session else False,
            "pendingTurn": session.pending_turn if session else False,
            "audioEnabled": self.audio_enabled,
            "currentlyPlaying": playing,
        }

    async def shutdown(self) -> None:
        """Reset and wait for all background work to finish."""
        self.reset()
        await self._cleanup_background_tasks()
        self._listeners.clear()

    # === BACKGROUND TASKS ===

    def _create_tracked_task(self, coro: Coroutine[Any, Any, Any], name: str = "unknown") -> asyncio.Task:
        """
        Create a tracked background task that won't silently fail.

        Args:
            coro: Coroutine to run as background task
            name: Descriptive name for logging

        Returns:
            The created Task object
        """
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)

        def _task_done_callback(t: asyncio.Task) -> None:
            self._background_tasks.discard(t)
            try:
                t.result()
            except asyncio.CancelledError:
                logger.debug(f"[SessionOrchestrator] Background task '{name}' was cancelled")
            except Exception as e:
                logger.error(
                    f"[SessionOrchestrator] Background task '{name}' failed with error: {e}",
                    exc_info=True,
                )

        task.add_done_callback(_task_done_callback)
        logger.debug(f"[SessionOrchestrator] Created tracked task: {name}")
        return task

    async def _cleanup_background_tasks(self) -> None:
        """Cancel all background tasks and wait for them to complete."""
        if not self._background_tasks:
            return

        logger.info(f"[SessionOrchestrator] Cancelling {len(self._background_tasks)} background tasks...")

        for task in self._background_tasks:
            if not task.done():
                task.cancel()

        await asyncio.gather(*self._background_tasks, return_exceptions=True)
        self._background_tasks.clear()
        logger.info("[SessionOrchestrator] All background tasks cleaned up")
