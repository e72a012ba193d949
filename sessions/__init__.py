"""
Sessions Package

This package contains the components that run a practice session.

Components:
- models: Message, Session and the orchestrator states
- SpeechCoordinator: Synthesis, attachment and serialized playback of avatar audio
- SessionOrchestrator: The session state machine that presentation code drives

Usage:
    from sessions.models import Message, SessionState
    from sessions.speech_coordinator import SpeechCoordinator
    from sessions.session_orchestrator import SessionOrchestrator

Note: Import directly from submodules to avoid circular import issues.
"""

__all__ = [
    "Message",
    "Session",
    "SessionState",
    "SessionOrchestrator",
    "SpeechCoordinator",
]
