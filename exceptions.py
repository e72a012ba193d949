"""
Custom exceptions for the vaccine conversation simulator.

Provides specific exception types for the language-model path, the speech
path and the scenario/prompt lookups.
"""

from __future__ import annotations


class SimulatorError(Exception):
    """Base exception for all simulator errors."""

    pass


class ScenarioNotFoundError(SimulatorError):
    """Raised when a requested scenario doesn't exist."""

    def __init__(self, scenario_id: str) -> None:
        self.scenario_id = scenario_id
        super().__init__(f"Scenario not found: {scenario_id}")


class PromptUnavailableError(SimulatorError):
    """Raised when no system prompt can be resolved from prompt storage."""

    pass


class ResponseServiceError(SimulatorError):
    """Base exception for language-model failures."""

    pass


class AuthError(ResponseServiceError):
    """Raised when the LM backend rejects or lacks credentials."""

    pass


class ServiceUnavailableError(ResponseServiceError):
    """Raised when the LM backend reports that it is unavailable."""

    pass


class NetworkError(ResponseServiceError):
    """Raised when the LM backend cannot be reached."""

    pass


class EmptyResponseError(ResponseServiceError):
    """Raised when the LM backend answers without any text."""

    pass


class UnknownResponseError(ResponseServiceError):
    """Raised for LM failures that fit no other category."""

    pass


class SpeechError(SimulatorError):
    """Base exception for speech synthesis and playback errors."""

    pass


class SynthesisError(SpeechError):
    """Raised when text-to-speech synthesis fails."""

    pass


class LoadTimeoutError(SpeechError):
    """Raised when audio does not begin playing within the timeout."""

    def __init__(self, reference: str, timeout: float) -> None:
        self.reference = reference
        self.timeout = timeout
        super().__init__(f"Audio loading timeout after {timeout:.1f}s: {reference}")


class PlaybackError(SpeechError):
    """Raised when the player reports an error or the audio was released."""

    pass
