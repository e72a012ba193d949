"""
Prometheus metrics instrumentation for the conversation simulator.

This module provides metrics tracking for:
- Turns completed by scenario and outcome
- Fallback replies by error kind
- LLM API latency
- TTS synthesis time
- Playback failures by kind
- Live audio handles and active sessions

Usage:
    from metrics import track_llm_call, track_tts_call, track_fallback

    with track_llm_call(model="gpt-oss-120b"):
        # ... call LLM ...
        pass

    track_fallback("auth")
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Generator

from prometheus_client import Counter, Gauge, Histogram

if TYPE_CHECKING:
    from typing import Literal

# === COUNTERS ===

turns_total = Counter(
    "simulator_turns_total",
    "Total number of completed conversation turns",
    ["scenario", "outcome"],
)

fallbacks_total = Counter(
    "simulator_fallbacks_total",
    "Total number of fallback replies shown to trainees",
    ["kind"],
)

errors_total = Counter(
    "simulator_errors_total",
    "Total number of errors encountered",
    ["error_type"],
)

# === HISTOGRAMS ===

llm_latency_seconds = Histogram(
    "simulator_llm_latency_seconds",
    "Time taken for LLM API calls",
    ["model"],
    buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, float("inf")),
)

tts_latency_seconds = Histogram(
    "simulator_tts_latency_seconds",
    "Time taken for TTS synthesis",
    buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 10.0, float("inf")),
)

# === GAUGES ===

active_sessions_gauge = Gauge(
    "simulator_active_sessions",
    "Current number of active practice sessions",
)

audio_handles_gauge = Gauge(
    "simulator_audio_handles",
    "Audio handles created and not yet released",
)

# === CONTEXT MANAGERS ===


@contextmanager
def track_llm_call(model: str) -> Generator[None, None, None]:
    """Observe the duration of an LLM API call for ``model``."""
    start_time = time.time()
    try:
        yield
    finally:
        llm_latency_seconds.labels(model=model).observe(time.time() - start_time)


@contextmanager
def track_tts_call() -> Generator[None, None, None]:
    """Observe the duration of a TTS synthesis call."""
    start_time = time.time()
    try:
        yield
    finally:
        tts_latency_seconds.observe(time.time() - start_time)


def track_turn(scenario: str, outcome: Literal["reply", "fallback"]) -> None:
    turns_total.labels(scenario=scenario, outcome=outcome).inc()


def track_fallback(kind: str) -> None:
    """
    Track a fallback reply.

    Args:
        kind: The classified error kind (e.g., "auth", "network", "empty_response")
    """
    fallbacks_total.labels(kind=kind).inc()


def track_error(error_type: str) -> None:
    """
    Track an error occurrence.

    Args:
        error_type: The type of error (e.g., "synthesis_error", "load_timeout")
    """
    errors_total.labels(error_type=error_type).inc()
