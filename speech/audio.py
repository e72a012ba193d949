"""
Audio handles and the reference store behind them.

Synthesized audio is kept in an ``AudioStore`` under a revocable reference
(``audio/<token>``), the way a browser hands out object URLs for blobs. An
``AudioHandle`` owns the bytes plus that reference. Releasing a handle
revokes the reference; releasing twice is a no-op.
"""

from __future__ import annotations

import logging
import secrets

from constants import TTS_MEDIA_TYPE
from metrics import audio_handles_gauge

logger = logging.getLogger(__name__)

REFERENCE_PREFIX = "audio/"


class AudioHandle:
    """Owned synthesized audio plus its revocable playback reference."""

    def __init__(self, store: AudioStore, reference: str, data: bytes, media_type: str) -> None:
        self._store = store
        self.reference = reference
        self.data = data
        self.media_type = media_type
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    @property
    def size(self) -> int:
        return len(self.data)

    def release(self) -> bool:
        """
        Revoke the reference.

        Returns:
            True if this call released the handle, False if it was already released
        """
        if self._released:
            return False
        self._released = True
        self._store.revoke(self.reference)
        return True

    def __repr__(self) -> str:
        state = "released" if self._released else "live"
        return f"AudioHandle({self.reference}, {self.size} bytes, {state})"


class AudioStore:
    """Issues, resolves and revokes audio references."""

    def __init__(self) -> None:
        self._objects: dict[str, tuple[bytes, str]] = {}
        self.created_count = 0
        self.revoked_count = 0

    def create(self, data: bytes, media_type: str = TTS_MEDIA_TYPE) -> AudioHandle:
        reference = f"{REFERENCE_PREFIX}{secrets.token_urlsafe(16)}"
        self._objects[reference] = (data, media_type)
        self.created_count += 1
        audio_handles_gauge.inc()
        logger.debug("Created audio reference %s (%d bytes)", reference, len(data))
        return AudioHandle(self, reference, data, media_type)

    def resolve(self, reference: str) -> tuple[bytes, str] | None:
        """Return ``(data, media_type)`` for a live reference, else None."""
        return self._objects.get(reference)

    def revoke(self, reference: str) -> bool:
        if self._objects.pop(reference, None) is None:
            logger.warning("Audio reference %s was already revoked", reference)
            return False
        self.revoked_count += 1
        audio_handles_gauge.dec()
        logger.debug("Revoked audio reference %s", reference)
        return True

    def __contains__(self, reference: object) -> bool:
        return reference in self._objects

    def __len__(self) -> int:
        return len(self._objects)
