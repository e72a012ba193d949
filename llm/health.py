"""
Connection status polling for the LM backend.

A minimal completion request is issued every interval and the outcome is
kept as the latest ``ConnectionStatus``. The monitor knows nothing about
sessions; the web host serves its latest value to the status bar.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from pydantic import BaseModel

from constants import HEALTH_CHECK_INTERVAL_SECONDS
from llm.base import FallbackKind, ResponseService, classify_error

logger = logging.getLogger(__name__)

_ERROR_LABELS: dict[FallbackKind, str] = {
    FallbackKind.AUTH: "API Key Issue",
    FallbackKind.SERVICE_UNAVAILABLE: "Service Unavailable",
}


class ConnectionStatus(BaseModel):
    """Latest known reachability of the LM backend."""

    is_connected: bool
    model: str
    base_url: str
    last_checked: datetime
    error: Optional[str] = None
    error_kind: Optional[FallbackKind] = None

    @property
    def error_label(self) -> Optional[str]:
        """Short label for the status bar; None while connected."""
        if self.is_connected:
            return None
        return _ERROR_LABELS.get(self.error_kind, "Network Error")

    def to_dict(self) -> dict:
        return {
            "isConnected": self.is_connected,
            "model": self.model,
            "baseUrl": self.base_url,
            "lastChecked": self.last_checked.isoformat(),
            "error": self.error,
            "errorLabel": self.error_label,
        }


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConnectionMonitor:
    """Polls ``service.ping()`` on a fixed interval; latest result wins."""

    def __init__(
        self,
        service: ResponseService,
        interval_seconds: float = HEALTH_CHECK_INTERVAL_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.service = service
        self.interval_seconds = interval_seconds
        self.clock = clock
        self.latest: ConnectionStatus | None = None
        self._lock = asyncio.Lock()
        self._task: asyncio.Task | None = None

    @property
    def is_checking(self) -> bool:
        return self._lock.locked()

    async def check(self) -> ConnectionStatus:
        """Run one check now and record its outcome."""
        async with self._lock:
            try:
                await self.service.ping()
                status = ConnectionStatus(
                    is_connected=True,
                    model=self.service.model_name,
                    base_url=self.service.base_url,
                    last_checked=self.clock(),
                )
            except Exception as e:
                logger.warning("Connection check failed: %s", e)
                status = ConnectionStatus(
                    is_connected=False,
                    model=self.service.model_name,
                    base_url=self.service.base_url,
                    last_checked=self.clock(),
                    error=str(e) or "Connection failed",
                    error_kind=classify_error(e),
                )
            self.latest = status
            return status

    async def _run(self) -> None:
        while True:
            await self.check()
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        """Start background polling (first check runs immediately)."""
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.create_task(self._run())
        logger.info("Connection monitor started (every %.0fs)", self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)
        self._task = None
        logger.info("Connection monitor stopped")
