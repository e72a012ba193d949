"""
Structured logging for the simulator.

Deployments get one JSON object per line; development gets readable lines.
Every record carries ``session_id`` and ``scenario`` (null outside a session),
so the turn, fallback and audio events of one practice session can be pulled
out of a shared log stream.
"""

import logging
import os
import sys
from functools import partialmethod
from typing import Any, Optional

from pythonjsonlogger import jsonlogger

from constants import LOG_FORMAT_JSON, LOG_LEVEL_DEVELOPMENT, LOG_LEVEL_PRODUCTION, QUIET_LOGGERS

SESSION_FIELDS = ("session_id", "scenario")

JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
JSON_RENAMES = {"asctime": "@timestamp", "levelname": "severity", "name": "logger"}
READABLE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [session=%(session_id)s] %(message)s"


class SessionContextFilter(logging.Filter):
    """Fill in missing session fields so both formats can rely on them."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name in SESSION_FIELDS:
            if not hasattr(record, name):
                setattr(record, name, None)
        return True


def _is_development() -> bool:
    return os.getenv("ENV", "production").lower() in ("dev", "development")


def build_formatter(use_json: bool) -> logging.Formatter:
    if use_json:
        return jsonlogger.JsonFormatter(JSON_FORMAT, rename_fields=JSON_RENAMES)
    return logging.Formatter(READABLE_FORMAT, datefmt="%H:%M:%S")


def setup_logging(use_json: Optional[bool] = None, log_level: Optional[str] = None) -> None:
    """
    Replace the root handlers with a single stdout handler.

    Args:
        use_json: JSON (True) or readable (False) output. If None, read from
                  LOG_FORMAT_JSON.
        log_level: Level name. If None, DEBUG when ENV is a development
                   value, INFO otherwise.
    """
    if use_json is None:
        use_json = os.getenv("LOG_FORMAT_JSON", str(LOG_FORMAT_JSON)).lower() in ("true", "1", "yes")
    if log_level is None:
        log_level = LOG_LEVEL_DEVELOPMENT if _is_development() else LOG_LEVEL_PRODUCTION

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(SessionContextFilter())
    handler.setFormatter(build_formatter(use_json))

    root_logger = logging.getLogger()
    root_logger.handlers[:] = [handler]
    root_logger.setLevel(log_level.upper())

    # SDK request logging would bury session events at DEBUG
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """
    Stamps records with session context and logs typed events.

    ``event_type`` names what happened (``turn_completed``,
    ``playback_failed``); the other keyword arguments become top-level
    fields of the JSON record. Session context wins over per-call values.
    """

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        kwargs["extra"] = {**kwargs.get("extra", {}), **self.extra}
        return msg, kwargs

    def log_event(self, level: int, event_type: str, message: str, **context: Any) -> None:
        self.log(level, message, extra={"event_type": event_type, **context})

    debug_event = partialmethod(log_event, logging.DEBUG)
    info_event = partialmethod(log_event, logging.INFO)
    warning_event = partialmethod(log_event, logging.WARNING)
    error_event = partialmethod(log_event, logging.ERROR)


def get_session_logger(name: str, session: Any = None) -> StructuredLoggerAdapter:
    """Adapter for logger ``name`` bound to ``session``, or to no session."""
    context: dict[str, Any] = {}
    if session is not None:
        context = {"session_id": session.session_id, "scenario": session.scenario.id}
    return StructuredLoggerAdapter(logging.getLogger(name), context)
