"""
Web server for the vaccine conversation simulator.

This server:
- Serves the scenario catalog and the LM connection status over HTTP
- Serves synthesized audio by its revocable reference
- Exposes Prometheus metrics
- Runs one session orchestrator per WebSocket connection and pushes a
  session snapshot to the client on every change
- Drives browser audio playback over the same WebSocket
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import aiohttp
from aiohttp import web
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from config import Settings, get_settings
from exceptions import ScenarioNotFoundError
from llm import ConnectionMonitor, ResponseService, create_response_service
from logging_config import setup_logging
from scenarios import get_scenario, list_scenarios
from sessions.models import SessionEvent
from sessions.session_orchestrator import SessionOrchestrator
from speech.audio import REFERENCE_PREFIX, AudioStore
from speech.elevenlabs import SpeechService
from speech.playback import ClientAudioPlayer

logger = logging.getLogger(__name__)

SETTINGS_KEY = web.AppKey("settings", Settings)
RESPONSE_SERVICE_KEY = web.AppKey("response_service", ResponseService)
SPEECH_SERVICE_KEY = web.AppKey("speech_service", SpeechService)
AUDIO_STORE_KEY = web.AppKey("audio_store", AudioStore)
MONITOR_KEY = web.AppKey("connection_monitor", ConnectionMonitor)
ORCHESTRATORS_KEY = web.AppKey("orchestrators", set)


class ClientMessageError(ValueError):
    """A WebSocket frame from the client could not be handled."""


def _require(data: dict[str, Any], field: str) -> str:
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ClientMessageError(f"'{field}' is required")
    return value


async def scenarios_handler(request: web.Request) -> web.Response:
    """List the scenario catalog in display order."""
    return web.json_response([scenario.to_dict() for scenario in list_scenarios()])


async def status_handler(request: web.Request) -> web.Response:
    """Latest LM connection status (no check is issued)."""
    monitor = request.app[MONITOR_KEY]
    status = monitor.latest
    if status is None:
        service = request.app[RESPONSE_SERVICE_KEY]
        payload = {
            "isConnected": False,
            "model": service.model_name,
            "baseUrl": service.base_url,
            "lastChecked": None,
            "error": None,
            "errorLabel": None,
        }
    else:
        payload = status.to_dict()
    payload["isChecking"] = monitor.is_checking
    return web.json_response(payload)


async def status_refresh_handler(request: web.Request) -> web.Response:
    """Probe the LM backend now and return the fresh status."""
    status = await request.app[MONITOR_KEY].check()
    payload = status.to_dict()
    payload["isChecking"] = False
    return web.json_response(payload)


async def audio_handler(request: web.Request) -> web.Response:
    """Serve synthesized audio while its reference is live."""
    reference = f"{REFERENCE_PREFIX}{request.match_info['token']}"
    resolved = request.app[AUDIO_STORE_KEY].resolve(reference)
    if resolved is None:
        raise web.HTTPNotFound()
    data, media_type = resolved
    return web.Response(body=data, content_type=media_type)


async def metrics_handler(request: web.Request) -> web.Response:
    """Prometheus scrape endpoint."""
    return web.Response(body=generate_latest(), headers={"Content-Type": CONTENT_TYPE_LATEST})


async def handle_client_message(
    orchestrator: SessionOrchestrator,
    player: ClientAudioPlayer,
    data: dict[str, Any],
) -> None:
    """
    Dispatch one client frame to the orchestrator or the audio player.

    Raises:
        ClientMessageError: On an unknown type or missing fields
    """
    msg_type = data.get("type")

    if msg_type == "select_scenario":
        scenario_id = _require(data, "scenario")
        try:
            scenario = get_scenario(scenario_id)
        except ScenarioNotFoundError as e:
            raise ClientMessageError(str(e)) from None
        if not orchestrator.select_scenario(scenario):
            raise ClientMessageError("A session is already running; reset it first")

    elif msg_type == "submit":
        # Runs in the background so audio acks keep flowing during the turn
        orchestrator.submit_in_background(str(data.get("content", "")))

    elif msg_type == "replay":
        orchestrator.replay(_require(data, "message_id"))

    elif msg_type == "reset":
        orchestrator.reset()

    elif msg_type == "toggle_audio":
        orchestrator.toggle_audio()

    elif msg_type == "audio_ready":
        player.notify_ready(_require(data, "reference"))

    elif msg_type == "audio_playing":
        player.notify_playing(_require(data, "reference"))

    elif msg_type == "audio_ended":
        player.notify_ended(_require(data, "reference"))

    elif msg_type == "audio_error":
        player.notify_error(_require(data, "reference"), str(data.get("message", "")))

    else:
        raise ClientMessageError(f"Unknown message type: {msg_type!r}")


async def websocket_handler(request: web.Request) -> web.WebSocketResponse:
    """Handle one client connection: one orchestrator for its lifetime."""
    ws = web.WebSocketResponse()
    await ws.prepare(request)

    app = request.app
    player = ClientAudioPlayer(send=ws.send_json)
    orchestrator = SessionOrchestrator(
        response_service=app[RESPONSE_SERVICE_KEY],
        speech_service=app[SPEECH_SERVICE_KEY],
        player=player,
        audio_enabled=True,
    )
    app[ORCHESTRATORS_KEY].add(orchestrator)
    logger.info("Client connected")

    pending_sends: set[asyncio.Task] = set()

    def push_snapshot(event: SessionEvent) -> None:
        if ws.closed:
            return
        task = asyncio.create_task(
            ws.send_json({"type": "session_update", "event": event.type, "session": orchestrator.snapshot()})
        )
        pending_sends.add(task)
        task.add_done_callback(pending_sends.discard)

    orchestrator.subscribe(push_snapshot)

    try:
        await ws.send_json({"type": "session_update", "event": "connected", "session": orchestrator.snapshot()})

        async for msg in ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                try:
                    data = json.loads(msg.data)
                    if not isinstance(data, dict):
                        raise ClientMessageError("Expected a JSON object")
                    await handle_client_message(orchestrator, player, data)
                except json.JSONDecodeError as e:
                    logger.warning("Invalid JSON received: %s", e)
                    await ws.send_json({"type": "error", "message": "Invalid JSON"})
                except ClientMessageError as e:
                    logger.warning("Rejected client message: %s", e)
                    await ws.send_json({"type": "error", "message": str(e)})
                except Exception as e:
                    logger.exception("Error handling message: %s", e)
                    await ws.send_json({"type": "error", "message": "Server error. Please try again."})

            elif msg.type == aiohttp.WSMsgType.ERROR:
                logger.error("WebSocket error: %s", ws.exception())

    finally:
        player.cancel_all()
        await orchestrator.shutdown()
        app[ORCHESTRATORS_KEY].discard(orchestrator)
        if pending_sends:
            await asyncio.gather(*pending_sends, return_exceptions=True)
        logger.info("Client disconnected")

    return ws


async def _start_monitor(app: web.Application) -> None:
    app[MONITOR_KEY].start()


async def _shutdown(app: web.Application) -> None:
    await app[MONITOR_KEY].stop()
    for orchestrator in list(app[ORCHESTRATORS_KEY]):
        await orchestrator.shutdown()
    app[ORCHESTRATORS_KEY].clear()


# Create app
async def create_app(
    settings: Settings | None = None,
    response_service: ResponseService | None = None,
    speech_service: SpeechService | None = None,
    start_monitor: bool = True,
) -> web.Application:
    """
    Create and configure the web application.

    Args:
        settings: Loaded settings (read from the environment when omitted)
        response_service: Overrides the configured response service
        speech_service: Overrides the ElevenLabs speech service
        start_monitor: Whether to poll the LM backend in the background
    """
    settings = settings or get_settings()
    response_service = response_service or create_response_service(settings)
    if speech_service is None:
        speech_service = SpeechService(AudioStore(), api_key=settings.tts_api_key)

    app = web.Application()
    app[SETTINGS_KEY] = settings
    app[RESPONSE_SERVICE_KEY] = response_service
    app[SPEECH_SERVICE_KEY] = speech_service
    app[AUDIO_STORE_KEY] = speech_service.store
    app[MONITOR_KEY] = ConnectionMonitor(response_service)
    app[ORCHESTRATORS_KEY] = set()

    app.router.add_get("/api/scenarios", scenarios_handler)
    app.router.add_get("/api/status", status_handler)
    app.router.add_post("/api/status/refresh", status_refresh_handler)
    app.router.add_get("/api/audio/{token}", audio_handler)
    app.router.add_get("/metrics", metrics_handler)
    app.router.add_get("/ws", websocket_handler)

    if start_monitor:
        app.on_startup.append(_start_monitor)
    app.on_cleanup.append(_shutdown)

    return app


# Main entry point
def main() -> None:
    """Start the web server."""
    setup_logging()
    settings = get_settings()

    logger.info("=" * 60)
    logger.info("Vaccine Conversation Simulator")
    logger.info("=" * 60)
    logger.info("Starting server on http://%s:%d", settings.server_host, settings.server_port)
    logger.info("Response service: %s (model=%s)", settings.response_service, settings.llm_model)
    logger.info("Press Ctrl+C to stop")
    logger.info("=" * 60)

    web.run_app(create_app(settings), host=settings.server_host, port=settings.server_port)


if __name__ == "__main__":
    main()
