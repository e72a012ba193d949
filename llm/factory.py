"""
Response service factory.

Chooses the response service variant from configuration so the session
orchestrator never branches on it.
"""

from __future__ import annotations

import logging

from config import RESPONSE_SERVICE_SCRIPTED, Settings
from llm.base import ResponseService
from llm.openai import LiveResponseService
from llm.scripted import ScriptedResponseService
from prompts import PromptResolver

logger = logging.getLogger(__name__)


def create_response_service(
    settings: Settings,
    prompt_resolver: PromptResolver | None = None,
) -> ResponseService:
    """
    Build the configured response service.

    Args:
        settings: Loaded settings; ``response_service`` picks the variant
        prompt_resolver: Resolver for the live variant (built from
            ``settings.prompt_dir`` when omitted)
    """
    if settings.response_service == RESPONSE_SERVICE_SCRIPTED:
        logger.info("Using scripted response service")
        return ScriptedResponseService()

    logger.info("Using live response service (model=%s)", settings.llm_model)
    return LiveResponseService(
        prompt_resolver=prompt_resolver or PromptResolver(settings.prompt_dir),
        api_key=settings.llm_api_key,
        base_url=settings.llm_base_url,
        model=settings.llm_model,
    )
