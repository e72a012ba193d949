"""
System prompt resolution.

Prompts live as plain text files, one per scenario id, in the prompt
directory. They are read once on first use and served from memory.
"""

from __future__ import annotations

import logging
from pathlib import Path

from exceptions import PromptUnavailableError
from scenarios import DEFAULT_SCENARIO_ID

logger = logging.getLogger(__name__)

PROMPT_SUFFIX = ".txt"

# Persona names accepted in place of scenario ids
PROMPT_ALIASES: dict[str, str] = {
    "anne": "hpv-initial",
    "parent-anne": "hpv-initial",
    "maya": "vaccine-hesitant",
    "parent-maya": "vaccine-hesitant",
    "coach": "clear-coach",
    "supervisor": "sparc-supervisor",
}


def load_prompt_files(prompt_dir: Path) -> dict[str, str]:
    """
    Read every ``<id>.txt`` file in ``prompt_dir``.

    Empty files are skipped so they fall through to the default prompt.

    Raises:
        PromptUnavailableError: If the directory is missing or unreadable
    """
    if not prompt_dir.is_dir():
        raise PromptUnavailableError(f"Prompt directory not found: {prompt_dir}")

    prompts: dict[str, str] = {}
    try:
        for path in sorted(prompt_dir.glob(f"*{PROMPT_SUFFIX}")):
            text = path.read_text(encoding="utf-8").strip()
            if text:
                prompts[path.stem] = text
            else:
                logger.warning("Skipping empty prompt file: %s", path.name)
    except (OSError, UnicodeDecodeError) as e:
        raise PromptUnavailableError(f"Could not read prompts from {prompt_dir}: {e}") from e

    logger.info("Loaded %d system prompts from %s", len(prompts), prompt_dir)
    return prompts


class PromptResolver:
    """Maps a scenario id to its system prompt, with a default persona fallback."""

    def __init__(
        self,
        prompt_dir: Path,
        default_scenario_id: str = DEFAULT_SCENARIO_ID,
    ) -> None:
        self.prompt_dir = prompt_dir
        self.default_scenario_id = default_scenario_id
        self._prompts: dict[str, str] | None = None

    @classmethod
    def from_mapping(
        cls,
        prompts: dict[str, str],
        default_scenario_id: str = DEFAULT_SCENARIO_ID,
    ) -> PromptResolver:
        """Build a resolver over an in-memory prompt store."""
        resolver = cls(Path("."), default_scenario_id)
        resolver._prompts = {key: value.strip() for key, value in prompts.items() if value.strip()}
        return resolver

    def _store(self) -> dict[str, str]:
        if self._prompts is None:
            self._prompts = load_prompt_files(self.prompt_dir)
        return self._prompts

    def resolve(self, scenario_id: str) -> str:
        """
        Return the system prompt for a scenario.

        Unknown ids resolve to the default persona's prompt.

        Raises:
            PromptUnavailableError: If the store cannot be read or holds no
                prompt for the default persona either
        """
        store = self._store()
        key = PROMPT_ALIASES.get(scenario_id, scenario_id)

        prompt = store.get(key)
        if prompt:
            return prompt

        logger.warning(
            "No prompt for scenario '%s', using default persona '%s'",
            scenario_id,
            self.default_scenario_id,
        )
        prompt = store.get(self.default_scenario_id)
        if not prompt:
            raise PromptUnavailableError(
                f"No prompt for '{scenario_id}' and default '{self.default_scenario_id}' is missing"
            )
        return prompt
