"""
Tests for system prompt resolution.
"""

from pathlib import Path

import pytest

from exceptions import PromptUnavailableError
from prompts import PromptResolver, load_prompt_files
from scenarios import list_scenarios

PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts" / "text"


@pytest.fixture
def prompt_dir(tmp_path):
    (tmp_path / "hpv-initial.txt").write_text("You are Anne Palmer.\n", encoding="utf-8")
    (tmp_path / "vaccine-hesitant.txt").write_text("You are Maya Pena.", encoding="utf-8")
    (tmp_path / "clear-coach.txt").write_text("   \n", encoding="utf-8")
    return tmp_path


class TestLoadPromptFiles:
    """Test reading prompt storage from disk."""

    def test_loads_by_file_stem(self, prompt_dir):
        prompts = load_prompt_files(prompt_dir)

        assert prompts == {
            "hpv-initial": "You are Anne Palmer.",
            "vaccine-hesitant": "You are Maya Pena.",
        }

    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(PromptUnavailableError):
            load_prompt_files(tmp_path / "nope")

    def test_undecodable_file_raises(self, prompt_dir):
        (prompt_dir / "research-heavy.txt").write_bytes(b"You are Dr. Mart\xednez\xff")

        with pytest.raises(PromptUnavailableError):
            load_prompt_files(prompt_dir)

    def test_shipped_prompts_cover_every_scenario(self):
        prompts = load_prompt_files(PROMPT_DIR)

        for scenario in list_scenarios():
            assert scenario.id in prompts


class TestPromptResolver:
    """Test lookup, aliases and the default fallback."""

    def test_resolves_scenario_id(self, prompt_dir):
        resolver = PromptResolver(prompt_dir)

        assert resolver.resolve("vaccine-hesitant") == "You are Maya Pena."

    def test_resolves_persona_alias(self, prompt_dir):
        resolver = PromptResolver(prompt_dir)

        assert resolver.resolve("parent-maya") == "You are Maya Pena."
        assert resolver.resolve("anne") == "You are Anne Palmer."

    def test_unknown_id_uses_default_persona(self, prompt_dir):
        resolver = PromptResolver(prompt_dir)

        assert resolver.resolve("flu-shot") == "You are Anne Palmer."

    def test_empty_prompt_uses_default_persona(self, prompt_dir):
        resolver = PromptResolver(prompt_dir)

        assert resolver.resolve("clear-coach") == "You are Anne Palmer."

    def test_missing_default_raises(self):
        resolver = PromptResolver.from_mapping({"vaccine-hesitant": "You are Maya."})

        with pytest.raises(PromptUnavailableError):
            resolver.resolve("flu-shot")

    def test_unreadable_store_raises_on_first_use(self, tmp_path):
        resolver = PromptResolver(tmp_path / "missing")

        with pytest.raises(PromptUnavailableError):
            resolver.resolve("hpv-initial")
