"""
Prompt storage for persona system prompts.

Usage:
    from prompts import PromptResolver

    resolver = PromptResolver(settings.prompt_dir)
    system_prompt = resolver.resolve("hpv-initial")
"""

from prompts.resolver import PROMPT_ALIASES, PromptResolver, load_prompt_files

__all__ = ["PROMPT_ALIASES", "PromptResolver", "load_prompt_files"]
