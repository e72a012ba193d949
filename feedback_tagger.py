"""
C-LEAR feedback tagging for trainee messages.

Tags describe which communication skills a trainee's message displays.
Detection is a keyword heuristic: each rule maps a set of lowercase
substrings to one tag, and every rule is checked independently, so a
message can earn any number of tags.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Protocol


class ClearTag(str, Enum):
    """C-LEAR communication-skill labels."""

    COUNSEL = "Counsel"
    LISTEN = "Listen"
    EMPATHIZE = "Empathize"
    EXPLORE = "Explore"
    RESTATE = "Restate"
    ACKNOWLEDGE = "Acknowledge"


@dataclass(frozen=True)
class TagRule:
    """Emit ``tag`` when any of ``keywords`` occurs in the message."""

    tag: ClearTag
    keywords: frozenset[str]

    def matches(self, lowered: str) -> bool:
        return any(keyword in lowered for keyword in self.keywords)


def _rule(tag: ClearTag, *keywords: str) -> TagRule:
    return TagRule(tag=tag, keywords=frozenset(keyword.lower() for keyword in keywords))


DEFAULT_RULES: tuple[TagRule, ...] = (
    _rule(ClearTag.COUNSEL, "recommend", "suggest"),
    _rule(ClearTag.LISTEN, "understand", "hear"),
    _rule(ClearTag.EMPATHIZE, "feel", "concern"),
    _rule(ClearTag.EXPLORE, "what", "tell me"),
    _rule(ClearTag.RESTATE, "so you", "let me"),
    _rule(ClearTag.ACKNOWLEDGE, "valid", "normal"),
)


class FeedbackTagger(Protocol):
    """Anything that can label a trainee message with C-LEAR tags."""

    def tag_ordered(self, message: str) -> tuple[ClearTag, ...]: ...


class KeywordFeedbackTagger:
    """Case-insensitive substring matcher over a fixed rule table."""

    def __init__(self, rules: Iterable[TagRule] = DEFAULT_RULES) -> None:
        self.rules = tuple(rules)

    def tag(self, message: str) -> frozenset[ClearTag]:
        """Return the set of tags ``message`` earns."""
        return frozenset(self.tag_ordered(message))

    def tag_ordered(self, message: str) -> tuple[ClearTag, ...]:
        """Return the earned tags in rule-table order, without duplicates."""
        lowered = message.lower()
        tags: list[ClearTag] = []
        for rule in self.rules:
            if rule.tag not in tags and rule.matches(lowered):
                tags.append(rule.tag)
        return tuple(tags)


_default_tagger = KeywordFeedbackTagger()


def tag(message: str) -> frozenset[ClearTag]:
    """Tag ``message`` with the default rule table."""
    return _default_tagger.tag(message)
