"""
Base Scenario class.

All scenarios inherit from this class and fill in the persona profile.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class PersonaProfile:
    """
    The simulated counterpart the trainee talks to.

    Attributes:
        name: Display name
        age: Persona age; 0 marks a non-parent "agent" persona (coach, supervisor)
        child_age: Age of the child being discussed (0 for agents)
        concerns: Ordered concerns the persona brings to the visit
        background: Short background shown in the scenario picker
    """

    name: str
    age: int
    child_age: int = 0
    concerns: tuple[str, ...] = ()
    background: str = ""

    @property
    def is_agent(self) -> bool:
        return self.age == 0

    @property
    def initials(self) -> str:
        return "".join(part[0] for part in self.name.split() if part)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "initials": self.initials,
            "age": self.age,
            "childAge": self.child_age,
            "concerns": list(self.concerns),
            "background": self.background,
        }


@dataclass(frozen=True)
class Scenario:
    """
    Base class for all practice scenarios.

    Attributes:
        id: Unique identifier (lowercase, hyphenated)
        title: Display title
        description: Short description shown in the picker
        persona: Persona profile of the simulated counterpart
        difficulty: Beginner / Intermediate / Advanced / Expert
        duration: Expected session length, for display
        objectives: Learning objectives, for display
        voice: Voice persona key for speech synthesis, or None when the
            persona is not offered audio
    """

    id: str = "default"
    title: str = "Default Scenario"
    description: str = "A default scenario"
    persona: PersonaProfile = field(default_factory=lambda: PersonaProfile(name="Parent", age=40))
    difficulty: str = "Beginner"
    duration: str = ""
    objectives: tuple[str, ...] = ()
    voice: str | None = None

    @property
    def is_agent(self) -> bool:
        return self.persona.is_agent

    def to_dict(self) -> dict[str, Any]:
        """Convert scenario to the JSON shape served to the presentation layer."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "difficulty": self.difficulty,
            "duration": self.duration,
            "objectives": list(self.objectives),
            "parentProfile": self.persona.to_dict(),
            "isAgent": self.is_agent,
            "audioAvailable": self.voice is not None,
        }

    def __str__(self) -> str:
        return f"{self.title} ({self.id})"
