"""
Religious/Cultural Concerns - Fatima Al-Rashid

A family with religious or cultural objections to HPV vaccination.
"""

from scenarios.base import PersonaProfile, Scenario


class ReligiousObjection(Scenario):
    """Fatima Al-Rashid - Values-based objection"""

    def __init__(self):
        super().__init__(
            id="religious-objection",
            title="Religious/Cultural Concerns",
            description="Family with religious or cultural objections to HPV vaccination",
            persona=PersonaProfile(
                name="Fatima Al-Rashid",
                age=35,
                child_age=13,
                concerns=(
                    "religious beliefs",
                    "cultural values",
                    "community pressure",
                    "appropriateness",
                ),
                background="Conservative religious family",
            ),
            difficulty="Advanced",
            duration="20-25 min",
            objectives=(
                "Respect cultural values",
                "Separate medical from moral issues",
                "Find acceptable solutions",
            ),
        )
