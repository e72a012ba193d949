"""
Vaccine Hesitant Parent - Maya Pena

A parent with strong reservations about vaccines in general.
Personality: Guarded, worried about side effects, distrustful of pressure.
"""

from scenarios.base import PersonaProfile, Scenario


class VaccineHesitant(Scenario):
    """Maya Pena - Hesitant parent"""

    def __init__(self):
        super().__init__(
            id="vaccine-hesitant",
            title="Vaccine Hesitant Parent",
            description="Parent with strong reservations about vaccines in general",
            persona=PersonaProfile(
                name="Maya Pena",
                age=38,
                child_age=12,
                concerns=(
                    "side effects",
                    "too many vaccines",
                    "natural immunity",
                    "government trust",
                ),
                background="Previous negative vaccine experience",
            ),
            difficulty="Intermediate",
            duration="15-20 min",
            objectives=(
                "Practice active listening",
                "Address misinformation",
                "Find common ground",
            ),
            voice="maya",
        )
