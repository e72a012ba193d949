"""
C-LEAR Coach

An agent persona that reviews individual trainee responses against the
C-LEAR framework (Counsel, Listen, Empathize, Acknowledge/Answer, Restate).
"""

from scenarios.base import PersonaProfile, Scenario


class ClearCoach(Scenario):
    """C-LEAR Coach - Per-response feedback"""

    def __init__(self):
        super().__init__(
            id="clear-coach",
            title="C-LEAR Coach",
            description="Get coaching on individual responses using the C-LEAR framework",
            persona=PersonaProfile(
                name="C-LEAR Coach",
                age=0,
                background="Communication skills coach",
            ),
            difficulty="Beginner",
            duration="5-10 min",
            objectives=("Apply each C-LEAR component", "Refine individual responses"),
        )
