"""
The Research-Heavy Parent - Dr. Jennifer Martinez

A parent with a biology PhD who challenges every recommendation with studies.
"""

from scenarios.base import PersonaProfile, Scenario


class ResearchHeavy(Scenario):
    """Dr. Jennifer Martinez - Evidence-driven challenger"""

    def __init__(self):
        super().__init__(
            id="research-heavy",
            title="The Research-Heavy Parent",
            description="Parent who has done extensive research and challenges medical recommendations",
            persona=PersonaProfile(
                name="Dr. Jennifer Martinez",
                age=45,
                child_age=11,
                concerns=(
                    "study limitations",
                    "long-term data",
                    "alternative approaches",
                    "risk-benefit analysis",
                ),
                background="PhD in Biology, questions everything",
            ),
            difficulty="Expert",
            duration="25-30 min",
            objectives=(
                "Handle challenging questions",
                "Maintain authority while respecting research",
                "Guide to evidence-based conclusions",
            ),
        )
