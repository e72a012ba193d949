"""
Initial HPV Discussion - Anne Palmer

A first-time parent meeting the HPV vaccine recommendation for the first time.
Personality: Curious, cautious, has done some reading online.
"""

from scenarios.base import PersonaProfile, Scenario


class HpvInitial(Scenario):
    """Anne Palmer - First HPV conversation"""

    def __init__(self):
        super().__init__(
            id="hpv-initial",
            title="Initial HPV Discussion",
            description="First-time conversation about HPV vaccination with a concerned parent",
            persona=PersonaProfile(
                name="Anne Palmer",
                age=37,
                child_age=10,
                concerns=("vaccine safety", "necessity at young age", "side effects"),
                background="First-time parent, researched online",
            ),
            difficulty="Beginner",
            duration="10-15 min",
            objectives=(
                "Build rapport",
                "Address safety concerns",
                "Provide clear recommendation",
            ),
            voice="anne",
        )
