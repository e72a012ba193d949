"""
SPARC-P Supervisor

An agent persona that plays a clinical supervisor debriefing the trainee.
"""

from scenarios.base import PersonaProfile, Scenario


class SparcSupervisor(Scenario):
    """SPARC-P Supervisor - Debrief and guidance"""

    def __init__(self):
        super().__init__(
            id="sparc-supervisor",
            title="SPARC-P Supervisor",
            description="Review your approach with a supervisor who gives structured guidance",
            persona=PersonaProfile(
                name="SPARC-P Supervisor",
                age=0,
                background="Clinical communication supervisor",
            ),
            difficulty="Intermediate",
            duration="10-15 min",
            objectives=("Reflect on conversation strategy", "Plan next steps"),
        )
