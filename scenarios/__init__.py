"""
Scenario definitions for the practice simulator.

Each scenario is defined in its own module with the persona profile and
display metadata. The registry is static and ordered.
"""

from __future__ import annotations

from exceptions import ScenarioNotFoundError
from scenarios.base import PersonaProfile, Scenario
from scenarios.clear_coach import ClearCoach
from scenarios.hpv_initial import HpvInitial
from scenarios.religious_objection import ReligiousObjection
from scenarios.research_heavy import ResearchHeavy
from scenarios.sparc_supervisor import SparcSupervisor
from scenarios.vaccine_hesitant import VaccineHesitant

# Registry of all available scenarios, in display order
SCENARIOS: dict[str, Scenario] = {
    scenario.id: scenario
    for scenario in (
        HpvInitial(),
        VaccineHesitant(),
        ReligiousObjection(),
        ResearchHeavy(),
        ClearCoach(),
        SparcSupervisor(),
    )
}

DEFAULT_SCENARIO_ID = "hpv-initial"


def list_scenarios() -> list[Scenario]:
    """Return every scenario in stable display order."""
    return list(SCENARIOS.values())


def get_scenario(scenario_id: str) -> Scenario:
    """
    Look up a scenario by id.

    Raises:
        ScenarioNotFoundError: If no scenario has this id
    """
    try:
        return SCENARIOS[scenario_id]
    except KeyError:
        raise ScenarioNotFoundError(scenario_id) from None


__all__ = [
    "DEFAULT_SCENARIO_ID",
    "PersonaProfile",
    "SCENARIOS",
    "Scenario",
    "get_scenario",
    "list_scenarios",
]
