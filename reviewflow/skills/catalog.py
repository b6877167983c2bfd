"""
ReviewFlow - Skill catalog.
"""

from typing import Iterable, Optional

from .base import SkillDef

TOPIC_ASSEMBLE = "kyc.topic_assemble"
RISK_TRIAGE = "risk.triage"

DEFAULT_SKILLS = [
    SkillDef(
        name=TOPIC_ASSEMBLE,
        description=(
            "Organizes uploaded documents into KYC topic sections (client_identity, "
            "source_of_wealth, beneficial_ownership, etc.)"
        ),
        owner_agent="Topic Assembler",
        version="1.0.0",
        tags=("kyc", "structuring", "fast"),
        input_schema_summary="documents: list of {name, content}",
        output_schema_summary="topicSections: list of {topicId, content, evidenceRefs, coverage}",
    ),
    SkillDef(
        name=RISK_TRIAGE,
        description=(
            "Scores KYC documents for risk level and routes to appropriate review path "
            "(fast/crosscheck/escalate/human_gate)"
        ),
        owner_agent="Risk Triage",
        version="1.0.0",
        tags=("risk", "routing", "decision"),
        input_schema_summary="topicSections: list of {topicId, content, coverage}",
        output_schema_summary="{riskScore, routePath, triageReasons, riskBreakdown}",
    ),
]


class SkillCatalog:
    """Skills available to the dispatcher, keyed by name."""

    def __init__(self, skills: Optional[Iterable[SkillDef]] = None):
        self._skills = {s.name: s for s in (DEFAULT_SKILLS if skills is None else skills)}

    def get(self, name: str) -> Optional[SkillDef]:
        return self._skills.get(name)

    def list(self) -> list[SkillDef]:
        return list(self._skills.values())

    def owner_of(self, name: str) -> str:
        skill = self._skills.get(name)
        return skill.owner_agent if skill else "Unknown"

    def __contains__(self, name: str) -> bool:
        return name in self._skills
