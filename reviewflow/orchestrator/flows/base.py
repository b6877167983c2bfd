"""
ReviewFlow - Flow definition types.

A flow is pure data: three ordered step lists and an analyzer. Adding a
flow type means adding a ``FlowDefinition``, never touching the engine.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from ...exceptions import ConfigurationError
from ...models import ArtifactKey, Severity
from ..context import Analysis, OrchestrationContext

InputPreparer = Callable[[OrchestrationContext], dict[str, Any]]
Condition = Callable[[OrchestrationContext], bool]
DecisionAnalyzer = Callable[[OrchestrationContext], Analysis]


@dataclass(frozen=True)
class PlanStep:
    """
    One declared step. Exactly one of ``agent_id`` or ``skill_name`` is set.

    Attributes:
        id: Step id, unique within its flow.
        name: Display name.
        artifact_key: Where the step's output is stored.
        prepare_input: Builds the step input from the current context.
        critical: A failed critical step aborts the run.
        condition: Gate for conditional steps, evaluated after the decision.
    """

    id: str
    name: str
    artifact_key: ArtifactKey
    prepare_input: InputPreparer
    agent_id: Optional[str] = None
    skill_name: Optional[str] = None
    critical: bool = False
    condition: Optional[Condition] = None

    def __post_init__(self) -> None:
        if (self.agent_id is None) == (self.skill_name is None):
            raise ConfigurationError(
                f'Step "{self.id}" must target exactly one of agent_id or skill_name'
            )

    @property
    def is_skill(self) -> bool:
        return self.skill_name is not None

    @property
    def unit_id(self) -> str:
        return self.skill_name if self.skill_name is not None else self.agent_id

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "artifact_key": self.artifact_key.value,
            "critical": self.critical,
        }
        if self.is_skill:
            result["skill_name"] = self.skill_name
        else:
            result["agent_id"] = self.agent_id
        return result


@dataclass(frozen=True)
class FlowDefinition:
    """Immutable workflow descriptor, created once at import time."""

    id: str
    name: str
    version: str
    description: str
    main_sequence: tuple[PlanStep, ...]
    decision_analyzer: DecisionAnalyzer
    conditional_steps: tuple[PlanStep, ...] = ()
    finalization_steps: tuple[PlanStep, ...] = ()

    def __post_init__(self) -> None:
        if not self.main_sequence:
            raise ConfigurationError(f'Flow "{self.id}" has an empty main sequence')
        step_ids = [s.id for s in self.steps]
        if len(set(step_ids)) != len(step_ids):
            raise ConfigurationError(f'Flow "{self.id}" declares duplicate step ids')
        keys = [s.artifact_key for s in self.steps]
        if len(set(keys)) != len(keys):
            raise ConfigurationError(
                f'Flow "{self.id}" declares two steps writing the same artifact key'
            )
        for step in self.conditional_steps:
            if step.condition is None:
                raise ConfigurationError(
                    f'Conditional step "{step.id}" in flow "{self.id}" has no condition'
                )

    @property
    def steps(self) -> tuple[PlanStep, ...]:
        return self.main_sequence + self.conditional_steps + self.finalization_steps

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "main_sequence": [s.to_dict() for s in self.main_sequence],
            "conditional_steps": [s.to_dict() for s in self.conditional_steps],
            "finalization_steps": [s.to_dict() for s in self.finalization_steps],
        }


# ---------------------------------------------------------------------------
# Input helpers shared by flow definitions
# ---------------------------------------------------------------------------


def artifact_items(context: OrchestrationContext, key: ArtifactKey, attr: str) -> list[Any]:
    """Serialized list attribute of an artifact, or ``[]`` when the artifact is absent."""
    artifact = context.artifact(key)
    if artifact is None:
        return []
    return [item.to_dict() for item in getattr(artifact, attr)]


def section_input(context: OrchestrationContext) -> dict[str, Any]:
    section = context.section
    return {
        "sectionContent": section.content,
        "sectionTitle": section.title,
        "sectionId": section.id,
    }


def review_results(context: OrchestrationContext, passing_actions: tuple[str, ...]) -> dict[str, Any]:
    issues = context.artifact(ArtifactKey.REVIEW_ISSUES)
    issues = issues.issues if issues is not None else []
    next_action = context.decision.next_action if context.decision else None
    return {
        "overall_status": "pass" if next_action in passing_actions else "fail",
        "issues": [i.to_dict() for i in issues],
        "critical_count": sum(1 for i in issues if i.severity == Severity.CRITICAL),
        "high_count": sum(1 for i in issues if i.severity == Severity.HIGH),
    }


def agent_activity(context: OrchestrationContext) -> list[dict[str, Any]]:
    return [
        {
            "agent_id": step.agent_id,
            "trace_id": step.trace_id,
            "timestamp": step.completed_at,
            "status": step.status.value,
            "summary": step.output_summary,
        }
        for step in context.steps
    ]


def final_decision(
    context: OrchestrationContext, mapping: dict[str, str], default: str = "needs_revision"
) -> str:
    """Map the branch decision onto an audit final decision."""
    next_action = context.decision.next_action if context.decision else "rejected"
    return mapping.get(next_action, default)
