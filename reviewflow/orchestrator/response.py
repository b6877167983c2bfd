"""
ReviewFlow - Orchestration request and response types.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from ..exceptions import RequestValidationError
from ..models import AgentMode
from ..section_ids import Section
from ..skills.base import SkillInvocation
from .context import Decision, OrchestrationOptions, Signals, StepExecutionResult


@dataclass
class OrchestrateRequest:
    """Input to ``Orchestrator.orchestrate``."""

    flow_id: str
    document_id: str
    sections: list[Section]
    options: OrchestrationOptions = field(default_factory=OrchestrationOptions)

    def to_dict(self) -> dict[str, Any]:
        return {
            "flow_id": self.flow_id,
            "document_id": self.document_id,
            "sections": [s.to_dict() for s in self.sections],
            "options": self.options.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OrchestrateRequest":
        """
        Build a request from its JSON form.

        Raises:
            RequestValidationError: Required fields are missing or mistyped.
        """
        errors = []
        if not isinstance(data, dict):
            raise RequestValidationError("Request must be a JSON object")
        if not isinstance(data.get("flow_id"), str) or not data.get("flow_id"):
            errors.append("flow_id is required")
        if not isinstance(data.get("document_id"), str) or not data.get("document_id"):
            errors.append("document_id is required")
        sections = data.get("sections")
        if not isinstance(sections, list) or not all(isinstance(s, dict) for s in sections):
            errors.append("sections must be a list of objects")
        options = data.get("options")
        if options is not None and not isinstance(options, dict):
            errors.append("options must be an object")
        if errors:
            raise RequestValidationError("Invalid orchestration request", errors=errors)

        try:
            resolved = OrchestrationOptions.from_dict(options)
        except ValueError as e:
            raise RequestValidationError("Invalid orchestration request", errors=[str(e)]) from e

        return cls(
            flow_id=data["flow_id"],
            document_id=data["document_id"],
            sections=[Section.from_dict(s) for s in sections],
            options=resolved,
        )


@dataclass
class PlanStepState:
    step_id: str
    step_name: str
    agent_id: str
    status: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "step_id": self.step_id,
            "step_name": self.step_name,
            "agent_id": self.agent_id,
            "status": self.status,
        }


@dataclass
class BranchingPoint:
    after_step: str
    condition: str
    branch_taken: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "after_step": self.after_step,
            "condition": self.condition,
            "branch_taken": self.branch_taken,
        }


@dataclass
class ExecutionPlan:
    """The declared flow steps with their resolved statuses."""

    flow_id: str
    flow_name: str
    flow_version: str
    steps: list[PlanStepState] = field(default_factory=list)
    branching_points: list[BranchingPoint] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "flow_id": self.flow_id,
            "flow_name": self.flow_name,
            "flow_version": self.flow_version,
            "steps": [s.to_dict() for s in self.steps],
            "branching_points": [b.to_dict() for b in self.branching_points],
        }


@dataclass
class ExecutionLog:
    steps: list[StepExecutionResult] = field(default_factory=list)
    total_latency_ms: int = 0
    total_tokens: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "steps": [s.to_dict() for s in self.steps],
            "total_latency_ms": self.total_latency_ms,
            "total_tokens": self.total_tokens,
            "errors": self.errors,
        }


@dataclass
class RunMetadata:
    orchestrator_version: str
    timestamp: str
    document_id: str
    sections_processed: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "orchestrator_version": self.orchestrator_version,
            "timestamp": self.timestamp,
            "document_id": self.document_id,
            "sections_processed": self.sections_processed,
        }


@dataclass
class OrchestrateResponse:
    """
    Result of one orchestration run.

    ``artifacts`` holds the serialized artifacts keyed by artifact key.
    On failure ``ok`` is False, ``error`` carries the message and the
    decision is a synthetic rejection with zero confidence.
    """

    ok: bool
    parent_trace_id: str
    mode: AgentMode
    plan: ExecutionPlan
    execution: ExecutionLog
    artifacts: dict[str, Any]
    decision: Decision
    signals: Signals
    metadata: RunMetadata
    skill_invocations: list[SkillInvocation] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "ok": self.ok,
            "parent_trace_id": self.parent_trace_id,
            "mode": self.mode.value,
            "plan": self.plan.to_dict(),
            "execution": self.execution.to_dict(),
            "artifacts": self.artifacts,
            "decision": self.decision.to_dict(),
            "signals": self.signals.to_dict(),
            "metadata": self.metadata.to_dict(),
            "skill_invocations": [i.to_dict() for i in self.skill_invocations],
        }
        if self.error is not None:
            result["error"] = self.error
        return result
