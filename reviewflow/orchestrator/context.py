"""
ReviewFlow - Run-scoped orchestration state.

``OrchestrationContext`` is an immutable value. The engine folds each step
result into a new context with ``with_step`` and the analyzer outcome with
``with_decision``; nothing else ever produces a successor. A context is
owned by exactly one ``Orchestrator.orchestrate`` call.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Optional

from ..models import AgentMode, Artifact, ArtifactKey, StepStatus
from ..section_ids import Section
from ..skills.base import SkillInvocation

DEFAULT_LANGUAGE = "english"
DEFAULT_TONE = "formal"
DEFAULT_CLIENT_NAME = "Valued Client"
DEFAULT_REVIEWER = "Automated Compliance System"


@dataclass(frozen=True)
class OrchestrationOptions:
    """Resolved per-run options. Missing request values take the defaults."""

    language: str = DEFAULT_LANGUAGE
    tone: str = DEFAULT_TONE
    client_name: str = DEFAULT_CLIENT_NAME
    reviewer: str = DEFAULT_REVIEWER
    mode: AgentMode = AgentMode.FAKE
    skip_steps: tuple[str, ...] = ()
    remote_skills: bool = False

    @property
    def skill_features(self) -> dict[str, Any]:
        return {"remote_skills": self.remote_skills}

    def to_dict(self) -> dict[str, Any]:
        return {
            "language": self.language,
            "tone": self.tone,
            "client_name": self.client_name,
            "reviewer": self.reviewer,
            "mode": self.mode.value,
            "skip_steps": list(self.skip_steps),
            "remote_skills": self.remote_skills,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "OrchestrationOptions":
        data = data or {}
        return cls(
            language=data.get("language") or DEFAULT_LANGUAGE,
            tone=data.get("tone") or DEFAULT_TONE,
            client_name=data.get("client_name") or DEFAULT_CLIENT_NAME,
            reviewer=data.get("reviewer") or DEFAULT_REVIEWER,
            mode=AgentMode(data.get("mode") or AgentMode.FAKE.value),
            skip_steps=tuple(data.get("skip_steps") or ()),
            remote_skills=bool(data.get("remote_skills", False)),
        )


@dataclass(frozen=True)
class Signals:
    """Aggregated severity counts and the branch triggers that fired."""

    critical_count: int = 0
    high_count: int = 0
    medium_count: int = 0
    low_count: int = 0
    flagged_policy_count: int = 0
    evidence_requests_count: int = 0
    branch_triggers: tuple[str, ...] = ()

    def with_trigger(self, trigger: str, **counts: int) -> "Signals":
        return replace(self, branch_triggers=self.branch_triggers + (trigger,), **counts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "critical_count": self.critical_count,
            "high_count": self.high_count,
            "medium_count": self.medium_count,
            "low_count": self.low_count,
            "flagged_policy_count": self.flagged_policy_count,
            "evidence_requests_count": self.evidence_requests_count,
            "branch_triggers": list(self.branch_triggers),
        }


@dataclass(frozen=True)
class Decision:
    """Branch decision produced by a flow's decision analyzer."""

    next_action: str
    reason: str
    confidence: float
    recommended_actions: tuple[str, ...] = ()
    blocking_issues: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "next_action": self.next_action,
            "reason": self.reason,
            "confidence": self.confidence,
            "recommended_actions": list(self.recommended_actions),
            "blocking_issues": list(self.blocking_issues),
        }


@dataclass(frozen=True)
class Analysis:
    """What an analyzer returns: the decision and the signals it implies."""

    decision: Decision
    signals: Signals


@dataclass(frozen=True)
class StepExecutionResult:
    """Outcome of one executed step. ``agent_id`` is the agent or skill name."""

    step_id: str
    agent_id: str
    trace_id: str
    status: StepStatus
    latency_ms: int
    tokens: int
    started_at: str
    completed_at: str
    input_summary: str
    output_summary: str
    ok: bool
    output: Optional[Any] = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "step_id": self.step_id,
            "agent_id": self.agent_id,
            "trace_id": self.trace_id,
            "status": self.status.value,
            "latency_ms": self.latency_ms,
            "tokens": self.tokens,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "input_summary": self.input_summary,
            "output_summary": self.output_summary,
            "ok": self.ok,
        }
        if self.output is not None:
            result["output"] = self.output
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass(frozen=True)
class OrchestrationContext:
    """Immutable snapshot of one orchestration run."""

    parent_trace_id: str
    document_id: str
    sections: tuple[Section, ...]
    options: OrchestrationOptions
    artifacts: dict[ArtifactKey, Artifact] = field(default_factory=dict)
    steps: tuple[StepExecutionResult, ...] = ()
    errors: tuple[str, ...] = ()
    signals: Signals = field(default_factory=Signals)
    decision: Optional[Decision] = None
    skill_invocations: tuple[SkillInvocation, ...] = ()

    @property
    def section(self) -> Section:
        """The section under review (runs carry exactly one)."""
        return self.sections[0]

    def artifact(self, key: ArtifactKey) -> Optional[Artifact]:
        return self.artifacts.get(ArtifactKey(key))

    def executed(self, step_id: str) -> Optional[StepExecutionResult]:
        for result in self.steps:
            if result.step_id == step_id:
                return result
        return None

    def with_step(
        self,
        result: StepExecutionResult,
        artifact: Optional[Artifact] = None,
        invocations: tuple[SkillInvocation, ...] = (),
    ) -> "OrchestrationContext":
        """Append a step result, storing its artifact on success and its error on failure."""
        artifacts = self.artifacts
        if artifact is not None:
            artifacts = {**self.artifacts, artifact.key: artifact}
        errors = self.errors
        if not result.ok:
            errors = errors + (result.error or "Unknown error",)
        return replace(
            self,
            artifacts=artifacts,
            steps=self.steps + (result,),
            errors=errors,
            skill_invocations=self.skill_invocations + tuple(invocations),
        )

    def with_decision(self, analysis: Analysis) -> "OrchestrationContext":
        return replace(self, decision=analysis.decision, signals=analysis.signals)

    def with_signals(self, **changes: Any) -> "OrchestrationContext":
        return replace(self, signals=replace(self.signals, **changes))
