"""
Unit tests for the orchestration engine, flows and decision analyzers.
"""

import dataclasses
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from reviewflow.agents import AgentRunner
from reviewflow.config import SkillTransportConfig
from reviewflow.exceptions import ConfigurationError, RequestValidationError
from reviewflow.models import (
    AgentMode,
    ArtifactKey,
    EvidenceAnchor,
    Fact,
    FactCategory,
    IssueType,
    PolicyMapping,
    PolicyMappingsArtifact,
    RedTeamIssue,
    ReviewIssuesArtifact,
    RiskLevel,
    RiskTriageArtifact,
    Severity,
    StepStatus,
)
from reviewflow.orchestrator import (
    FLOW_REGISTRY,
    FlowDefinition,
    OrchestrateRequest,
    OrchestrationContext,
    OrchestrationObserver,
    OrchestrationOptions,
    Orchestrator,
    PlanStep,
    RecordingObserver,
    StepExecutionResult,
    analyze_compliance,
    analyze_contract_risk,
    analyze_kyc_triage,
    get_flow,
    summarize_input,
    summarize_output,
)
from reviewflow.policy import INFORMATIONAL_RULE
from reviewflow.section_ids import Section
from reviewflow.skills import SkillDispatcher

CLEAN = "Our quarterly newsletter summarises market commentary for the client."
TOBACCO = "We recommend increasing exposure to the tobacco industry."
NO_RISK_DISCLOSURE = "We invest client funds in a diversified portfolio."
UNLIMITED = "The Supplier accepts unlimited liability for any and all claims. This agreement is signed by both parties."
KYC = (
    "Client name is John Smith, passport number X123, nationality British.\n\n"
    "Source of wealth is salary income from employment at a bank."
)


class FailingRunner(AgentRunner):
    """Agent runner whose named agent raises."""

    def __init__(self, failing: str):
        super().__init__()
        self.failing = failing

    async def run(self, agent_id, input, mode=AgentMode.FAKE):
        if agent_id == self.failing:
            raise RuntimeError("agent crashed")
        return await super().run(agent_id, input, mode)


class BrokenObserver(OrchestrationObserver):
    """Observer that raises on every event."""

    def on_event(self, event, data):
        raise RuntimeError("observer down")


def make_request(content: str, flow_id: str = "compliance-review-v1", **options) -> OrchestrateRequest:
    return OrchestrateRequest(
        flow_id=flow_id,
        document_id="DOC-1",
        sections=[Section("section-1", "Overview", content)],
        options=OrchestrationOptions(**options),
    )


def make_orchestrator(**kwargs) -> tuple[Orchestrator, RecordingObserver]:
    observer = RecordingObserver()
    return Orchestrator(observer=observer, **kwargs), observer


def plan_statuses(response) -> dict[str, str]:
    return {s.step_id: s.status for s in response.plan.steps}


def make_context(**kwargs) -> OrchestrationContext:
    return OrchestrationContext(
        parent_trace_id="orch_1_abc",
        document_id="DOC-1",
        sections=(Section("section-1", "Overview", "text"),),
        options=OrchestrationOptions(),
        **kwargs,
    )


def make_issue(type: IssueType, severity: Severity, n: int = 1) -> RedTeamIssue:
    return RedTeamIssue(
        id=f"RT-{n}",
        type=type,
        severity=severity,
        description=f"{type.value} issue",
        suggested_fix="fix it",
        source=EvidenceAnchor(snippet="x"),
    )


def issues_artifact(*issues: RedTeamIssue) -> dict:
    return {ArtifactKey.REVIEW_ISSUES: ReviewIssuesArtifact(issues=list(issues))}


def mapping(risk_level: RiskLevel) -> PolicyMapping:
    return PolicyMapping(
        fact=Fact(FactCategory.OTHER, "clause", 0.75, EvidenceAnchor(snippet="clause")),
        policy_rules=[],
        risk_level=risk_level,
        reason="test",
        policy_rule=INFORMATIONAL_RULE,
    )


class TestComplianceFlow:
    """End-to-end tests for the compliance review flow."""

    @pytest.mark.asyncio
    async def test_clean_section_is_ready_to_send(self):
        orchestrator, observer = make_orchestrator()
        response = await orchestrator.orchestrate(make_request(CLEAN))

        assert response.ok is True
        assert response.parent_trace_id.startswith("orch_")
        assert response.decision.next_action == "ready_to_send"
        assert response.decision.confidence == 0.95
        assert response.signals.branch_triggers == ("all_checks_passed",)
        assert plan_statuses(response) == {
            "extract-facts": "completed",
            "map-policy": "completed",
            "redteam-review": "completed",
            "request-evidence": "skipped",
            "draft-comms": "completed",
            "write-audit": "completed",
        }
        assert [s.step_id for s in response.execution.steps] == [
            "extract-facts",
            "map-policy",
            "redteam-review",
            "draft-comms",
            "write-audit",
        ]
        assert response.artifacts["audit_log"]["final_decision"] == "approved"
        assert response.metadata.sections_processed == 1
        assert observer.names() == [
            "orchestration_started",
            "step_started",
            "step_completed",
            "step_started",
            "step_completed",
            "step_started",
            "step_completed",
            "branching_decision",
            "step_started",
            "step_completed",
            "step_started",
            "step_completed",
            "orchestration_completed",
        ]

    @pytest.mark.asyncio
    async def test_prohibited_industry_is_rejected(self):
        orchestrator, _ = make_orchestrator()
        response = await orchestrator.orchestrate(make_request(TOBACCO))

        assert response.decision.next_action == "rejected"
        assert response.decision.confidence == 1.0
        assert response.signals.critical_count == 2
        assert response.signals.flagged_policy_count == 1
        assert "Prohibited industry reference detected: tobacco industry" in response.decision.blocking_issues
        assert plan_statuses(response)["request-evidence"] == "skipped"
        assert response.plan.branching_points[0].after_step == "redteam-review"
        assert response.plan.branching_points[0].condition == "critical_issues_detected"
        assert response.artifacts["audit_log"]["final_decision"] == "rejected"

    @pytest.mark.asyncio
    async def test_high_issue_requests_evidence(self):
        orchestrator, _ = make_orchestrator()
        response = await orchestrator.orchestrate(make_request(NO_RISK_DISCLOSURE))

        assert response.decision.next_action == "request_more_info"
        assert response.decision.confidence == 0.8
        assert plan_statuses(response)["request-evidence"] == "completed"
        assert response.signals.evidence_requests_count == 1
        assert response.artifacts["evidence_requests"]["requests"][0]["id"] == "EVR-0001"
        assert response.artifacts["audit_log"]["final_decision"] == "pending_evidence"

    @pytest.mark.asyncio
    async def test_options_reach_communication(self):
        orchestrator, _ = make_orchestrator()
        response = await orchestrator.orchestrate(make_request(CLEAN, client_name="Ms. Rivera"))
        assert "Ms. Rivera" in response.artifacts["client_communication"]["body"]

    @pytest.mark.asyncio
    async def test_skip_steps(self):
        orchestrator, observer = make_orchestrator()
        response = await orchestrator.orchestrate(make_request(CLEAN, skip_steps=("draft-comms",)))

        assert response.ok is True
        assert plan_statuses(response)["draft-comms"] == "skipped"
        assert "client_communication" not in response.artifacts
        skipped = observer.of("step_skipped")
        assert skipped[0]["step_id"] == "draft-comms"
        assert skipped[0]["reason"] == "In skip_steps list"


class TestContractFlow:
    """End-to-end tests for the contract risk review flow."""

    @pytest.mark.asyncio
    async def test_unlimited_liability_escalates(self):
        orchestrator, _ = make_orchestrator()
        response = await orchestrator.orchestrate(make_request(UNLIMITED, "contract-risk-review-v1"))

        assert response.ok is True
        assert response.plan.flow_name == "Contract Risk Review Workflow"
        assert response.decision.next_action == "escalate_legal"
        assert "Unlimited liability clause detected" in response.decision.blocking_issues
        assert plan_statuses(response)["request-contract-evidence"] == "completed"
        requests = response.artifacts["evidence_requests"]["requests"]
        assert any(r["required_from"] == "Legal Counsel" for r in requests)
        assert response.artifacts["audit_log"]["final_decision"] == "escalated"


class TestKycFlow:
    """End-to-end tests for the KYC triage flow."""

    @pytest.mark.asyncio
    async def test_local_skills_route_to_crosscheck(self):
        orchestrator, _ = make_orchestrator()
        response = await orchestrator.orchestrate(make_request(KYC, "kyc-triage-v1"))

        assert response.ok is True
        assert response.artifacts["risk_triage"]["riskScore"] == 46
        assert response.decision.next_action == "request_more_info"
        assert response.decision.blocking_issues == (
            "Missing critical topic: beneficial_ownership",
            "Missing critical topic: sanctions_pep",
        )
        assert response.signals.high_count == 2
        assert response.signals.medium_count == 2
        assert plan_statuses(response)["request-kyc-evidence"] == "completed"
        assert response.signals.evidence_requests_count == 4
        assert [i.skill_name for i in response.skill_invocations] == [
            "kyc.topic_assemble",
            "risk.triage",
        ]
        assert all(i.correlation_id == response.parent_trace_id for i in response.skill_invocations)

    @pytest.mark.asyncio
    async def test_degraded_remote_skills_force_manual_review(self):
        dispatcher = SkillDispatcher(SkillTransportConfig(enable_remote_skills=True))
        orchestrator, _ = make_orchestrator(dispatcher=dispatcher)
        mock = AsyncMock(side_effect=httpx.ConnectError("refused"))
        with patch("httpx.AsyncClient.request", new=mock):
            response = await orchestrator.orchestrate(
                make_request(KYC, "kyc-triage-v1", remote_skills=True)
            )

        assert response.ok is True
        assert response.decision.next_action == "manual_review"
        assert response.signals.branch_triggers == ("kyc_triage_degraded",)
        assert plan_statuses(response)["request-kyc-evidence"] == "skipped"
        assert len(response.skill_invocations) == 2
        assert all(not i.ok for i in response.skill_invocations)
        assert response.artifacts["audit_log"]["final_decision"] == "needs_revision"

    @pytest.mark.asyncio
    async def test_kill_switch_keeps_skills_local(self):
        orchestrator, _ = make_orchestrator()
        response = await orchestrator.orchestrate(make_request(KYC, "kyc-triage-v1", remote_skills=True))
        assert all(i.transport.value == "local" for i in response.skill_invocations)
        assert response.decision.next_action == "request_more_info"


class TestOrchestrationFailures:
    """Tests for failure responses."""

    @pytest.mark.asyncio
    async def test_unknown_flow(self):
        orchestrator, observer = make_orchestrator()
        response = await orchestrator.orchestrate(make_request(CLEAN, "nope"))

        assert response.ok is False
        assert response.error.startswith('Flow "nope" not found')
        assert response.decision.next_action == "rejected"
        assert response.decision.confidence == 0
        assert response.plan.flow_name == "Error"
        assert observer.names() == ["orchestration_started", "orchestration_error"]

    @pytest.mark.asyncio
    async def test_multiple_sections_rejected(self):
        request = make_request(CLEAN)
        request.sections.append(Section("section-2", "Extra", "more"))
        response = await Orchestrator(observer=RecordingObserver()).orchestrate(request)

        assert response.ok is False
        assert "exactly 1 section, got 2" in response.error
        assert response.metadata.sections_processed == 0

    @pytest.mark.asyncio
    async def test_critical_step_failure_keeps_partial_results(self):
        orchestrator, observer = make_orchestrator(runner=FailingRunner("map-policy-agent"))
        response = await orchestrator.orchestrate(make_request(CLEAN))

        assert response.ok is False
        assert response.error == 'Critical step "map-policy" failed: agent crashed'
        assert [s.step_id for s in response.execution.steps] == ["extract-facts", "map-policy"]
        assert response.execution.steps[1].status == StepStatus.ERROR
        assert response.execution.errors == ["agent crashed", response.error]
        assert "facts" in response.artifacts
        assert observer.of("step_error")[0]["error"] == "agent crashed"

    @pytest.mark.asyncio
    async def test_finalization_failure_is_not_fatal(self):
        orchestrator, _ = make_orchestrator(runner=FailingRunner("draft-client-comms-agent"))
        response = await orchestrator.orchestrate(make_request(CLEAN))

        assert response.ok is True
        assert plan_statuses(response)["draft-comms"] == "failed"
        assert plan_statuses(response)["write-audit"] == "completed"
        assert response.execution.errors == ["agent crashed"]

    @pytest.mark.asyncio
    async def test_real_mode_fails_on_unimplemented_agent(self):
        orchestrator, _ = make_orchestrator()
        response = await orchestrator.orchestrate(make_request(CLEAN, mode=AgentMode.REAL))
        assert response.ok is False
        assert "Real extract-facts not implemented yet." in response.error
        assert response.mode == AgentMode.REAL

    @pytest.mark.asyncio
    async def test_unknown_agent_in_custom_flow(self):
        flow = FlowDefinition(
            id="ghost-v1",
            name="Ghost",
            version="0.1.0",
            description="",
            main_sequence=(
                PlanStep(
                    id="ghost",
                    name="Ghost",
                    agent_id="ghost-agent",
                    artifact_key=ArtifactKey.FACTS,
                    critical=True,
                    prepare_input=lambda ctx: {},
                ),
            ),
            decision_analyzer=analyze_compliance,
        )
        orchestrator, _ = make_orchestrator(flows={flow.id: flow})
        response = await orchestrator.orchestrate(make_request(CLEAN, "ghost-v1"))
        assert response.ok is False
        assert response.error == 'Critical step "ghost" failed: Agent not found in registry'

    @pytest.mark.asyncio
    async def test_failure_response_serializes(self):
        response = await Orchestrator(observer=RecordingObserver()).orchestrate(make_request(CLEAN, "nope"))
        data = response.to_dict()
        assert data["ok"] is False
        assert data["decision"]["recommended_actions"] == ["Fix errors and retry"]
        assert data["execution"]["errors"] == [response.error]


class TestConditionalStepFailures:
    """Tests for failures in conditional steps."""

    @staticmethod
    def _flow(critical: bool) -> FlowDefinition:
        flow = FLOW_REGISTRY["compliance-review-v1"]
        step = dataclasses.replace(flow.conditional_steps[0], critical=critical, condition=lambda ctx: True)
        return dataclasses.replace(flow, conditional_steps=(step,))

    @pytest.mark.asyncio
    async def test_critical_conditional_failure_aborts(self):
        flow = self._flow(critical=True)
        orchestrator, _ = make_orchestrator(
            runner=FailingRunner("request-evidence-agent"), flows={flow.id: flow}
        )
        response = await orchestrator.orchestrate(make_request(CLEAN))

        assert response.ok is False
        assert response.error == 'Critical conditional step "request-evidence" failed: agent crashed'
        assert [s.step_id for s in response.execution.steps] == [
            "extract-facts",
            "map-policy",
            "redteam-review",
            "request-evidence",
        ]
        assert plan_statuses(response)["draft-comms"] == "pending"
        assert plan_statuses(response)["write-audit"] == "pending"

    @pytest.mark.asyncio
    async def test_non_critical_conditional_failure_continues(self):
        flow = self._flow(critical=False)
        orchestrator, _ = make_orchestrator(
            runner=FailingRunner("request-evidence-agent"), flows={flow.id: flow}
        )
        response = await orchestrator.orchestrate(make_request(CLEAN))

        assert response.ok is True
        assert plan_statuses(response)["request-evidence"] == "failed"
        assert plan_statuses(response)["draft-comms"] == "completed"
        assert plan_statuses(response)["write-audit"] == "completed"
        assert response.execution.errors == ["agent crashed"]
        assert "evidence_requests" not in response.artifacts


class TestObserverFailures:
    """Tests that a failing observer never affects the run."""

    @pytest.mark.asyncio
    async def test_run_completes(self):
        response = await Orchestrator(observer=BrokenObserver()).orchestrate(make_request(CLEAN))

        assert response.ok is True
        assert response.decision.next_action == "ready_to_send"
        assert plan_statuses(response)["write-audit"] == "completed"

    @pytest.mark.asyncio
    async def test_failure_response_still_returned(self):
        response = await Orchestrator(observer=BrokenObserver()).orchestrate(make_request(CLEAN, "nope"))
        assert response.ok is False
        assert response.error.startswith('Flow "nope" not found')


class TestDeterminism:
    """Repeated runs with identical input give identical decisions."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "flow_id, content",
        [
            ("compliance-review-v1", TOBACCO),
            ("compliance-review-v1", NO_RISK_DISCLOSURE),
            ("contract-risk-review-v1", UNLIMITED),
            ("kyc-triage-v1", KYC),
        ],
    )
    async def test_decision_is_stable(self, flow_id, content):
        orchestrator = Orchestrator(
            dispatcher=SkillDispatcher(SkillTransportConfig()), observer=RecordingObserver()
        )
        first = await orchestrator.orchestrate(make_request(content, flow_id))
        second = await orchestrator.orchestrate(make_request(content, flow_id))

        assert first.ok is True
        assert first.decision.to_dict() == second.decision.to_dict()
        assert first.signals.branch_triggers == second.signals.branch_triggers


class TestFlowDefinitions:
    """Tests for flow registry and definition validation."""

    def test_registry(self):
        assert set(FLOW_REGISTRY) == {"compliance-review-v1", "contract-risk-review-v1", "kyc-triage-v1"}
        assert get_flow("kyc-triage-v1").main_sequence[0].is_skill

    def test_unknown_flow(self):
        with pytest.raises(ConfigurationError, match="Available: "):
            get_flow("nope")

    def _step(self, id: str = "a", key: ArtifactKey = ArtifactKey.FACTS, **kwargs) -> PlanStep:
        return PlanStep(id=id, name=id, artifact_key=key, prepare_input=lambda ctx: {}, agent_id="x", **kwargs)

    def test_step_needs_exactly_one_target(self):
        with pytest.raises(ConfigurationError, match="exactly one of"):
            PlanStep(id="a", name="a", artifact_key=ArtifactKey.FACTS, prepare_input=lambda ctx: {})
        with pytest.raises(ConfigurationError, match="exactly one of"):
            PlanStep(
                id="a",
                name="a",
                artifact_key=ArtifactKey.FACTS,
                prepare_input=lambda ctx: {},
                agent_id="x",
                skill_name="y",
            )

    def test_empty_main_sequence(self):
        with pytest.raises(ConfigurationError, match="empty main sequence"):
            FlowDefinition("f", "F", "1", "", (), analyze_compliance)

    def test_duplicate_step_ids(self):
        with pytest.raises(ConfigurationError, match="duplicate step ids"):
            FlowDefinition(
                "f", "F", "1", "", (self._step("a"), self._step("a", ArtifactKey.AUDIT_LOG)), analyze_compliance
            )

    def test_duplicate_artifact_keys(self):
        with pytest.raises(ConfigurationError, match="same artifact key"):
            FlowDefinition("f", "F", "1", "", (self._step("a"), self._step("b")), analyze_compliance)

    def test_conditional_step_needs_condition(self):
        with pytest.raises(ConfigurationError, match="has no condition"):
            FlowDefinition(
                "f",
                "F",
                "1",
                "",
                (self._step("a"),),
                analyze_compliance,
                conditional_steps=(self._step("b", ArtifactKey.AUDIT_LOG),),
            )

    def test_to_dict(self):
        data = get_flow("kyc-triage-v1").to_dict()
        assert data["main_sequence"][0]["skill_name"] == "kyc.topic_assemble"
        assert data["conditional_steps"][0]["agent_id"] == "request-evidence-agent"


class TestAnalyzers:
    """Tests for the decision analyzers on hand-built contexts."""

    def test_compliance_medium(self):
        context = make_context(artifacts=issues_artifact(make_issue(IssueType.MISSING_INFO, Severity.MEDIUM)))
        analysis = analyze_compliance(context)
        assert analysis.decision.next_action == "request_more_info"
        assert analysis.decision.confidence == 0.7
        assert analysis.signals.branch_triggers == ("medium_issues_need_attention",)

    def test_compliance_low_is_advisory(self):
        context = make_context(artifacts=issues_artifact(make_issue(IssueType.TONE, Severity.LOW)))
        analysis = analyze_compliance(context)
        assert analysis.decision.next_action == "ready_to_send"
        assert analysis.decision.confidence == 0.85
        assert analysis.signals.low_count == 1

    def test_compliance_high_policy_mapping(self):
        artifacts = {ArtifactKey.POLICY_MAPPINGS: PolicyMappingsArtifact(mappings=[mapping(RiskLevel.HIGH)])}
        analysis = analyze_compliance(make_context(artifacts=artifacts))
        assert analysis.decision.next_action == "request_more_info"
        assert analysis.decision.confidence == 0.8

    def test_contract_missing_signature_escalates(self):
        context = make_context(artifacts=issues_artifact(make_issue(IssueType.MISSING_SIGNATURE, Severity.HIGH)))
        assert analyze_contract_risk(context).decision.next_action == "escalate_legal"

    def test_contract_high_exposure_negotiates(self):
        context = make_context(artifacts=issues_artifact(make_issue(IssueType.FINANCIAL_EXPOSURE, Severity.HIGH)))
        analysis = analyze_contract_risk(context)
        assert analysis.decision.next_action == "negotiate_terms"
        assert analysis.decision.blocking_issues == ("financial_exposure issue",)

    def test_contract_non_standard_terms_limit(self):
        two = {ArtifactKey.POLICY_MAPPINGS: PolicyMappingsArtifact(mappings=[mapping(RiskLevel.NON_STANDARD)] * 2)}
        three = {ArtifactKey.POLICY_MAPPINGS: PolicyMappingsArtifact(mappings=[mapping(RiskLevel.NON_STANDARD)] * 3)}
        assert analyze_contract_risk(make_context(artifacts=two)).decision.next_action == "ready_to_sign"
        assert analyze_contract_risk(make_context(artifacts=three)).decision.next_action == "negotiate_terms"

    def test_contract_minor_risk_is_acceptable(self):
        context = make_context(artifacts=issues_artifact(make_issue(IssueType.JURISDICTION_ISSUE, Severity.LOW)))
        analysis = analyze_contract_risk(context)
        assert analysis.decision.next_action == "acceptable_risk"
        assert analysis.signals.branch_triggers == ("acceptable_contract_risk",)

    def test_kyc_routes(self):
        expected = {
            "fast": "ready_to_send",
            "crosscheck": "request_more_info",
            "escalate": "escalate_compliance",
            "human_gate": "human_review_required",
        }
        for route, action in expected.items():
            artifacts = {ArtifactKey.RISK_TRIAGE: RiskTriageArtifact(risk_score=10, route_path=route)}
            analysis = analyze_kyc_triage(make_context(artifacts=artifacts))
            assert analysis.decision.next_action == action
        assert analysis.signals.critical_count == 1

    def test_kyc_without_triage_is_manual_review(self):
        analysis = analyze_kyc_triage(make_context())
        assert analysis.decision.next_action == "manual_review"
        assert analysis.decision.confidence == 0.5


class TestContextAndHelpers:
    """Tests for context immutability, requests and summaries."""

    def _result(self, ok: bool = True, error=None) -> StepExecutionResult:
        return StepExecutionResult(
            step_id="s",
            agent_id="a",
            trace_id="t",
            status=StepStatus.SUCCESS if ok else StepStatus.ERROR,
            latency_ms=1,
            tokens=0,
            started_at="",
            completed_at="",
            input_summary="",
            output_summary="",
            ok=ok,
            error=error,
        )

    def test_with_step_returns_new_context(self):
        context = make_context()
        updated = context.with_step(self._result(ok=False, error="boom"))
        assert context.steps == ()
        assert context.errors == ()
        assert updated.errors == ("boom",)
        assert updated.executed("s") is not None

    def test_context_is_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            make_context().document_id = "other"

    def test_request_from_dict(self):
        request = OrchestrateRequest.from_dict(
            {
                "flow_id": "compliance-review-v1",
                "document_id": "DOC-9",
                "sections": [{"id": "section-1", "title": "A", "content": "b"}],
                "options": {"mode": "fake", "tone": "friendly", "skip_steps": ["draft-comms"]},
            }
        )
        assert request.options.tone == "friendly"
        assert request.options.language == "english"
        assert request.options.skip_steps == ("draft-comms",)
        assert request.sections[0].id == "section-1"

    def test_request_from_dict_errors(self):
        with pytest.raises(RequestValidationError) as exc_info:
            OrchestrateRequest.from_dict({"sections": "nope"})
        assert exc_info.value.errors == [
            "flow_id is required",
            "document_id is required",
            "sections must be a list of objects",
        ]

    def test_request_invalid_mode(self):
        with pytest.raises(RequestValidationError):
            OrchestrateRequest.from_dict(
                {"flow_id": "f", "document_id": "d", "sections": [], "options": {"mode": "turbo"}}
            )

    def test_summarize_input(self):
        assert summarize_input({"a": 1}) == '{"a":1}'
        assert summarize_input("x" * 150) == "x" * 100 + "..."

    def test_summarize_output(self):
        assert summarize_output(None) == "No output"
        assert summarize_output({"facts": [1, 2]}) == "Extracted 2 facts"
        assert summarize_output({"riskScore": 46, "routePath": "crosscheck"}) == "Risk score 46 (crosscheck)"
        assert summarize_output({"topicSections": []}) == "Assembled 0 topic sections"
        assert summarize_output("text") == "Output generated"
