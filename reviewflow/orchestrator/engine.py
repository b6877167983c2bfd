"""
ReviewFlow - Orchestration engine.

Plan -> execute -> branch -> finalize:

1. Resolve the flow and validate the request (exactly one section).
2. Run the main sequence in order. A failed critical step aborts the run.
3. Ask the flow's analyzer for the branch decision.
4. Run each conditional step whose condition holds on the post-decision
   context.
5. Run every finalization step; failures are recorded, never fatal.
6. Assemble the response.

``orchestrate`` never raises: any error becomes a failure response with a
synthetic ``rejected`` decision.

Example:
    ```python
    orchestrator = Orchestrator()
    response = await orchestrator.orchestrate(
        OrchestrateRequest(
            flow_id="compliance-review-v1",
            document_id="DOC-1",
            sections=[Section(id="section-1", title="Overview", content=text)],
        )
    )
    print(response.decision.next_action)
    ```
"""

import json
import logging
import random
import string
import time
from datetime import datetime, timezone
from typing import Any, Optional

from ..agents import AgentRunner
from ..exceptions import (
    ConfigurationError,
    CriticalStepError,
    RequestValidationError,
    SkillExecutionError,
)
from ..models import PlanStepStatus, StepStatus, parse_artifact
from ..skills import SkillDispatcher, SkillInvocation, SkillInvocationContext
from .context import Decision, OrchestrationContext, Signals, StepExecutionResult
from .flows import FLOW_REGISTRY, FlowDefinition, PlanStep, get_flow
from .observers import LoggingObserver, OrchestrationObserver
from .response import (
    BranchingPoint,
    ExecutionLog,
    ExecutionPlan,
    OrchestrateRequest,
    OrchestrateResponse,
    PlanStepState,
    RunMetadata,
)

logger = logging.getLogger("reviewflow.orchestrator")

ORCHESTRATOR_VERSION = "1.0.0"
INPUT_SUMMARY_CHARS = 100


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _ms(t0: float) -> int:
    return int((time.time() - t0) * 1000)


def generate_parent_trace_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=7))
    return f"orch_{int(time.time() * 1000)}_{suffix}"


def summarize_input(input: Any) -> str:
    """First 100 characters of the compact JSON form of ``input``."""
    text = input if isinstance(input, str) else json.dumps(input, separators=(",", ":"), default=str)
    if len(text) > INPUT_SUMMARY_CHARS:
        return text[:INPUT_SUMMARY_CHARS] + "..."
    return text


def summarize_output(output: Any) -> str:
    if output is None:
        return "No output"
    if not isinstance(output, dict):
        return "Output generated"
    if "facts" in output:
        return f"Extracted {len(output['facts'])} facts"
    if "mappings" in output:
        return f"Mapped {len(output['mappings'])} policy rules"
    if "issues" in output:
        return f"Found {len(output['issues'])} issues"
    if "requests" in output:
        return f"Generated {len(output['requests'])} evidence requests"
    if "topicSections" in output:
        return f"Assembled {len(output['topicSections'])} topic sections"
    if "riskScore" in output:
        return f"Risk score {output['riskScore']} ({output.get('routePath', 'unknown')})"
    if output.get("subject"):
        return f"Communication: {output['subject']}"
    if output.get("audit_id"):
        return f"Audit: {output['audit_id']}"
    if output.get("summary"):
        return output["summary"]
    return "Output generated"


class Orchestrator:
    """
    Runs flows against agents and skills.

    Args:
        runner: Agent runner used for agent steps.
        dispatcher: Skill dispatcher used for skill steps.
        observer: Receives lifecycle events; defaults to ``LoggingObserver``.
        flows: Flow registry; defaults to the built-in flows.
    """

    def __init__(
        self,
        runner: Optional[AgentRunner] = None,
        dispatcher: Optional[SkillDispatcher] = None,
        observer: Optional[OrchestrationObserver] = None,
        flows: Optional[dict[str, FlowDefinition]] = None,
    ):
        self.runner = runner or AgentRunner()
        self.dispatcher = dispatcher or SkillDispatcher()
        self.observer = observer or LoggingObserver()
        self.flows = flows if flows is not None else dict(FLOW_REGISTRY)

    def _emit(self, event: str, **data: Any) -> None:
        # Observer failures never affect the run.
        try:
            self.observer.on_event(event, data)
        except Exception:
            logger.exception(f"Observer failed on event {event}")

    # ------------------------------------------------------------------
    # Step execution
    # ------------------------------------------------------------------

    async def _invoke_agent(
        self, step: PlanStep, input: dict[str, Any], context: OrchestrationContext
    ) -> tuple[Any, str, int, bool, Optional[str]]:
        response = await self.runner.run(step.agent_id, input, context.options.mode)
        return response.output, response.trace_id, response.metadata.tokens, response.ok, response.error

    async def _invoke_skill(
        self,
        step: PlanStep,
        input: dict[str, Any],
        context: OrchestrationContext,
        sink: list[SkillInvocation],
    ) -> tuple[Any, str, int, bool, Optional[str]]:
        ctx = SkillInvocationContext(
            run_id=context.parent_trace_id,
            trace=sink,
            features=context.options.skill_features,
        )
        try:
            output = await self.dispatcher.invoke(step.skill_name, input, ctx)
            ok, error = True, None
        except SkillExecutionError as e:
            output, ok, error = None, False, e.message
        trace_id = sink[-1].id if sink else f"skill_{int(time.time() * 1000)}"
        return output, trace_id, 0, ok, error

    async def execute_step(self, step: PlanStep, context: OrchestrationContext) -> OrchestrationContext:
        """
        Execute one step and fold its result into a new context.

        Step failures are captured in the result. Only configuration errors
        (unknown agent or skill) propagate.
        """
        t0 = time.time()
        started_at = _now()
        sink: list[SkillInvocation] = []
        input_summary = "Error preparing input"
        artifact = None

        try:
            input = step.prepare_input(context)
            input_summary = summarize_input(input)
            self._emit(
                "step_started",
                parent_trace_id=context.parent_trace_id,
                step_id=step.id,
                agent_id=step.unit_id,
                input_summary=input_summary,
            )

            if step.is_skill:
                output, trace_id, tokens, ok, error = await self._invoke_skill(step, input, context, sink)
            else:
                output, trace_id, tokens, ok, error = await self._invoke_agent(step, input, context)

            if ok and output:
                artifact = parse_artifact(step.artifact_key, output)

            result = StepExecutionResult(
                step_id=step.id,
                agent_id=step.unit_id,
                trace_id=trace_id,
                status=StepStatus.SUCCESS if ok else StepStatus.ERROR,
                latency_ms=_ms(t0),
                tokens=tokens,
                started_at=started_at,
                completed_at=_now(),
                input_summary=input_summary,
                output_summary=summarize_output(output),
                ok=ok,
                output=output,
                error=error,
            )
            self._emit(
                "step_completed",
                parent_trace_id=context.parent_trace_id,
                step_id=step.id,
                agent_id=step.unit_id,
                trace_id=trace_id,
                status=result.status.value,
                latency_ms=result.latency_ms,
                output_summary=result.output_summary,
            )
        except ConfigurationError:
            raise
        except Exception as e:
            message = str(e) or e.__class__.__name__
            latency = _ms(t0)
            self._emit(
                "step_error",
                parent_trace_id=context.parent_trace_id,
                step_id=step.id,
                agent_id=step.unit_id,
                error=message,
                latency_ms=latency,
            )
            artifact = None
            result = StepExecutionResult(
                step_id=step.id,
                agent_id=step.unit_id,
                trace_id=f"error_{int(time.time() * 1000)}",
                status=StepStatus.ERROR,
                latency_ms=latency,
                tokens=0,
                started_at=started_at,
                completed_at=_now(),
                input_summary=input_summary,
                output_summary=f"Error: {message}",
                ok=False,
                error=message,
            )

        return context.with_step(result, artifact, tuple(sink))

    def _skip(self, context: OrchestrationContext, step: PlanStep) -> bool:
        if step.id not in context.options.skip_steps:
            return False
        self._emit(
            "step_skipped",
            parent_trace_id=context.parent_trace_id,
            step_id=step.id,
            reason="In skip_steps list",
        )
        return True

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    def validate_request(self, request: OrchestrateRequest) -> None:
        if len(request.sections) != 1:
            raise RequestValidationError(
                f"This version supports exactly 1 section, got {len(request.sections)}. "
                f"Multi-section support coming soon.",
                errors=["sections"],
            )

    async def orchestrate(self, request: OrchestrateRequest) -> OrchestrateResponse:
        parent_trace_id = generate_parent_trace_id()
        mode = request.options.mode
        self._emit(
            "orchestration_started",
            parent_trace_id=parent_trace_id,
            flow_id=request.flow_id,
            document_id=request.document_id,
            sections_count=len(request.sections),
            mode=mode.value,
        )
        t0 = time.time()
        context: Optional[OrchestrationContext] = None

        try:
            flow = get_flow(request.flow_id, self.flows)
            self.validate_request(request)

            context = OrchestrationContext(
                parent_trace_id=parent_trace_id,
                document_id=request.document_id,
                sections=tuple(request.sections),
                options=request.options,
            )

            for step in flow.main_sequence:
                if self._skip(context, step):
                    continue
                context = await self.execute_step(step, context)
                result = context.steps[-1]
                if not result.ok and step.critical:
                    raise CriticalStepError(
                        f'Critical step "{step.id}" failed: {result.error}', step_id=step.id
                    )

            context = context.with_decision(flow.decision_analyzer(context))
            self._emit(
                "branching_decision",
                parent_trace_id=parent_trace_id,
                next_action=context.decision.next_action,
                reason=context.decision.reason,
                confidence=context.decision.confidence,
                branch_triggers=list(context.signals.branch_triggers),
            )

            for step in flow.conditional_steps:
                if self._skip(context, step) or not step.condition(context):
                    continue
                context = await self.execute_step(step, context)
                result = context.steps[-1]
                if result.ok and isinstance(result.output, dict) and "requests" in result.output:
                    context = context.with_signals(
                        evidence_requests_count=len(result.output["requests"])
                    )
                if not result.ok and step.critical:
                    raise CriticalStepError(
                        f'Critical conditional step "{step.id}" failed: {result.error}',
                        step_id=step.id,
                    )

            for step in flow.finalization_steps:
                if self._skip(context, step):
                    continue
                context = await self.execute_step(step, context)

            response = self._build_response(flow, request, context, _ms(t0))
            self._emit(
                "orchestration_completed",
                parent_trace_id=parent_trace_id,
                flow_id=flow.id,
                total_latency_ms=response.execution.total_latency_ms,
                total_tokens=response.execution.total_tokens,
                steps_executed=len(context.steps),
                decision=context.decision.next_action,
            )
            return response
        except Exception as e:
            message = getattr(e, "message", None) or str(e) or e.__class__.__name__
            latency = _ms(t0)
            self._emit(
                "orchestration_error",
                parent_trace_id=parent_trace_id,
                error=message,
                total_latency_ms=latency,
            )
            return self._failure_response(request, parent_trace_id, context, message, latency)

    # ------------------------------------------------------------------
    # Response assembly
    # ------------------------------------------------------------------

    def _step_status(self, context: OrchestrationContext, step: PlanStep, not_run: PlanStepStatus) -> str:
        result = context.executed(step.id)
        if result is not None:
            return (PlanStepStatus.COMPLETED if result.ok else PlanStepStatus.FAILED).value
        if step.id in context.options.skip_steps:
            return PlanStepStatus.SKIPPED.value
        return not_run.value

    def _build_response(
        self,
        flow: FlowDefinition,
        request: OrchestrateRequest,
        context: OrchestrationContext,
        latency_ms: int,
    ) -> OrchestrateResponse:
        phases = (
            (flow.main_sequence, PlanStepStatus.PENDING),
            (flow.conditional_steps, PlanStepStatus.SKIPPED),
            (flow.finalization_steps, PlanStepStatus.PENDING),
        )
        plan_steps = [
            PlanStepState(
                step_id=step.id,
                step_name=step.name,
                agent_id=step.unit_id,
                status=self._step_status(context, step, not_run),
            )
            for steps, not_run in phases
            for step in steps
        ]
        last_main_step = flow.main_sequence[-1].id

        return OrchestrateResponse(
            ok=True,
            parent_trace_id=context.parent_trace_id,
            mode=context.options.mode,
            plan=ExecutionPlan(
                flow_id=flow.id,
                flow_name=flow.name,
                flow_version=flow.version,
                steps=plan_steps,
                branching_points=[
                    BranchingPoint(after_step=last_main_step, condition=trigger)
                    for trigger in context.signals.branch_triggers
                ],
            ),
            execution=ExecutionLog(
                steps=list(context.steps),
                total_latency_ms=latency_ms,
                total_tokens=sum(s.tokens for s in context.steps),
                errors=list(context.errors),
            ),
            artifacts={key.value: a.to_dict() for key, a in context.artifacts.items()},
            decision=context.decision,
            signals=context.signals,
            metadata=RunMetadata(
                orchestrator_version=ORCHESTRATOR_VERSION,
                timestamp=_now(),
                document_id=request.document_id,
                sections_processed=len(request.sections),
            ),
            skill_invocations=list(context.skill_invocations),
        )

    def _failure_response(
        self,
        request: OrchestrateRequest,
        parent_trace_id: str,
        context: Optional[OrchestrationContext],
        message: str,
        latency_ms: int,
    ) -> OrchestrateResponse:
        """Failure response. Steps and artifacts produced before the failure are kept."""
        steps = list(context.steps) if context else []
        errors = list(context.errors) if context else []
        return OrchestrateResponse(
            ok=False,
            error=message,
            parent_trace_id=parent_trace_id,
            mode=request.options.mode,
            plan=ExecutionPlan(flow_id=request.flow_id, flow_name="Error", flow_version="0.0.0"),
            execution=ExecutionLog(
                steps=steps,
                total_latency_ms=latency_ms,
                total_tokens=sum(s.tokens for s in steps),
                errors=errors + [message],
            ),
            artifacts=(
                {key.value: a.to_dict() for key, a in context.artifacts.items()} if context else {}
            ),
            decision=Decision(
                next_action="rejected",
                reason=f"Orchestration failed: {message}",
                confidence=0,
                recommended_actions=("Fix errors and retry",),
                blocking_issues=(message,),
            ),
            signals=Signals(),
            metadata=RunMetadata(
                orchestrator_version=ORCHESTRATOR_VERSION,
                timestamp=_now(),
                document_id=request.document_id,
                sections_processed=0,
            ),
            skill_invocations=list(context.skill_invocations) if context else [],
        )


_default_orchestrator: Optional[Orchestrator] = None


async def orchestrate(request: OrchestrateRequest) -> OrchestrateResponse:
    """Run a flow with the default orchestrator."""
    global _default_orchestrator
    if _default_orchestrator is None:
        _default_orchestrator = Orchestrator()
    return await _default_orchestrator.orchestrate(request)
