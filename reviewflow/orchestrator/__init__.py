"""
ReviewFlow - Orchestration engine, flows and decision analyzers.
"""

from .analyzers import analyze_compliance, analyze_contract_risk, analyze_kyc_triage
from .context import (
    Analysis,
    Decision,
    OrchestrationContext,
    OrchestrationOptions,
    Signals,
    StepExecutionResult,
)
from .engine import (
    ORCHESTRATOR_VERSION,
    Orchestrator,
    generate_parent_trace_id,
    orchestrate,
    summarize_input,
    summarize_output,
)
from .flows import FLOW_REGISTRY, FlowDefinition, PlanStep, get_flow, list_flows
from .observers import LoggingObserver, OrchestrationObserver, RecordingObserver
from .response import OrchestrateRequest, OrchestrateResponse

__all__ = [
    "Analysis",
    "Decision",
    "FLOW_REGISTRY",
    "FlowDefinition",
    "LoggingObserver",
    "ORCHESTRATOR_VERSION",
    "OrchestrateRequest",
    "OrchestrateResponse",
    "OrchestrationContext",
    "OrchestrationObserver",
    "OrchestrationOptions",
    "Orchestrator",
    "PlanStep",
    "RecordingObserver",
    "Signals",
    "StepExecutionResult",
    "analyze_compliance",
    "analyze_contract_risk",
    "analyze_kyc_triage",
    "generate_parent_trace_id",
    "get_flow",
    "list_flows",
    "orchestrate",
    "summarize_input",
    "summarize_output",
]
