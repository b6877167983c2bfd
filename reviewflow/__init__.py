"""
ReviewFlow - Deterministic multi-step compliance, contract and KYC review.

Runs data-driven flows of agents and skills over a document section,
branches on the accumulated findings and writes an audit record. Also
plans how much of a document needs re-review after a batch of edits.
"""

from .agents import AgentRegistry, AgentResponse, AgentRunner, run_agent
from .batch_review import BatchReviewer, BatchReviewResult, plan_with_fallback
from .config import LLMConfig, PlannerConfig, SkillTransportConfig
from .dirty_queue import DirtyQueue, DirtyQueueEntry, calculate_edit_magnitude
from .exceptions import (
    AgentNotFoundError,
    ConfigurationError,
    CriticalStepError,
    FlowNotFoundError,
    LLMError,
    RemoteSkillError,
    RequestValidationError,
    ReviewFlowError,
    SkillExecutionError,
    SkillNotFoundError,
    StepExecutionError,
)
from .global_checks import GlobalCheckResult, run_global_checks
from .llm import ClaudeReviewer
from .models import AgentMode, ArtifactKey, EditMagnitude, ReviewMode, Severity, StepStatus
from .orchestrator import (
    FLOW_REGISTRY,
    FlowDefinition,
    LoggingObserver,
    OrchestrateRequest,
    OrchestrateResponse,
    OrchestrationObserver,
    OrchestrationOptions,
    Orchestrator,
    PlanStep,
    RecordingObserver,
    get_flow,
    orchestrate,
)
from .scope_planner import (
    ScopePlan,
    create_fallback_scope_plan,
    plan_review_scope,
    validate_scope_plan,
)
from .section_ids import Section
from .skills import SkillDispatcher, SkillInvocation, SkillInvocationContext

__version__ = "1.0.0"
__all__ = [
    "AgentMode",
    "AgentNotFoundError",
    "AgentRegistry",
    "AgentResponse",
    "AgentRunner",
    "ArtifactKey",
    "BatchReviewResult",
    "BatchReviewer",
    "ClaudeReviewer",
    "ConfigurationError",
    "CriticalStepError",
    "DirtyQueue",
    "DirtyQueueEntry",
    "EditMagnitude",
    "FLOW_REGISTRY",
    "FlowDefinition",
    "FlowNotFoundError",
    "GlobalCheckResult",
    "LLMConfig",
    "LLMError",
    "LoggingObserver",
    "OrchestrateRequest",
    "OrchestrateResponse",
    "OrchestrationObserver",
    "OrchestrationOptions",
    "Orchestrator",
    "PlanStep",
    "PlannerConfig",
    "RecordingObserver",
    "RemoteSkillError",
    "RequestValidationError",
    "ReviewFlowError",
    "ReviewMode",
    "ScopePlan",
    "Section",
    "Severity",
    "SkillDispatcher",
    "SkillExecutionError",
    "SkillInvocation",
    "SkillInvocationContext",
    "SkillNotFoundError",
    "SkillTransportConfig",
    "StepExecutionError",
    "StepStatus",
    "calculate_edit_magnitude",
    "create_fallback_scope_plan",
    "get_flow",
    "orchestrate",
    "plan_review_scope",
    "plan_with_fallback",
    "run_agent",
    "run_global_checks",
    "validate_scope_plan",
]
