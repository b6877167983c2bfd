"""
KYC triage flow.

Assemble KYC topics (skill) -> triage risk (skill) -> [branch on route] ->
evidence requests (unless on the fast path) -> audit.

Both main steps go through the skill dispatcher, so with remote skills
enabled a degraded transport yields the safe fallbacks and the analyzer
routes the file to manual review.
"""

from typing import Any

from ...models import ArtifactKey, Coverage
from ...skills.catalog import RISK_TRIAGE, TOPIC_ASSEMBLE
from ...skills.kyc import CRITICAL_TOPICS, TOPIC_TITLES
from ..analyzers import analyze_kyc_triage
from ..context import OrchestrationContext
from .base import FlowDefinition, PlanStep, agent_activity, artifact_items, final_decision

FINAL_DECISIONS = {
    "ready_to_send": "approved",
    "request_more_info": "pending_evidence",
    "escalate_compliance": "escalated",
    "human_review_required": "escalated",
    "manual_review": "needs_revision",
}


def _assemble_input(context: OrchestrationContext) -> dict[str, Any]:
    section = context.section
    return {
        "documents": [
            {
                "name": section.title or section.id,
                "filename": section.id,
                "doc_type_hint": "kyc_file",
                "content": section.content,
            }
        ]
    }


def _triage_input(context: OrchestrationContext) -> dict[str, Any]:
    return {"topicSections": artifact_items(context, ArtifactKey.TOPIC_SECTIONS, "topic_sections")}


def _needs_evidence(context: OrchestrationContext) -> bool:
    return context.decision is not None and context.decision.next_action in (
        "request_more_info",
        "escalate_compliance",
        "human_review_required",
    )


def missing_kyc_evidence(context: OrchestrationContext) -> list[str]:
    """Documents owed for missing critical topics, then detail owed for partial topics."""
    topics = context.artifact(ArtifactKey.TOPIC_SECTIONS)
    topics = topics.topic_sections if topics is not None else []
    missing = [
        f"Documentation for: {TOPIC_TITLES.get(t.topic_id, t.topic_id)}"
        for t in topics
        if t.coverage == Coverage.MISSING and t.topic_id in CRITICAL_TOPICS
    ]
    missing.extend(
        f"Additional detail for: {TOPIC_TITLES.get(t.topic_id, t.topic_id)}"
        for t in topics
        if t.coverage == Coverage.PARTIAL
    )
    return missing


def _evidence_input(context: OrchestrationContext) -> dict[str, Any]:
    return {
        "issues": [],
        "missing_evidence": missing_kyc_evidence(context),
        "context": f'KYC file {context.document_id}, Section "{context.section.title}"',
    }


def _audit_input(context: OrchestrationContext) -> dict[str, Any]:
    signals = context.signals
    return {
        "document_id": context.document_id,
        "agent_activity": agent_activity(context),
        "final_decision": final_decision(context, FINAL_DECISIONS),
        "reviewer": context.options.reviewer,
        "flagged_issues_count": signals.high_count + signals.medium_count,
        "auditType": "kyc_review",
    }


KYC_TRIAGE_FLOW = FlowDefinition(
    id="kyc-triage-v1",
    name="KYC Triage Workflow",
    version="1.0.0",
    description=(
        "KYC risk triage: Assemble topics → Score coverage and high-risk keywords → "
        "Branch on route → Generate evidence requests (if needed) → Write audit log"
    ),
    main_sequence=(
        PlanStep(
            id="assemble-topics",
            name="Assemble KYC Topics",
            skill_name=TOPIC_ASSEMBLE,
            artifact_key=ArtifactKey.TOPIC_SECTIONS,
            critical=True,
            prepare_input=_assemble_input,
        ),
        PlanStep(
            id="triage-risk",
            name="Triage KYC Risk",
            skill_name=RISK_TRIAGE,
            artifact_key=ArtifactKey.RISK_TRIAGE,
            critical=True,
            prepare_input=_triage_input,
        ),
    ),
    conditional_steps=(
        PlanStep(
            id="request-kyc-evidence",
            name="Request KYC Evidence",
            agent_id="request-evidence-agent",
            artifact_key=ArtifactKey.EVIDENCE_REQUESTS,
            condition=_needs_evidence,
            prepare_input=_evidence_input,
        ),
    ),
    finalization_steps=(
        PlanStep(
            id="write-kyc-audit",
            name="Write KYC Audit Log",
            agent_id="write-audit-agent",
            artifact_key=ArtifactKey.AUDIT_LOG,
            prepare_input=_audit_input,
        ),
    ),
    decision_analyzer=analyze_kyc_triage,
)
