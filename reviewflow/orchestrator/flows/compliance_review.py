"""
Compliance review flow.

Extract facts -> map to policy rules -> red team review -> [branch] ->
evidence requests (if more info is needed) -> client communication -> audit.
"""

from typing import Any

from ...models import ArtifactKey, PolicyCategory, RiskLevel
from ..analyzers import analyze_compliance
from ..context import OrchestrationContext
from .base import (
    FlowDefinition,
    PlanStep,
    agent_activity,
    artifact_items,
    final_decision,
    review_results,
    section_input,
)

FINAL_DECISIONS = {
    "approved": "approved",
    "ready_to_send": "approved",
    "rejected": "rejected",
    "request_more_info": "pending_evidence",
}

EVIDENCE_PREFIXES = {
    PolicyCategory.DOCUMENTATION: "Documentation for",
    PolicyCategory.KYC: "KYC verification",
    PolicyCategory.AML: "AML check",
}


def _extract_input(context: OrchestrationContext) -> dict[str, Any]:
    return {**section_input(context), "docId": context.document_id}


def _map_policy_input(context: OrchestrationContext) -> dict[str, Any]:
    return {
        "facts": artifact_items(context, ArtifactKey.FACTS, "facts"),
        "documentType": "investment_proposal",
    }


def _redteam_input(context: OrchestrationContext) -> dict[str, Any]:
    return {
        **section_input(context),
        "policyMappings": artifact_items(context, ArtifactKey.POLICY_MAPPINGS, "mappings"),
    }


def _needs_more_info(context: OrchestrationContext) -> bool:
    return context.decision is not None and context.decision.next_action == "request_more_info"


def missing_policy_evidence(context: OrchestrationContext) -> list[str]:
    """Evidence owed for every documentation/KYC/AML rule behind a high or critical mapping."""
    mappings = context.artifact(ArtifactKey.POLICY_MAPPINGS)
    missing = []
    for mapping in mappings.mappings if mappings is not None else []:
        if mapping.risk_level not in (RiskLevel.HIGH, RiskLevel.CRITICAL):
            continue
        for rule in mapping.policy_rules:
            prefix = EVIDENCE_PREFIXES.get(rule.category)
            if prefix:
                missing.append(f"{prefix}: {rule.title}")
    return missing


def _evidence_input(context: OrchestrationContext) -> dict[str, Any]:
    return {
        "issues": artifact_items(context, ArtifactKey.REVIEW_ISSUES, "issues"),
        "missing_evidence": missing_policy_evidence(context),
        "context": f'Document {context.document_id}, Section "{context.section.title}"',
    }


def _comms_input(context: OrchestrationContext) -> dict[str, Any]:
    return {
        "review_results": review_results(context, ("ready_to_send", "approved")),
        "tone": context.options.tone,
        "language": context.options.language,
        "client_name": context.options.client_name,
    }


def _audit_input(context: OrchestrationContext) -> dict[str, Any]:
    return {
        "document_id": context.document_id,
        "agent_activity": agent_activity(context),
        "final_decision": final_decision(context, FINAL_DECISIONS),
        "reviewer": context.options.reviewer,
        "flagged_issues_count": len(artifact_items(context, ArtifactKey.REVIEW_ISSUES, "issues")),
    }


COMPLIANCE_REVIEW_FLOW = FlowDefinition(
    id="compliance-review-v1",
    name="Compliance Review Workflow",
    version="1.0.0",
    description=(
        "Full compliance review: Extract facts → Map to policies → Red team review → "
        "Branch on severity → Generate evidence requests (if needed) → "
        "Draft client communication → Write audit log"
    ),
    main_sequence=(
        PlanStep(
            id="extract-facts",
            name="Extract Facts",
            agent_id="extract-facts-agent",
            artifact_key=ArtifactKey.FACTS,
            critical=True,
            prepare_input=_extract_input,
        ),
        PlanStep(
            id="map-policy",
            name="Map to Policy Rules",
            agent_id="map-policy-agent",
            artifact_key=ArtifactKey.POLICY_MAPPINGS,
            critical=True,
            prepare_input=_map_policy_input,
        ),
        PlanStep(
            id="redteam-review",
            name="Red Team Review",
            agent_id="redteam-review-agent",
            artifact_key=ArtifactKey.REVIEW_ISSUES,
            critical=True,
            prepare_input=_redteam_input,
        ),
    ),
    conditional_steps=(
        PlanStep(
            id="request-evidence",
            name="Request Evidence",
            agent_id="request-evidence-agent",
            artifact_key=ArtifactKey.EVIDENCE_REQUESTS,
            condition=_needs_more_info,
            prepare_input=_evidence_input,
        ),
    ),
    finalization_steps=(
        PlanStep(
            id="draft-comms",
            name="Draft Client Communication",
            agent_id="draft-client-comms-agent",
            artifact_key=ArtifactKey.CLIENT_COMMUNICATION,
            prepare_input=_comms_input,
        ),
        PlanStep(
            id="write-audit",
            name="Write Audit Log",
            agent_id="write-audit-agent",
            artifact_key=ArtifactKey.AUDIT_LOG,
            prepare_input=_audit_input,
        ),
    ),
    decision_analyzer=analyze_compliance,
)
