"""
Contract risk review flow.

Extract contract terms -> map to contract standards -> adversarial review ->
[branch] -> evidence requests (escalation or negotiation) -> risk summary ->
audit.
"""

from typing import Any

from ...models import ArtifactKey, IssueType, RiskLevel
from ..analyzers import analyze_contract_risk
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
    "ready_to_sign": "approved",
    "acceptable_risk": "approved",
    "escalate_legal": "escalated",
    "negotiate_terms": "under_negotiation",
    "request_more_info": "pending_evidence",
    "rejected": "rejected",
}

ISSUE_EVIDENCE = {
    IssueType.UNLIMITED_LIABILITY: "Executive approval for unlimited liability clause",
    IssueType.MISSING_SIGNATURE: "Signed signature page from authorized signatory",
}


def _extract_input(context: OrchestrationContext) -> dict[str, Any]:
    return {
        **section_input(context),
        "docId": context.document_id,
        "extractionFocus": "contractual",
    }


def _standards_input(context: OrchestrationContext) -> dict[str, Any]:
    section = context.section
    return {
        "facts": artifact_items(context, ArtifactKey.FACTS, "facts"),
        "sectionContent": section.content,
        "sectionTitle": section.title,
        "matchingStrategy": "contract_template",
        "documentType": "contract",
    }


def _review_input(context: OrchestrationContext) -> dict[str, Any]:
    return {
        **section_input(context),
        "policyMappings": artifact_items(context, ArtifactKey.POLICY_MAPPINGS, "mappings"),
        "reviewMode": "contract_risk",
    }


def _escalated_or_negotiating(context: OrchestrationContext) -> bool:
    return context.decision is not None and context.decision.next_action in (
        "escalate_legal",
        "negotiate_terms",
    )


def missing_contract_evidence(context: OrchestrationContext) -> list[str]:
    """Review items for high/non-standard terms, then approvals owed for specific issue types."""
    mappings = context.artifact(ArtifactKey.POLICY_MAPPINGS)
    issues = context.artifact(ArtifactKey.REVIEW_ISSUES)
    missing = [
        f"Review required for: {m.policy_rule.title}"
        for m in (mappings.mappings if mappings is not None else [])
        if m.risk_level in (RiskLevel.HIGH, RiskLevel.NON_STANDARD)
    ]
    for issue in issues.issues if issues is not None else []:
        evidence = ISSUE_EVIDENCE.get(issue.type)
        if evidence:
            missing.append(evidence)
    return missing


def _evidence_input(context: OrchestrationContext) -> dict[str, Any]:
    return {
        "issues": artifact_items(context, ArtifactKey.REVIEW_ISSUES, "issues"),
        "missing_evidence": missing_contract_evidence(context),
        "context": f'Contract {context.document_id}, Section "{context.section.title}"',
        "evidenceType": "contract_exhibits",
    }


def _summary_input(context: OrchestrationContext) -> dict[str, Any]:
    return {
        "review_summary": {
            "facts": artifact_items(context, ArtifactKey.FACTS, "facts"),
            "issues": artifact_items(context, ArtifactKey.REVIEW_ISSUES, "issues"),
            "policyMappings": artifact_items(context, ArtifactKey.POLICY_MAPPINGS, "mappings"),
            "evidenceRequests": artifact_items(context, ArtifactKey.EVIDENCE_REQUESTS, "requests"),
        },
        "review_results": review_results(context, ("ready_to_sign", "acceptable_risk")),
        "tone": context.options.tone,
        "language": context.options.language,
        "client_name": context.options.client_name,
        "communicationType": "contract_risk_summary",
    }


def _audit_input(context: OrchestrationContext) -> dict[str, Any]:
    return {
        "document_id": context.document_id,
        "agent_activity": agent_activity(context),
        "final_decision": final_decision(context, FINAL_DECISIONS),
        "reviewer": context.options.reviewer,
        "flagged_issues_count": len(artifact_items(context, ArtifactKey.REVIEW_ISSUES, "issues")),
        "auditType": "contract_review",
    }


CONTRACT_RISK_REVIEW_FLOW = FlowDefinition(
    id="contract-risk-review-v1",
    name="Contract Risk Review Workflow",
    version="1.0.0",
    description=(
        "Contractual risk assessment: Extract contract terms → Map to standards → "
        "Adversarial review → Branch on risk level → Generate evidence requests (if needed) → "
        "Draft risk summary → Write audit log"
    ),
    main_sequence=(
        PlanStep(
            id="extract-contract-terms",
            name="Extract Contract Terms",
            agent_id="extract-facts-agent",
            artifact_key=ArtifactKey.FACTS,
            critical=True,
            prepare_input=_extract_input,
        ),
        PlanStep(
            id="map-to-standards",
            name="Map to Contract Standards",
            agent_id="map-policy-agent",
            artifact_key=ArtifactKey.POLICY_MAPPINGS,
            critical=True,
            prepare_input=_standards_input,
        ),
        PlanStep(
            id="adversarial-contract-review",
            name="Adversarial Contract Review",
            agent_id="redteam-review-agent",
            artifact_key=ArtifactKey.REVIEW_ISSUES,
            critical=True,
            prepare_input=_review_input,
        ),
    ),
    conditional_steps=(
        PlanStep(
            id="request-contract-evidence",
            name="Request Contract Evidence",
            agent_id="request-evidence-agent",
            artifact_key=ArtifactKey.EVIDENCE_REQUESTS,
            condition=_escalated_or_negotiating,
            prepare_input=_evidence_input,
        ),
    ),
    finalization_steps=(
        PlanStep(
            id="draft-risk-summary",
            name="Draft Contract Risk Summary",
            agent_id="draft-client-comms-agent",
            artifact_key=ArtifactKey.CLIENT_COMMUNICATION,
            prepare_input=_summary_input,
        ),
        PlanStep(
            id="log-contract-review",
            name="Audit Contract Review",
            agent_id="write-audit-agent",
            artifact_key=ArtifactKey.AUDIT_LOG,
            prepare_input=_audit_input,
        ),
    ),
    decision_analyzer=analyze_contract_risk,
)
