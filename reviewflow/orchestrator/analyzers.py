"""
ReviewFlow - Decision analyzers.

Each flow has one analyzer: a pure function from the post-main-sequence
context to an ``Analysis`` (branch decision plus updated signals). Rules
are evaluated in priority order and the first match wins.
"""

from ..models import (
    ArtifactKey,
    Coverage,
    IssueType,
    PolicyMapping,
    RedTeamIssue,
    RiskLevel,
    Severity,
)
from ..skills.kyc import CRITICAL_TOPICS, extract_high_risk_keywords
from .context import Analysis, Decision, OrchestrationContext


def _issues(context: OrchestrationContext) -> list[RedTeamIssue]:
    artifact = context.artifact(ArtifactKey.REVIEW_ISSUES)
    return artifact.issues if artifact is not None else []


def _mappings(context: OrchestrationContext) -> list[PolicyMapping]:
    artifact = context.artifact(ArtifactKey.POLICY_MAPPINGS)
    return artifact.mappings if artifact is not None else []


def _count(issues: list[RedTeamIssue], severity: Severity) -> int:
    return sum(1 for i in issues if i.severity == severity)


def _descriptions(issues: list[RedTeamIssue], predicate) -> tuple[str, ...]:
    return tuple(i.description for i in issues if predicate(i))


# ---------------------------------------------------------------------------
# Compliance review
# ---------------------------------------------------------------------------


def analyze_compliance(context: OrchestrationContext) -> Analysis:
    """rejected > request_more_info (high) > request_more_info (medium) > ready_to_send."""
    issues = _issues(context)
    mappings = _mappings(context)

    critical = _count(issues, Severity.CRITICAL)
    high = _count(issues, Severity.HIGH)
    medium = _count(issues, Severity.MEDIUM)
    low = _count(issues, Severity.LOW)
    critical_policies = sum(1 for m in mappings if m.risk_level == RiskLevel.CRITICAL)
    policy_concerns = sum(
        1 for m in mappings if m.risk_level in (RiskLevel.HIGH, RiskLevel.CRITICAL)
    )

    counts = dict(
        critical_count=critical,
        high_count=high,
        medium_count=medium,
        low_count=low,
        flagged_policy_count=critical_policies,
    )

    if critical > 0 or critical_policies > 0:
        decision = Decision(
            next_action="rejected",
            reason=(
                f"{critical} critical issue(s) and {critical_policies} critical policy "
                f"violation(s) prevent approval"
            ),
            confidence=1.0,
            recommended_actions=(
                "Address all critical violations immediately",
                "Remove prohibited content or seek executive approval",
                "Resubmit for review after corrections",
            ),
            blocking_issues=_descriptions(issues, lambda i: i.severity == Severity.CRITICAL),
        )
        trigger = "critical_issues_detected"
    elif high > 0 or policy_concerns > 0:
        decision = Decision(
            next_action="request_more_info",
            reason=(
                f"{high} high-priority issue(s) and {policy_concerns} policy concern(s) "
                f"require additional information"
            ),
            confidence=0.8,
            recommended_actions=(
                "Provide requested evidence and documentation",
                "Address flagged issues",
                "Schedule follow-up review after submission",
            ),
            blocking_issues=_descriptions(issues, lambda i: i.severity == Severity.HIGH),
        )
        trigger = "high_issues_or_missing_evidence"
    elif medium > 0:
        decision = Decision(
            next_action="request_more_info",
            reason=f"{medium} medium-priority issue(s) require attention before approval",
            confidence=0.7,
            recommended_actions=(
                "Review and address medium-priority issues",
                "Consider requesting additional context or clarifications",
                "Escalate to senior reviewer if needed",
            ),
            blocking_issues=_descriptions(issues, lambda i: i.severity == Severity.MEDIUM),
        )
        trigger = "medium_issues_need_attention"
    elif low > 0:
        decision = Decision(
            next_action="ready_to_send",
            reason=f"Document approved with {low} minor advisory notice(s)",
            confidence=0.85,
            recommended_actions=(
                "Consider addressing low-priority suggestions for quality improvement",
                "Proceed with approval workflow",
                "Document advisories in audit log",
            ),
        )
        trigger = "low_issues_advisory_only"
    else:
        decision = Decision(
            next_action="ready_to_send",
            reason="All compliance checks passed successfully",
            confidence=0.95,
            recommended_actions=(
                "Send client communication",
                "Proceed with approval workflow",
                "Archive audit log for records",
            ),
        )
        trigger = "all_checks_passed"

    return Analysis(decision=decision, signals=context.signals.with_trigger(trigger, **counts))


# ---------------------------------------------------------------------------
# Contract risk review
# ---------------------------------------------------------------------------


NON_STANDARD_TERMS_LIMIT = 2


def analyze_contract_risk(context: OrchestrationContext) -> Analysis:
    """escalate_legal > negotiate_terms > acceptable_risk > ready_to_sign."""
    issues = _issues(context)
    mappings = _mappings(context)

    unlimited_liability = sum(1 for i in issues if i.type == IssueType.UNLIMITED_LIABILITY)
    missing_signature = sum(1 for i in issues if i.type == IssueType.MISSING_SIGNATURE)
    high_exposure = sum(
        1
        for i in issues
        if i.type == IssueType.FINANCIAL_EXPOSURE and i.severity == Severity.HIGH
    )
    critical = _count(issues, Severity.CRITICAL)
    high = _count(issues, Severity.HIGH)
    medium = _count(issues, Severity.MEDIUM)
    low = _count(issues, Severity.LOW)
    non_standard = sum(1 for m in mappings if m.risk_level == RiskLevel.NON_STANDARD)

    counts = dict(
        critical_count=critical,
        high_count=high,
        medium_count=medium,
        low_count=low,
        flagged_policy_count=non_standard,
    )

    if unlimited_liability > 0 or critical > 0 or missing_signature > 0:
        decision = Decision(
            next_action="escalate_legal",
            reason=(
                f"{critical} critical risk(s) including {unlimited_liability} unlimited "
                f"liability clause(s) and {missing_signature} missing signature(s) "
                f"require legal counsel review"
            ),
            confidence=1.0,
            recommended_actions=(
                "Forward to legal department immediately",
                "Do NOT proceed without legal sign-off",
                "Request redlined version with proposed changes",
            ),
            blocking_issues=_descriptions(
                issues,
                lambda i: i.severity == Severity.CRITICAL
                or i.type in (IssueType.UNLIMITED_LIABILITY, IssueType.MISSING_SIGNATURE),
            ),
        )
        trigger = "critical_contract_risk_detected"
    elif high > 0 or high_exposure > 0 or non_standard > NON_STANDARD_TERMS_LIMIT:
        decision = Decision(
            next_action="negotiate_terms",
            reason=(
                f"{high} high-priority risk(s), {high_exposure} financial exposure(s), "
                f"and {non_standard} non-standard term(s) should be negotiated"
            ),
            confidence=0.75,
            recommended_actions=(
                "Request amendments to high-risk clauses",
                "Propose liability cap or indemnification limits",
                "Seek business justification for non-standard terms",
            ),
            blocking_issues=_descriptions(
                issues,
                lambda i: i.severity == Severity.HIGH or i.type == IssueType.FINANCIAL_EXPOSURE,
            ),
        )
        trigger = "high_contract_risk_detected"
    elif medium > 0 or low > 0:
        decision = Decision(
            next_action="acceptable_risk",
            reason=(
                f"{medium + low} minor risk(s) identified, but within acceptable tolerance"
            ),
            confidence=0.85,
            recommended_actions=(
                "Document identified risks in contract file",
                "Monitor performance during contract execution",
                "Review at renewal",
            ),
        )
        trigger = "acceptable_contract_risk"
    else:
        decision = Decision(
            next_action="ready_to_sign",
            reason="Contract terms are standard and risk exposure is acceptable",
            confidence=0.95,
            recommended_actions=(
                "Proceed with signature",
                "Archive audit log",
                "Schedule post-signature compliance check",
            ),
        )
        trigger = "contract_approved"

    return Analysis(decision=decision, signals=context.signals.with_trigger(trigger, **counts))


# ---------------------------------------------------------------------------
# KYC triage
# ---------------------------------------------------------------------------


KYC_ROUTE_DECISIONS = {
    "fast": (
        "ready_to_send",
        "kyc_fast_path",
        0.9,
        (
            "Proceed with standard onboarding",
            "File KYC summary with the client record",
            "Schedule periodic review",
        ),
    ),
    "crosscheck": (
        "request_more_info",
        "kyc_crosscheck_required",
        0.75,
        (
            "Request documents for partially covered topics",
            "Cross-check declared information against independent sources",
            "Re-run triage after documents are received",
        ),
    ),
    "escalate": (
        "escalate_compliance",
        "kyc_escalation_required",
        0.85,
        (
            "Escalate file to the compliance officer",
            "Perform enhanced due diligence",
            "Hold onboarding until escalation is resolved",
        ),
    ),
    "human_gate": (
        "human_review_required",
        "kyc_human_gate",
        1.0,
        (
            "Assign file to a senior KYC reviewer",
            "Do NOT onboard without documented human approval",
            "Collect full evidence for all critical topics",
        ),
    ),
}


def analyze_kyc_triage(context: OrchestrationContext) -> Analysis:
    """Map the triage route to a next action; degraded triage forces manual review."""
    triage = context.artifact(ArtifactKey.RISK_TRIAGE)
    topics_artifact = context.artifact(ArtifactKey.TOPIC_SECTIONS)
    topics = topics_artifact.topic_sections if topics_artifact is not None else []

    missing_critical = [
        t for t in topics if t.coverage == Coverage.MISSING and t.topic_id in CRITICAL_TOPICS
    ]
    partial = [t for t in topics if t.coverage == Coverage.PARTIAL]
    keywords = extract_high_risk_keywords(" ".join(t.content for t in topics))

    counts = dict(
        critical_count=0,
        high_count=len(missing_critical),
        medium_count=len(partial),
        low_count=0,
        flagged_policy_count=len(keywords),
    )

    if triage is None or triage.degraded or triage.route_path not in KYC_ROUTE_DECISIONS:
        decision = Decision(
            next_action="manual_review",
            reason="Risk triage unavailable (degraded mode); manual KYC review required",
            confidence=0.5,
            recommended_actions=(
                "Review the KYC file manually",
                "Check remote skill server availability",
                "Re-run triage once skills are available",
            ),
            blocking_issues=("Risk triage unavailable",),
        )
        return Analysis(
            decision=decision,
            signals=context.signals.with_trigger("kyc_triage_degraded", **counts),
        )

    next_action, trigger, confidence, actions = KYC_ROUTE_DECISIONS[triage.route_path]
    if triage.route_path == "human_gate":
        counts["critical_count"] = 1
    blocking = () if next_action == "ready_to_send" else tuple(
        f"Missing critical topic: {t.topic_id}" for t in missing_critical
    )
    decision = Decision(
        next_action=next_action,
        reason=f"Risk score {triage.risk_score} routed to {triage.route_path} path",
        confidence=confidence,
        recommended_actions=actions,
        blocking_issues=blocking,
    )
    return Analysis(decision=decision, signals=context.signals.with_trigger(trigger, **counts))
