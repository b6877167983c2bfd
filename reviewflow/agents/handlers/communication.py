"""
ReviewFlow - Finalization handlers: client communication and audit records.
"""

import calendar
import random
import string
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from ...models import AgentMode, AuditEvent, ClientCommunication, RedTeamIssue
from ..base import AgentContext

# ---------------------------------------------------------------------------
# Client communication
# ---------------------------------------------------------------------------


def _messages(language: str, client_name: Optional[str]) -> dict[str, str]:
    table = {
        "english": {
            "greeting": f"Dear {client_name}" if client_name else "Dear Valued Client",
            "subject_pass": "Your Investment Proposal - Approved",
            "subject_review": "Your Investment Proposal - Additional Information Required",
            "subject_fail": "Your Investment Proposal - Action Required",
            "closing_formal": "Sincerely,\nCompliance Review Team",
            "closing_friendly": "Best regards,\nYour Investment Team",
            "closing_urgent": "Urgent attention required.\n\nCompliance Team",
        },
        "chinese": {
            "greeting": f"尊敬的{client_name or '客户'}",
            "subject_pass": "您的投资建议书 - 已批准",
            "subject_review": "您的投资建议书 - 需要补充信息",
            "subject_fail": "您的投资建议书 - 需要立即处理",
            "closing_formal": "此致\n敬礼\n合规审查团队",
            "closing_friendly": "祝好\n您的投资团队",
            "closing_urgent": "需要紧急关注。\n\n合规团队",
        },
        "german": {
            "greeting": f"Sehr geehrte/r {client_name or 'Kunde/Kundin'}",
            "subject_pass": "Ihr Investitionsvorschlag - Genehmigt",
            "subject_review": "Ihr Investitionsvorschlag - Zusätzliche Informationen erforderlich",
            "subject_fail": "Ihr Investitionsvorschlag - Maßnahmen erforderlich",
            "closing_formal": "Mit freundlichen Grüßen,\nCompliance-Prüfungsteam",
            "closing_friendly": "Beste Grüße,\nIhr Investmentteam",
            "closing_urgent": "Dringende Aufmerksamkeit erforderlich.\n\nCompliance-Team",
        },
        "french": {
            "greeting": f"Cher/Chère {client_name or 'client'}",
            "subject_pass": "Votre proposition d'investissement - Approuvée",
            "subject_review": "Votre proposition d'investissement - Informations supplémentaires requises",
            "subject_fail": "Votre proposition d'investissement - Action requise",
            "closing_formal": "Cordialement,\nÉquipe de conformité",
            "closing_friendly": "Meilleures salutations,\nVotre équipe d'investissement",
            "closing_urgent": "Attention urgente requise.\n\nÉquipe de conformité",
        },
        "japanese": {
            "greeting": f"{client_name or 'お客様'}へ",
            "subject_pass": "投資提案書 - 承認されました",
            "subject_review": "投資提案書 - 追加情報が必要です",
            "subject_fail": "投資提案書 - 対応が必要です",
            "closing_formal": "敬具\nコンプライアンス審査チーム",
            "closing_friendly": "よろしくお願いいたします\n投資チーム",
            "closing_urgent": "緊急の対応が必要です。\n\nコンプライアンスチーム",
        },
    }
    return table.get(language, table["english"])


async def draft_client_comms(input: dict[str, Any], context: AgentContext) -> dict[str, Any]:
    """Draft a client message from review results in the requested language and tone."""
    if context.mode != AgentMode.FAKE:
        raise NotImplementedError("Real draft-client-comms not implemented yet.")

    review_results = input.get("review_results") or {}
    tone = input.get("tone", "formal")
    language = input.get("language", "english")
    lang = _messages(language, input.get("client_name"))
    status = review_results.get("overall_status")

    subject = ""
    body = ""
    call_to_action = ""
    urgency_level = "medium"
    attachments: list[str] = []

    if status == "pass":
        subject = lang["subject_pass"]
        urgency_level = "low"
        closing = lang["closing_formal"] if tone == "formal" else lang["closing_friendly"]
        body = (
            f"{lang['greeting']},\n\n"
            "We are pleased to inform you that your investment proposal has been reviewed "
            "and approved. All compliance requirements have been satisfied.\n\n"
            "Your proposal meets all regulatory standards and internal policy requirements. "
            "You may proceed with the next steps as outlined in your agreement.\n\n"
            f"{closing}"
        )
        call_to_action = "Please review the attached approval document and proceed with implementation."
        attachments = ["Approval Certificate", "Next Steps Guide"]

    elif status in ("needs_review", "fail"):
        is_fail = status == "fail"
        subject = lang["subject_fail"] if is_fail else lang["subject_review"]
        urgency_level = "immediate" if is_fail else "high"

        issues = [RedTeamIssue.from_dict(i) for i in review_results.get("issues", [])]
        critical_count = review_results.get("critical_count") or 0
        high_count = review_results.get("high_count") or 0

        counts = ""
        if critical_count > 0:
            counts += f"- {critical_count} critical issue(s) requiring immediate action\n"
        if high_count > 0:
            counts += f"- {high_count} high-priority item(s)\n"
        key_issues = "\n".join(f"{n}. {issue.description}" for n, issue in enumerate(issues[:3], 1))
        if len(issues) > 3:
            key_issues += f"\n... and {len(issues) - 3} more (see attached details)"

        if tone == "urgent":
            closing = lang["closing_urgent"]
        elif tone == "formal":
            closing = lang["closing_formal"]
        else:
            closing = lang["closing_friendly"]

        outcome = (
            "These issues must be resolved before we can proceed with your proposal."
            if is_fail
            else "Please address these items at your earliest convenience."
        )
        body = (
            f"{lang['greeting']},\n\n"
            "Thank you for submitting your investment proposal. Our compliance review has "
            f"identified {len(issues)} item(s) that require your attention:\n\n"
            f"{counts}\nKey Issues:\n{key_issues}\n\n{outcome}\n\n{closing}"
        )
        call_to_action = (
            "Please provide the required information within 24 hours to avoid processing delays."
            if is_fail
            else "Please review the attached details and respond with the requested information."
        )
        attachments = ["Detailed Review Report", "Required Documentation Checklist"]
        if critical_count > 0:
            attachments.append("Critical Issues Summary")

    return ClientCommunication(
        subject=subject,
        body=body,
        tone=tone,
        language=language,
        call_to_action=call_to_action,
        attachment_suggestions=attachments,
        urgency_level=urgency_level,
    ).to_dict()


# ---------------------------------------------------------------------------
# Audit records
# ---------------------------------------------------------------------------

COMPLIANCE_STATUS = {
    "approved": "compliant",
    "rejected": "non_compliant",
    "needs_revision": "conditional",
    "under_negotiation": "conditional",
    "pending_evidence": "under_review",
    "escalated": "under_review",
}

AUDIT_TYPE_LABELS = {
    "compliance_review": "compliance review",
    "contract_review": "contract review",
    "kyc_review": "KYC review",
}

STATUS_ASSESSMENT = {
    "compliant": "This document meets all regulatory and internal policy requirements.",
    "non_compliant": "This document has critical compliance issues that prevent approval.",
    "conditional": "This document may proceed with specified conditions and follow-up requirements.",
    "under_review": "This document is under review pending additional evidence or clarification.",
}

NEXT_STEPS = {
    "approved": [
        "Proceed with implementation as outlined",
        "Archive approval documentation",
        "Schedule periodic review",
    ],
    "rejected": [
        "Address critical compliance violations",
        "Resubmit revised document for review",
        "Escalate to compliance officer if needed",
    ],
    "needs_revision": [
        "Review flagged issues and evidence requests",
        "Provide additional documentation",
        "Resubmit for expedited review",
    ],
    "escalated": [
        "Forward to legal or compliance officer",
        "Hold processing until escalation is resolved",
        "Record the escalation outcome in the audit trail",
    ],
    "under_negotiation": [
        "Share redlined terms with the counterparty",
        "Track negotiation responses",
        "Resubmit the revised contract for review",
    ],
}
DEFAULT_NEXT_STEPS = [
    "Await requested evidence from client",
    "Monitor evidence submission deadline",
    "Resume review upon receipt of information",
]

STATUS_ICONS = {"success": "✅ Success", "error": "❌ Error"}


def _add_months(moment: datetime, months: int) -> datetime:
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _audit_id() -> str:
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=5))
    return f"AUD-{int(time.time() * 1000)}-{suffix}"


async def write_audit(input: dict[str, Any], context: AgentContext) -> dict[str, Any]:
    """Write an audit record with a markdown report and the next review date."""
    if context.mode != AgentMode.FAKE:
        raise NotImplementedError("Real write-audit not implemented yet.")

    audit_id = _audit_id()
    now = datetime.now(timezone.utc)
    timestamp = now.isoformat()
    document_id = input.get("document_id", "")
    activity = input.get("agent_activity") or []
    final_decision = input.get("final_decision", "needs_revision")
    reviewer = input.get("reviewer") or "Automated System"
    flagged = input.get("flagged_issues_count") or 0
    review_label = AUDIT_TYPE_LABELS.get(input.get("auditType", ""), "compliance review")
    compliance_status = COMPLIANCE_STATUS.get(final_decision, "under_review")

    counts = {
        status: sum(1 for a in activity if a.get("status") == status)
        for status in ("success", "error", "blocked")
    }

    summary = (
        f"Document {document_id} underwent {review_label} with {len(activity)} agent operations. "
        f"Final decision: {final_decision.upper()}. "
        f"{flagged} issue(s) flagged. "
    )
    if counts["error"]:
        summary += f"{counts['error']} agent error(s). "
    if counts["blocked"]:
        summary += f"{counts['blocked']} operation(s) blocked. "
    summary += f"Compliance status: {compliance_status}."

    activity_log = "\n".join(
        f"\n### {n}. {a.get('agent_id')}\n"
        f"- **Trace ID:** {a.get('trace_id')}\n"
        f"- **Timestamp:** {a.get('timestamp')}\n"
        f"- **Status:** {STATUS_ICONS.get(a.get('status'), '🚫 Blocked')}\n"
        f"- **Summary:** {a.get('summary')}\n"
        for n, a in enumerate(activity, 1)
    )
    next_steps = "\n".join(f"- {step}" for step in NEXT_STEPS.get(final_decision, DEFAULT_NEXT_STEPS))

    details = f"""# Audit Report: {audit_id}

## Document Information
- **Document ID:** {document_id}
- **Audit Timestamp:** {timestamp}
- **Reviewer:** {reviewer}
- **Final Decision:** {final_decision}
- **Compliance Status:** {compliance_status}

## Agent Activity Log

{activity_log}

## Review Summary

- **Total Agent Operations:** {len(activity)}
- **Successful Operations:** {counts['success']}
- **Failed Operations:** {counts['error']}
- **Blocked Operations:** {counts['blocked']}
- **Issues Flagged:** {flagged}

## Compliance Assessment

**Status:** {compliance_status.upper()}

{STATUS_ASSESSMENT[compliance_status]}

## Next Steps

{next_steps}

---
*This audit record is generated automatically and stored in the compliance database.*
"""

    next_review_date = None
    if final_decision == "approved":
        next_review_date = _add_months(now, 3).isoformat()
    elif final_decision == "pending_evidence":
        next_review_date = (now + timedelta(days=7)).isoformat()

    return AuditEvent(
        audit_id=audit_id,
        timestamp=timestamp,
        document_id=document_id,
        agent_activity=activity,
        final_decision=final_decision,
        compliance_status=compliance_status,
        summary=summary,
        details=details,
        flagged_issues=flagged,
        next_review_date=next_review_date,
        reviewer=reviewer,
    ).to_dict()
