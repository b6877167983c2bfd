"""
ReviewFlow - Review pipeline handlers: fact extraction, policy mapping,
adversarial review and evidence requests.
"""

import re
from datetime import timedelta
from typing import Any, Optional

from ...models import (
    RISK_RANK,
    AgentMode,
    EvidenceAnchor,
    EvidencePriority,
    EvidenceRequest,
    EvidenceRequestType,
    Fact,
    FactCategory,
    IssueType,
    PolicyMapping,
    RedTeamIssue,
    RiskLevel,
    Severity,
)
from ...policy import INFORMATIONAL_RULE, find_matching_policies, find_matching_standards
from ..base import AgentContext

# ---------------------------------------------------------------------------
# Fact extraction
# ---------------------------------------------------------------------------

ENTITY_PATTERNS = [
    (re.compile(r"tobacco\s+industry", re.I), "tobacco industry"),
    (re.compile(r"investment\s+background", re.I), "investment background"),
    (re.compile(r"risk\s+assessment", re.I), "risk assessment"),
    (re.compile(r"technical\s+strategy", re.I), "technical strategy"),
]
AMOUNT_PATTERN = re.compile(r"\$[\d,]+(?:\.\d{2})?")
DATE_PATTERN = re.compile(
    r"\b(?:\d{1,2}[-/]\d{1,2}[-/]\d{2,4}|\d{4}[-/]\d{1,2}[-/]\d{1,2}|"
    r"(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\s+\d{1,2},?\s+\d{4})",
    re.I,
)
RISK_PATTERN = re.compile(r"risk|volatile|uncertain", re.I)
COMMITMENT_KEYWORDS = ["will", "commit", "agree to", "undertake", "guarantee"]


def _snippet(content: str, start: int, end: int) -> str:
    return content[max(0, start) : min(len(content), end)]


async def extract_facts(input: dict[str, Any], context: AgentContext) -> dict[str, Any]:
    """Extract entities, amounts, dates, risk mentions and commitments with evidence anchors."""
    if context.mode != AgentMode.FAKE:
        raise NotImplementedError("Real extract-facts not implemented yet.")

    content = input.get("sectionContent", "")
    title = input.get("sectionTitle", "")
    lower = content.lower()
    facts: list[Fact] = []

    def anchor(snippet: str, start: Optional[int] = None, end: Optional[int] = None) -> EvidenceAnchor:
        return EvidenceAnchor(
            snippet=snippet,
            doc_id=input.get("docId"),
            section_id=input.get("sectionId"),
            section_title=title,
            char_range=(start, end) if start is not None else None,
        )

    for pattern, text in ENTITY_PATTERNS:
        for match in pattern.finditer(content):
            start, end = match.span()
            facts.append(
                Fact(FactCategory.ENTITY, text, 0.95, anchor(_snippet(content, start - 20, end + 20), start, end))
            )

    for match in AMOUNT_PATTERN.finditer(content):
        start, end = match.span()
        facts.append(
            Fact(
                FactCategory.AMOUNT,
                f"Financial amount: {match.group(0)}",
                0.98,
                anchor(_snippet(content, start - 30, end + 30), start, end),
            )
        )

    for match in DATE_PATTERN.finditer(content):
        start, end = match.span()
        facts.append(
            Fact(
                FactCategory.DATE,
                f"Date reference: {match.group(0)}",
                0.90,
                anchor(_snippet(content, start - 25, end + 25), start, end),
            )
        )

    risk_match = RISK_PATTERN.search(content)
    if risk_match:
        index = risk_match.start()
        facts.append(
            Fact(
                FactCategory.RISK,
                "Risk factor mentioned",
                0.85,
                anchor(_snippet(content, index - 40, index + 60)),
            )
        )

    for keyword in COMMITMENT_KEYWORDS:
        index = lower.find(keyword)
        if index >= 0:
            facts.append(
                Fact(
                    FactCategory.COMMITMENT,
                    f'Commitment statement: "{keyword}"',
                    0.80,
                    anchor(_snippet(content, index - 30, index + 70)),
                )
            )

    total_confidence = sum(f.confidence for f in facts) / len(facts) if facts else 0
    return {
        "facts": [f.to_dict() for f in facts],
        "summary": f'Extracted {len(facts)} facts from "{title}"',
        "total_confidence": round(total_confidence, 2),
    }


# ---------------------------------------------------------------------------
# Policy mapping
# ---------------------------------------------------------------------------

CLAUSE_SPLIT = re.compile(r"(?<=[.;])\s+|\n+")


def _risk_from_policies(fact: Fact, policies: list) -> RiskLevel:
    severities = {p.severity for p in policies}
    if fact.category == FactCategory.RISK and Severity.CRITICAL in severities:
        return RiskLevel.CRITICAL
    if "tobacco" in fact.text.lower():
        return RiskLevel.CRITICAL
    if Severity.CRITICAL in severities:
        return RiskLevel.CRITICAL
    if Severity.HIGH in severities:
        return RiskLevel.HIGH
    if Severity.MEDIUM in severities:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def _informational(fact: Fact) -> PolicyMapping:
    return PolicyMapping(
        fact=fact,
        policy_rules=[],
        risk_level=RiskLevel.LOW,
        reason="No specific policy match, informational fact only",
        policy_rule=INFORMATIONAL_RULE,
    )


def _map_to_policies(fact: Fact) -> PolicyMapping:
    matched = find_matching_policies(f"{fact.text} {fact.source.snippet}")
    if not matched:
        return _informational(fact)
    titles = ", ".join(p.title for p in matched)
    return PolicyMapping(
        fact=fact,
        policy_rules=matched,
        risk_level=_risk_from_policies(fact, matched),
        reason=f'Fact "{fact.text}" matches policies: {titles}',
        policy_rule=matched[0],
    )


def _map_to_standards(fact: Fact, text: str) -> Optional[PolicyMapping]:
    standards = find_matching_standards(text)
    if not standards:
        return None
    assessed = [(s, s.assess(text)) for s in standards]
    primary, risk_level = max(assessed, key=lambda pair: RISK_RANK[pair[1]])
    titles = ", ".join(s.title for s, _ in assessed)
    return PolicyMapping(
        fact=fact,
        policy_rules=[s.as_policy_rule(level) for s, level in assessed],
        risk_level=risk_level,
        reason=f'Fact "{fact.text}" compared against contract standards: {titles}',
        policy_rule=primary.as_policy_rule(risk_level),
    )


def _clause_facts(input: dict[str, Any]) -> list[Fact]:
    """Split section text into clauses so contract wording is mapped even without extracted facts."""
    content = input.get("sectionContent", "")
    facts = []
    for clause in CLAUSE_SPLIT.split(content):
        clause = clause.strip()
        if len(clause) < 15:
            continue
        facts.append(
            Fact(
                category=FactCategory.OTHER,
                text=f"Contract clause: {clause[:80]}",
                confidence=0.75,
                source=EvidenceAnchor(
                    snippet=clause,
                    section_title=input.get("sectionTitle"),
                ),
            )
        )
    return facts


async def map_policy(input: dict[str, Any], context: AgentContext) -> dict[str, Any]:
    """
    Map extracted facts to policy rules.

    With ``matchingStrategy == "contract_template"`` facts and section
    clauses are compared against the contract standards instead of the
    policy corpus.
    """
    if context.mode != AgentMode.FAKE:
        raise NotImplementedError("Real map-policy not implemented yet.")

    facts = [Fact.from_dict(f) for f in input.get("facts", [])]
    mappings: list[PolicyMapping] = []

    if input.get("matchingStrategy") == "contract_template":
        for fact in facts:
            mapping = _map_to_standards(fact, f"{fact.text} {fact.source.snippet}")
            mappings.append(mapping or _informational(fact))
        for clause in _clause_facts(input):
            mapping = _map_to_standards(clause, clause.source.snippet)
            if mapping:
                mappings.append(mapping)
    else:
        mappings = [_map_to_policies(fact) for fact in facts]

    flagged = [
        m
        for m in mappings
        if m.risk_level in (RiskLevel.MEDIUM, RiskLevel.HIGH, RiskLevel.CRITICAL)
    ]
    highest = RiskLevel.LOW
    for mapping in mappings:
        if RISK_RANK[mapping.risk_level] > RISK_RANK[highest]:
            highest = mapping.risk_level

    return {
        "mappings": [m.to_dict() for m in mappings],
        "flagged_count": len(flagged),
        "highest_risk_level": highest.value,
    }


# ---------------------------------------------------------------------------
# Adversarial review
# ---------------------------------------------------------------------------

INFORMAL_WORDS = ["gonna", "wanna", "yeah", "nope", "cool", "awesome"]
UNLIMITED_LIABILITY_PATTERN = re.compile(
    r"unlimited\s+liability|liability\s+(?:is\s+|shall\s+be\s+)?unlimited|"
    r"without\s+(?:any\s+)?(?:cap|limit)|any\s+and\s+all\s+(?:claims|damages)",
    re.I,
)
SIGNATURE_MARKERS = ["signature", "signed", "executed by", "sign"]
PENALTY_MARKERS = ["penalty", "penalties", "liquidated damages"]
PREPAYMENT_MARKERS = ["advance payment", "non-refundable", "upfront"]
TERMINATION_MARKERS = ["immediate", "at will", "without notice", "no notice"]
JURISDICTION_MARKERS = ["foreign jurisdiction", "waive jury trial", "one-sided venue", "exclusive jurisdiction"]


class _IssueCollector:
    def __init__(self, input: dict[str, Any]):
        self.content = input.get("sectionContent", "")
        self.section_id = input.get("sectionId")
        self.section_title = input.get("sectionTitle")
        self.issues: list[RedTeamIssue] = []

    def anchor(self, start: int = 0, end: int = 100, char_range=None) -> EvidenceAnchor:
        return EvidenceAnchor(
            snippet=_snippet(self.content, start, end),
            section_id=self.section_id,
            section_title=self.section_title,
            char_range=char_range,
        )

    def add(self, type: IssueType, severity: Severity, description: str, suggested_fix: str, **kwargs: Any) -> None:
        kwargs.setdefault("source", self.anchor())
        self.issues.append(
            RedTeamIssue(
                id=f"RT-{len(self.issues) + 1}",
                type=type,
                severity=severity,
                description=description,
                suggested_fix=suggested_fix,
                **kwargs,
            )
        )


def _compliance_checks(found: _IssueCollector, mappings: list[PolicyMapping], check_signature: bool) -> None:
    content = found.content
    lower = content.lower()

    if "tobacco" in lower:
        match = re.search(r"tobacco\s+industry", content, re.I)
        start = match.start() if match else lower.find("tobacco")
        found.add(
            IssueType.POLICY_VIOLATION,
            Severity.CRITICAL,
            "Prohibited industry reference detected: tobacco industry",
            "Remove reference to tobacco industry or seek executive approval per policy COND-008",
            affected_text="tobacco industry",
            policy_refs=["COND-008"],
            source=found.anchor(start - 40, start + 60, (start, start + 7)),
        )

    if "invest" in lower and "risk" not in lower:
        found.add(
            IssueType.MISSING_INFO,
            Severity.HIGH,
            "Investment proposal lacks risk disclosure",
            "Add comprehensive risk assessment section per policy RISK-007",
            policy_refs=["RISK-007", "DISC-012"],
        )

    amounts = re.findall(r"\$[\d,]+", content)
    if amounts and not any(word in lower for word in ("fee", "cost", "investment", "fund")):
        found.add(
            IssueType.MISSING_INFO,
            Severity.MEDIUM,
            "Financial amounts mentioned without sufficient context or disclosure",
            "Provide clear context for all financial amounts and include fee disclosures per DISC-012",
            affected_text=", ".join(amounts),
            policy_refs=["DISC-012"],
            source=found.anchor(0, 150),
        )

    informal = [word for word in INFORMAL_WORDS if word in lower]
    if informal:
        found.add(
            IssueType.TONE,
            Severity.LOW,
            "Informal language detected in professional document",
            "Replace informal language with professional terminology",
            affected_text=", ".join(informal),
        )

    for mapping in mappings:
        if mapping.risk_level in (RiskLevel.CRITICAL, RiskLevel.HIGH):
            found.add(
                IssueType.POLICY_VIOLATION,
                Severity.CRITICAL if mapping.risk_level == RiskLevel.CRITICAL else Severity.HIGH,
                f"Policy concern: {mapping.reason}",
                "Address policy requirements: " + ", ".join(p.title for p in mapping.policy_rules),
                affected_text=mapping.fact.text,
                policy_refs=[p.id for p in mapping.policy_rules],
                source=mapping.fact.source,
            )

    if (
        check_signature
        and "sign" not in lower
        and "acknowledge" not in lower
        and ("proposal" in lower or "agreement" in lower)
    ):
        found.add(
            IssueType.MISSING_INFO,
            Severity.HIGH,
            "Document appears to require client acknowledgment but signature/acknowledgment "
            "section is missing",
            "Add client signature and acknowledgment section per DOC-025",
            policy_refs=["DOC-025"],
        )


def _contract_checks(found: _IssueCollector) -> None:
    content = found.content
    lower = content.lower()

    match = UNLIMITED_LIABILITY_PATTERN.search(content)
    if match:
        found.add(
            IssueType.UNLIMITED_LIABILITY,
            Severity.CRITICAL,
            "Unlimited liability clause detected",
            "Negotiate a liability cap limited to fees paid in the preceding 12 months per STD-004",
            affected_text=match.group(0),
            policy_refs=["STD-001", "STD-004"],
            source=found.anchor(match.start() - 40, match.end() + 40, match.span()),
        )

    if not any(marker in lower for marker in SIGNATURE_MARKERS):
        found.add(
            IssueType.MISSING_SIGNATURE,
            Severity.HIGH,
            "Contract has no signature or execution block",
            "Add an execution block signed by authorized representatives of both parties per STD-010",
            policy_refs=["STD-010"],
        )

    penalties = [m for m in PENALTY_MARKERS if m in lower]
    if penalties:
        found.add(
            IssueType.FINANCIAL_EXPOSURE,
            Severity.HIGH,
            "Penalty or liquidated damages clause creates financial exposure",
            "Cap penalties and tie liquidated damages to a reasonable pre-estimate of loss",
            affected_text=", ".join(penalties),
            policy_refs=["STD-003"],
        )
    prepayments = [m for m in PREPAYMENT_MARKERS if m in lower]
    if prepayments:
        found.add(
            IssueType.FINANCIAL_EXPOSURE,
            Severity.MEDIUM,
            "Upfront or non-refundable payment terms",
            "Move to milestone-based or net 30 payment terms per STD-003",
            affected_text=", ".join(prepayments),
            policy_refs=["STD-003"],
        )

    if "terminat" in lower:
        markers = [m for m in TERMINATION_MARKERS if m in lower]
        if markers:
            found.add(
                IssueType.TERMINATION_CLAUSE,
                Severity.MEDIUM,
                "Termination clause allows immediate or unilateral termination",
                "Require at least 60 days written notice for termination per STD-002",
                affected_text=", ".join(markers),
                policy_refs=["STD-002"],
            )

    jurisdiction = [m for m in JURISDICTION_MARKERS if m in lower]
    if jurisdiction:
        found.add(
            IssueType.JURISDICTION_ISSUE,
            Severity.LOW,
            "Governing law or venue deviates from standard terms",
            "Agree on mutual jurisdiction with arbitration or mediation first per STD-006",
            affected_text=", ".join(jurisdiction),
            policy_refs=["STD-006"],
        )


async def redteam_review(input: dict[str, Any], context: AgentContext) -> dict[str, Any]:
    """
    Adversarial review of a section.

    ``reviewMode == "contract_risk"`` adds contract issue types and replaces
    the client-acknowledgment check with the contract signature check.
    """
    if context.mode != AgentMode.FAKE:
        raise NotImplementedError("Real redteam-review not implemented yet.")

    contract_mode = input.get("reviewMode") == "contract_risk"
    mappings = [PolicyMapping.from_dict(m) for m in input.get("policyMappings", [])]

    found = _IssueCollector(input)
    _compliance_checks(found, mappings, check_signature=not contract_mode)
    if contract_mode:
        _contract_checks(found)

    critical_count = sum(1 for i in found.issues if i.severity == Severity.CRITICAL)
    high_count = sum(1 for i in found.issues if i.severity == Severity.HIGH)
    if critical_count:
        overall_status = "fail"
    elif high_count:
        overall_status = "needs_review"
    else:
        overall_status = "pass"

    return {
        "issues": [i.to_dict() for i in found.issues],
        "overall_status": overall_status,
        "critical_count": critical_count,
        "high_count": high_count,
    }


# ---------------------------------------------------------------------------
# Evidence requests
# ---------------------------------------------------------------------------

DEADLINE_DAYS = {
    EvidencePriority.IMMEDIATE: 1,
    EvidencePriority.HIGH: 3,
    EvidencePriority.MEDIUM: 7,
    EvidencePriority.LOW: 14,
}


def _priority_by_severity(severity: Severity) -> EvidencePriority:
    if severity == Severity.CRITICAL:
        return EvidencePriority.IMMEDIATE
    if severity == Severity.HIGH:
        return EvidencePriority.HIGH
    return EvidencePriority.MEDIUM


def _request_for_issue(issue: RedTeamIssue) -> tuple:
    """Return ``(request_type, priority, required_from, request_text, reason)``."""
    desc = issue.description
    critical = issue.severity == Severity.CRITICAL

    if issue.type == IssueType.POLICY_VIOLATION:
        return (
            EvidenceRequestType.APPROVAL if critical else EvidenceRequestType.DOCUMENTATION,
            EvidencePriority.IMMEDIATE if critical else EvidencePriority.HIGH,
            "Compliance Officer" if critical else "Client",
            f"Please provide documentation or approval to address: {desc}",
            f"Policy violation detected: {', '.join(issue.policy_refs)}",
        )
    if issue.type == IssueType.MISSING_INFO:
        return (
            EvidenceRequestType.DOCUMENTATION,
            _priority_by_severity(issue.severity),
            "Client",
            f"Please provide the following information: {desc}",
            "Required information is missing from the document",
        )
    if issue.type == IssueType.LOGICAL_ERROR:
        return (
            EvidenceRequestType.CLARIFICATION,
            EvidencePriority.HIGH,
            "Client",
            f"Please clarify or correct: {desc}",
            "Logical inconsistency detected",
        )
    if issue.type == IssueType.FORMATTING:
        return (
            EvidenceRequestType.CLARIFICATION,
            EvidencePriority.LOW,
            "Document Preparer",
            f"Please correct formatting issue: {desc}",
            "Document formatting does not meet standards",
        )
    if issue.type == IssueType.TONE:
        return (
            EvidenceRequestType.CLARIFICATION,
            EvidencePriority.LOW,
            "Document Preparer",
            f"Please revise language: {desc}",
            "Document tone is inappropriate for context",
        )
    if issue.type == IssueType.UNLIMITED_LIABILITY:
        return (
            EvidenceRequestType.APPROVAL,
            EvidencePriority.IMMEDIATE,
            "Legal Counsel",
            f"Please provide legal sign-off or a negotiated liability cap for: {desc}",
            "Unlimited liability exposure requires legal approval",
        )
    if issue.type == IssueType.MISSING_SIGNATURE:
        return (
            EvidenceRequestType.ATTESTATION,
            EvidencePriority.HIGH,
            "Authorized Signatory",
            f"Please provide a signed signature page: {desc}",
            "Contract is not executed by authorized signatories",
        )
    if issue.type == IssueType.FINANCIAL_EXPOSURE:
        return (
            EvidenceRequestType.DOCUMENTATION,
            _priority_by_severity(issue.severity),
            "Finance Department",
            f"Please provide a financial impact assessment for: {desc}",
            "Financial exposure exceeds standard terms",
        )
    if issue.type == IssueType.TERMINATION_CLAUSE:
        return (
            EvidenceRequestType.CLARIFICATION,
            EvidencePriority.MEDIUM,
            "Counterparty",
            f"Please clarify termination rights: {desc}",
            "Termination terms deviate from the standard notice period",
        )
    return (
        EvidenceRequestType.CLARIFICATION,
        EvidencePriority.LOW,
        "Legal Counsel",
        f"Please confirm acceptability of: {desc}",
        "Governing law or venue deviates from standard terms",
    )


async def request_evidence(input: dict[str, Any], context: AgentContext) -> dict[str, Any]:
    """Generate one evidence request per issue plus one per missing-evidence item."""
    if context.mode != AgentMode.FAKE:
        raise NotImplementedError("Real request-evidence not implemented yet.")

    now = context.timestamp
    requests: list[EvidenceRequest] = []

    def next_id() -> str:
        return f"EVR-{len(requests) + 1:04d}"

    for issue in (RedTeamIssue.from_dict(i) for i in input.get("issues", [])):
        request_type, priority, required_from, text, reason = _request_for_issue(issue)
        requests.append(
            EvidenceRequest(
                id=next_id(),
                request_type=request_type,
                request_text=text,
                reason=reason,
                priority=priority,
                required_from=required_from,
                related_issue_ids=[issue.id],
                deadline=(now + timedelta(days=DEADLINE_DAYS[priority])).isoformat(),
            )
        )

    for evidence in input.get("missing_evidence", []):
        requests.append(
            EvidenceRequest(
                id=next_id(),
                request_type=EvidenceRequestType.SUPPORTING_DATA,
                request_text=f"Please provide: {evidence}",
                reason="Required supporting evidence is missing",
                priority=EvidencePriority.MEDIUM,
                required_from="Client",
                related_issue_ids=[],
                deadline=(now + timedelta(days=7)).isoformat(),
            )
        )

    return {
        "requests": [r.to_dict() for r in requests],
        "total_requests": len(requests),
        "immediate_count": sum(1 for r in requests if r.priority == EvidencePriority.IMMEDIATE),
    }
