"""
ReviewFlow - Domain models for compliance, contract and KYC review.

Every step output stored by the orchestrator is parsed into one of the
artifact classes at the bottom of this module. ``ArtifactKey`` is the
discriminant: each key maps to exactly one artifact class.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class Severity(str, Enum):
    """Severity of a review issue or policy rule."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RiskLevel(str, Enum):
    """Risk level assigned to a policy mapping."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
    NON_STANDARD = "non_standard"


RISK_RANK = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.NON_STANDARD: 2,
    RiskLevel.CRITICAL: 3,
}


class FactCategory(str, Enum):
    """Category of an extracted fact."""

    ENTITY = "entity"
    AMOUNT = "amount"
    DATE = "date"
    COMMITMENT = "commitment"
    RISK = "risk"
    INSTRUMENT = "instrument"
    OTHER = "other"


class PolicyCategory(str, Enum):
    """Category of a policy rule."""

    KYC = "kyc"
    AML = "aml"
    RISK = "risk"
    DISCLOSURE = "disclosure"
    CONDUCT = "conduct"
    DOCUMENTATION = "documentation"


class IssueType(str, Enum):
    """Type of an adversarial review issue."""

    POLICY_VIOLATION = "policy_violation"
    LOGICAL_ERROR = "logical_error"
    FORMATTING = "formatting"
    TONE = "tone"
    MISSING_INFO = "missing_info"
    # Contract review
    UNLIMITED_LIABILITY = "unlimited_liability"
    MISSING_SIGNATURE = "missing_signature"
    FINANCIAL_EXPOSURE = "financial_exposure"
    TERMINATION_CLAUSE = "termination_clause"
    JURISDICTION_ISSUE = "jurisdiction_issue"


class EvidencePriority(str, Enum):
    """Priority of an evidence request."""

    IMMEDIATE = "immediate"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class EvidenceRequestType(str, Enum):
    """Kind of evidence being requested."""

    DOCUMENTATION = "documentation"
    CLARIFICATION = "clarification"
    APPROVAL = "approval"
    ATTESTATION = "attestation"
    SUPPORTING_DATA = "supporting_data"


class AgentMode(str, Enum):
    """Execution mode of an agent handler."""

    FAKE = "fake"
    REAL = "real"


class StepStatus(str, Enum):
    """Outcome of a single agent or step invocation."""

    SUCCESS = "success"
    ERROR = "error"
    BLOCKED = "blocked"


class PlanStepStatus(str, Enum):
    """Resolved status of a declared flow step in the response plan."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class EditMagnitude(str, Enum):
    """How much of a section changed in one edit."""

    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"


class ReviewMode(str, Enum):
    """Breadth of a review decided by the scope planner."""

    SECTION_ONLY = "section-only"
    CROSS_SECTION = "cross-section"
    FULL_DOCUMENT = "full-document"


class CheckStatus(str, Enum):
    """Result status of a document-wide check."""

    PASS = "pass"
    WARNING = "warning"
    FAIL = "fail"


class TransportKind(str, Enum):
    """Execution path used to run a skill."""

    LOCAL = "local"
    REMOTE = "remote"


class Coverage(str, Enum):
    """Coverage of a KYC topic by the supplied documents."""

    COMPLETE = "complete"
    PARTIAL = "partial"
    MISSING = "missing"


class ArtifactKey(str, Enum):
    """Keys under which step outputs are stored during a run."""

    FACTS = "facts"
    POLICY_MAPPINGS = "policy_mappings"
    REVIEW_ISSUES = "review_issues"
    EVIDENCE_REQUESTS = "evidence_requests"
    CLIENT_COMMUNICATION = "client_communication"
    AUDIT_LOG = "audit_log"
    TOPIC_SECTIONS = "topic_sections"
    RISK_TRIAGE = "risk_triage"


# ---------------------------------------------------------------------------
# Evidence and facts
# ---------------------------------------------------------------------------


@dataclass
class EvidenceAnchor:
    """Location of a text snippet that supports a fact or issue."""

    snippet: str
    doc_id: Optional[str] = None
    section_id: Optional[str] = None
    section_title: Optional[str] = None
    char_range: Optional[tuple[int, int]] = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"snippet": self.snippet}
        if self.doc_id is not None:
            result["doc_id"] = self.doc_id
        if self.section_id is not None:
            result["section_id"] = self.section_id
        if self.section_title is not None:
            result["section_title"] = self.section_title
        if self.char_range is not None:
            result["char_range"] = {"start": self.char_range[0], "end": self.char_range[1]}
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EvidenceAnchor":
        char_range = data.get("char_range")
        return cls(
            snippet=data.get("snippet", ""),
            doc_id=data.get("doc_id"),
            section_id=data.get("section_id"),
            section_title=data.get("section_title"),
            char_range=(char_range["start"], char_range["end"]) if char_range else None,
        )


@dataclass
class Fact:
    """A single fact extracted from a document section."""

    category: FactCategory
    text: str
    confidence: float
    source: EvidenceAnchor

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "text": self.text,
            "confidence": self.confidence,
            "source": self.source.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Fact":
        return cls(
            category=FactCategory(data.get("category", "other")),
            text=data.get("text", ""),
            confidence=data.get("confidence", 0.0),
            source=EvidenceAnchor.from_dict(data.get("source", {})),
        )


# ---------------------------------------------------------------------------
# Policy system
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PolicyRule:
    """A compliance policy rule with its matching keywords."""

    id: str
    title: str
    category: PolicyCategory
    requirement_text: str
    keywords: tuple[str, ...]
    severity: Severity

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category.value,
            "requirement_text": self.requirement_text,
            "keywords": list(self.keywords),
            "severity": self.severity.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PolicyRule":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            category=PolicyCategory(data.get("category", "documentation")),
            requirement_text=data.get("requirement_text", ""),
            keywords=tuple(data.get("keywords", [])),
            severity=Severity(data.get("severity", "low")),
        )


@dataclass
class PolicyMapping:
    """A fact mapped onto the policy rules it touches."""

    fact: Fact
    policy_rules: list[PolicyRule]
    risk_level: RiskLevel
    reason: str
    policy_rule: PolicyRule

    def to_dict(self) -> dict[str, Any]:
        return {
            "fact": self.fact.to_dict(),
            "policy_rules": [r.to_dict() for r in self.policy_rules],
            "risk_level": self.risk_level.value,
            "reason": self.reason,
            "policy_rule": self.policy_rule.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PolicyMapping":
        return cls(
            fact=Fact.from_dict(data.get("fact", {})),
            policy_rules=[PolicyRule.from_dict(r) for r in data.get("policy_rules", [])],
            risk_level=RiskLevel(data.get("risk_level", "low")),
            reason=data.get("reason", ""),
            policy_rule=PolicyRule.from_dict(data["policy_rule"]),
        )


# ---------------------------------------------------------------------------
# Review issues and evidence
# ---------------------------------------------------------------------------


@dataclass
class RedTeamIssue:
    """An issue raised by the adversarial review."""

    id: str
    type: IssueType
    severity: Severity
    description: str
    suggested_fix: str
    affected_text: Optional[str] = None
    policy_refs: list[str] = field(default_factory=list)
    source: Optional[EvidenceAnchor] = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "severity": self.severity.value,
            "description": self.description,
            "suggested_fix": self.suggested_fix,
            "policy_refs": self.policy_refs,
        }
        if self.affected_text is not None:
            result["affected_text"] = self.affected_text
        if self.source is not None:
            result["source"] = self.source.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RedTeamIssue":
        return cls(
            id=data.get("id", ""),
            type=IssueType(data.get("type", "missing_info")),
            severity=Severity(data.get("severity", "low")),
            description=data.get("description", ""),
            suggested_fix=data.get("suggested_fix", ""),
            affected_text=data.get("affected_text"),
            policy_refs=data.get("policy_refs") or [],
            source=EvidenceAnchor.from_dict(data["source"]) if data.get("source") else None,
        )


@dataclass
class EvidenceRequest:
    """A request for additional evidence sent to a client or officer."""

    id: str
    request_type: EvidenceRequestType
    request_text: str
    reason: str
    priority: EvidencePriority
    required_from: str
    related_issue_ids: list[str] = field(default_factory=list)
    deadline: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "request_type": self.request_type.value,
            "request_text": self.request_text,
            "reason": self.reason,
            "priority": self.priority.value,
            "required_from": self.required_from,
            "related_issue_ids": self.related_issue_ids,
        }
        if self.deadline is not None:
            result["deadline"] = self.deadline
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EvidenceRequest":
        return cls(
            id=data.get("id", ""),
            request_type=EvidenceRequestType(data.get("request_type", "documentation")),
            request_text=data.get("request_text", ""),
            reason=data.get("reason", ""),
            priority=EvidencePriority(data.get("priority", "medium")),
            required_from=data.get("required_from", ""),
            related_issue_ids=data.get("related_issue_ids") or [],
            deadline=data.get("deadline"),
        )


# ---------------------------------------------------------------------------
# KYC topics
# ---------------------------------------------------------------------------


@dataclass
class EvidenceRef:
    """Reference from a KYC topic back to the document paragraph it came from."""

    doc_name: str
    snippet: str
    page_or_section: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "docName": self.doc_name,
            "pageOrSection": self.page_or_section,
            "snippet": self.snippet,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EvidenceRef":
        return cls(
            doc_name=data.get("docName", ""),
            snippet=data.get("snippet", ""),
            page_or_section=data.get("pageOrSection"),
        )


@dataclass
class TopicSection:
    """Document content assembled under one KYC topic."""

    topic_id: str
    content: str = ""
    evidence_refs: list[EvidenceRef] = field(default_factory=list)
    coverage: Coverage = Coverage.MISSING

    def to_dict(self) -> dict[str, Any]:
        return {
            "topicId": self.topic_id,
            "content": self.content,
            "evidenceRefs": [r.to_dict() for r in self.evidence_refs],
            "coverage": self.coverage.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TopicSection":
        return cls(
            topic_id=data.get("topicId", "other"),
            content=data.get("content", ""),
            evidence_refs=[EvidenceRef.from_dict(r) for r in data.get("evidenceRefs", [])],
            coverage=Coverage(data.get("coverage", "missing")),
        )


# ---------------------------------------------------------------------------
# Typed artifacts
# ---------------------------------------------------------------------------


@dataclass
class FactsArtifact:
    """Output of fact extraction."""

    facts: list[Fact]
    summary: str = ""
    total_confidence: float = 0.0

    key = ArtifactKey.FACTS

    def to_dict(self) -> dict[str, Any]:
        return {
            "facts": [f.to_dict() for f in self.facts],
            "summary": self.summary,
            "total_confidence": self.total_confidence,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FactsArtifact":
        return cls(
            facts=[Fact.from_dict(f) for f in data.get("facts", [])],
            summary=data.get("summary", ""),
            total_confidence=data.get("total_confidence", 0.0),
        )


@dataclass
class PolicyMappingsArtifact:
    """Output of policy (or contract standard) mapping."""

    mappings: list[PolicyMapping]
    flagged_count: int = 0
    highest_risk_level: RiskLevel = RiskLevel.LOW

    key = ArtifactKey.POLICY_MAPPINGS

    def to_dict(self) -> dict[str, Any]:
        return {
            "mappings": [m.to_dict() for m in self.mappings],
            "flagged_count": self.flagged_count,
            "highest_risk_level": self.highest_risk_level.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PolicyMappingsArtifact":
        return cls(
            mappings=[PolicyMapping.from_dict(m) for m in data.get("mappings", [])],
            flagged_count=data.get("flagged_count", 0),
            highest_risk_level=RiskLevel(data.get("highest_risk_level", "low")),
        )


@dataclass
class ReviewIssuesArtifact:
    """Output of the adversarial review."""

    issues: list[RedTeamIssue]
    overall_status: str = "pass"
    critical_count: int = 0
    high_count: int = 0

    key = ArtifactKey.REVIEW_ISSUES

    def to_dict(self) -> dict[str, Any]:
        return {
            "issues": [i.to_dict() for i in self.issues],
            "overall_status": self.overall_status,
            "critical_count": self.critical_count,
            "high_count": self.high_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReviewIssuesArtifact":
        return cls(
            issues=[RedTeamIssue.from_dict(i) for i in data.get("issues", [])],
            overall_status=data.get("overall_status", "pass"),
            critical_count=data.get("critical_count", 0),
            high_count=data.get("high_count", 0),
        )


@dataclass
class EvidenceRequestsArtifact:
    """Output of evidence request generation."""

    requests: list[EvidenceRequest]
    total_requests: int = 0
    immediate_count: int = 0

    key = ArtifactKey.EVIDENCE_REQUESTS

    def to_dict(self) -> dict[str, Any]:
        return {
            "requests": [r.to_dict() for r in self.requests],
            "total_requests": self.total_requests,
            "immediate_count": self.immediate_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EvidenceRequestsArtifact":
        requests = [EvidenceRequest.from_dict(r) for r in data.get("requests", [])]
        return cls(
            requests=requests,
            total_requests=data.get("total_requests", len(requests)),
            immediate_count=data.get("immediate_count", 0),
        )


@dataclass
class ClientCommunication:
    """A drafted message to the client."""

    subject: str
    body: str
    tone: str
    language: str
    call_to_action: str
    attachment_suggestions: list[str] = field(default_factory=list)
    urgency_level: str = "medium"

    key = ArtifactKey.CLIENT_COMMUNICATION

    def to_dict(self) -> dict[str, Any]:
        return {
            "subject": self.subject,
            "body": self.body,
            "tone": self.tone,
            "language": self.language,
            "call_to_action": self.call_to_action,
            "attachment_suggestions": self.attachment_suggestions,
            "urgency_level": self.urgency_level,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClientCommunication":
        return cls(
            subject=data.get("subject", ""),
            body=data.get("body", ""),
            tone=data.get("tone", "formal"),
            language=data.get("language", "english"),
            call_to_action=data.get("call_to_action", ""),
            attachment_suggestions=data.get("attachment_suggestions") or [],
            urgency_level=data.get("urgency_level", "medium"),
        )


@dataclass
class AuditEvent:
    """An audit record summarizing one review run."""

    audit_id: str
    timestamp: str
    document_id: str
    agent_activity: list[dict[str, Any]]
    final_decision: str
    compliance_status: str
    summary: str
    details: str
    flagged_issues: int = 0
    next_review_date: Optional[str] = None
    reviewer: Optional[str] = None

    key = ArtifactKey.AUDIT_LOG

    def to_dict(self) -> dict[str, Any]:
        return {
            "audit_id": self.audit_id,
            "timestamp": self.timestamp,
            "document_id": self.document_id,
            "agent_activity": self.agent_activity,
            "final_decision": self.final_decision,
            "compliance_status": self.compliance_status,
            "summary": self.summary,
            "details": self.details,
            "flagged_issues": self.flagged_issues,
            "next_review_date": self.next_review_date,
            "reviewer": self.reviewer,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AuditEvent":
        return cls(
            audit_id=data.get("audit_id", ""),
            timestamp=data.get("timestamp", ""),
            document_id=data.get("document_id", ""),
            agent_activity=data.get("agent_activity") or [],
            final_decision=data.get("final_decision", "needs_revision"),
            compliance_status=data.get("compliance_status", "under_review"),
            summary=data.get("summary", ""),
            details=data.get("details", ""),
            flagged_issues=data.get("flagged_issues", 0),
            next_review_date=data.get("next_review_date"),
            reviewer=data.get("reviewer"),
        )


@dataclass
class TopicSectionsArtifact:
    """Output of KYC topic assembly."""

    topic_sections: list[TopicSection]

    key = ArtifactKey.TOPIC_SECTIONS

    def to_dict(self) -> dict[str, Any]:
        return {"topicSections": [s.to_dict() for s in self.topic_sections]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TopicSectionsArtifact":
        return cls(
            topic_sections=[TopicSection.from_dict(s) for s in data.get("topicSections", [])]
        )


@dataclass
class RiskTriageArtifact:
    """Output of KYC risk triage."""

    risk_score: int
    route_path: str
    triage_reasons: list[str] = field(default_factory=list)
    risk_breakdown: dict[str, int] = field(default_factory=dict)

    key = ArtifactKey.RISK_TRIAGE

    @property
    def degraded(self) -> bool:
        return "[degraded]" in self.triage_reasons

    def to_dict(self) -> dict[str, Any]:
        return {
            "riskScore": self.risk_score,
            "triageReasons": self.triage_reasons,
            "routePath": self.route_path,
            "riskBreakdown": self.risk_breakdown,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RiskTriageArtifact":
        return cls(
            risk_score=data.get("riskScore", 0),
            route_path=data.get("routePath", "fast"),
            triage_reasons=data.get("triageReasons") or [],
            risk_breakdown=data.get("riskBreakdown") or {},
        )


Artifact = Union[
    FactsArtifact,
    PolicyMappingsArtifact,
    ReviewIssuesArtifact,
    EvidenceRequestsArtifact,
    ClientCommunication,
    AuditEvent,
    TopicSectionsArtifact,
    RiskTriageArtifact,
]

ARTIFACT_TYPES: dict[ArtifactKey, type] = {
    ArtifactKey.FACTS: FactsArtifact,
    ArtifactKey.POLICY_MAPPINGS: PolicyMappingsArtifact,
    ArtifactKey.REVIEW_ISSUES: ReviewIssuesArtifact,
    ArtifactKey.EVIDENCE_REQUESTS: EvidenceRequestsArtifact,
    ArtifactKey.CLIENT_COMMUNICATION: ClientCommunication,
    ArtifactKey.AUDIT_LOG: AuditEvent,
    ArtifactKey.TOPIC_SECTIONS: TopicSectionsArtifact,
    ArtifactKey.RISK_TRIAGE: RiskTriageArtifact,
}


def parse_artifact(key: ArtifactKey, output: dict[str, Any]) -> Artifact:
    """Parse a raw step output into the artifact class registered for ``key``."""
    return ARTIFACT_TYPES[ArtifactKey(key)].from_dict(output)
