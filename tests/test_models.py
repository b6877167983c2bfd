"""
Unit tests for the ReviewFlow domain models and typed artifacts.
"""

import pytest

from reviewflow.models import (
    ARTIFACT_TYPES,
    RISK_RANK,
    ArtifactKey,
    AuditEvent,
    Coverage,
    EvidenceAnchor,
    EvidenceRequest,
    EvidenceRequestsArtifact,
    Fact,
    FactCategory,
    FactsArtifact,
    IssueType,
    PolicyMapping,
    PolicyMappingsArtifact,
    RedTeamIssue,
    ReviewIssuesArtifact,
    RiskLevel,
    RiskTriageArtifact,
    Severity,
    TopicSection,
    TopicSectionsArtifact,
    parse_artifact,
)


class TestEnums:
    """Tests for the string enums."""

    def test_values_are_strings(self):
        assert Severity.CRITICAL == "critical"
        assert RiskLevel.NON_STANDARD.value == "non_standard"
        assert IssueType("unlimited_liability") == IssueType.UNLIMITED_LIABILITY

    def test_non_standard_ranks_with_high(self):
        assert RISK_RANK[RiskLevel.NON_STANDARD] == RISK_RANK[RiskLevel.HIGH]
        assert RISK_RANK[RiskLevel.CRITICAL] > RISK_RANK[RiskLevel.HIGH]

    def test_every_artifact_key_has_a_class(self):
        assert set(ARTIFACT_TYPES) == set(ArtifactKey)
        for key, cls in ARTIFACT_TYPES.items():
            assert cls.key == key


class TestEvidenceAnchor:
    """Tests for EvidenceAnchor."""

    def test_minimal_to_dict_omits_optional_fields(self):
        assert EvidenceAnchor(snippet="text").to_dict() == {"snippet": "text"}

    def test_char_range_serialization(self):
        anchor = EvidenceAnchor(snippet="abc", section_id="section-1", char_range=(3, 9))
        data = anchor.to_dict()
        assert data["char_range"] == {"start": 3, "end": 9}
        assert EvidenceAnchor.from_dict(data).char_range == (3, 9)


class TestFactAndMapping:
    """Tests for Fact and PolicyMapping."""

    def test_fact_from_dict_defaults(self):
        fact = Fact.from_dict({"text": "something"})
        assert fact.category == FactCategory.OTHER
        assert fact.confidence == 0.0
        assert fact.source.snippet == ""

    def test_policy_mapping_from_dict(self):
        data = {
            "fact": {"category": "entity", "text": "tobacco industry", "confidence": 0.95, "source": {"snippet": "x"}},
            "policy_rules": [],
            "risk_level": "critical",
            "reason": "matched",
            "policy_rule": {"id": "COND-008", "category": "conduct", "severity": "critical"},
        }
        mapping = PolicyMapping.from_dict(data)
        assert mapping.risk_level == RiskLevel.CRITICAL
        assert mapping.policy_rule.id == "COND-008"
        assert mapping.fact.category == FactCategory.ENTITY


class TestRedTeamIssue:
    """Tests for RedTeamIssue."""

    def test_optional_fields_omitted(self):
        issue = RedTeamIssue(
            id="RT-1",
            type=IssueType.TONE,
            severity=Severity.LOW,
            description="Informal language",
            suggested_fix="Rewrite",
        )
        data = issue.to_dict()
        assert "affected_text" not in data
        assert "source" not in data
        assert data["policy_refs"] == []

    def test_from_dict_with_source(self):
        issue = RedTeamIssue.from_dict(
            {
                "id": "RT-2",
                "type": "missing_signature",
                "severity": "high",
                "description": "No signature",
                "suggested_fix": "Sign it",
                "source": {"snippet": "..."},
            }
        )
        assert issue.type == IssueType.MISSING_SIGNATURE
        assert issue.source.snippet == "..."


class TestArtifacts:
    """Tests for the per-key artifact classes."""

    def test_parse_artifact_uses_key(self):
        artifact = parse_artifact(ArtifactKey.FACTS, {"facts": [], "summary": "none"})
        assert isinstance(artifact, FactsArtifact)
        assert artifact.summary == "none"

    def test_parse_artifact_accepts_string_key(self):
        artifact = parse_artifact("review_issues", {"issues": [], "overall_status": "pass"})
        assert isinstance(artifact, ReviewIssuesArtifact)

    def test_parse_artifact_rejects_unknown_key(self):
        with pytest.raises(ValueError):
            parse_artifact("unknown", {})

    def test_policy_mappings_defaults(self):
        artifact = PolicyMappingsArtifact.from_dict({})
        assert artifact.mappings == []
        assert artifact.highest_risk_level == RiskLevel.LOW

    def test_evidence_requests_total_defaults_to_length(self):
        artifact = EvidenceRequestsArtifact.from_dict(
            {"requests": [{"id": "EVR-0001", "request_type": "approval", "priority": "immediate"}]}
        )
        assert artifact.total_requests == 1
        assert isinstance(artifact.requests[0], EvidenceRequest)

    def test_evidence_request_deadline_optional(self):
        request = EvidenceRequest.from_dict({"id": "EVR-0001"})
        assert "deadline" not in request.to_dict()

    def test_audit_event_defaults(self):
        event = AuditEvent.from_dict({"audit_id": "AUD-1"})
        assert event.final_decision == "needs_revision"
        assert event.compliance_status == "under_review"
        assert event.to_dict()["next_review_date"] is None

    def test_topic_sections_camel_case(self):
        artifact = TopicSectionsArtifact.from_dict(
            {
                "topicSections": [
                    {
                        "topicId": "client_identity",
                        "content": "Name: A",
                        "coverage": "partial",
                        "evidenceRefs": [{"docName": "kyc", "pageOrSection": "Para 1", "snippet": "Name"}],
                    }
                ]
            }
        )
        section = artifact.topic_sections[0]
        assert isinstance(section, TopicSection)
        assert section.coverage == Coverage.PARTIAL
        assert section.evidence_refs[0].page_or_section == "Para 1"
        assert artifact.to_dict()["topicSections"][0]["evidenceRefs"][0]["docName"] == "kyc"

    def test_risk_triage_degraded_marker(self):
        degraded = RiskTriageArtifact.from_dict({"riskScore": 0, "routePath": "fast", "triageReasons": ["[degraded]"]})
        normal = RiskTriageArtifact.from_dict({"riskScore": 12, "routePath": "fast", "triageReasons": ["Low risk"]})
        assert degraded.degraded is True
        assert normal.degraded is False
        assert normal.to_dict()["riskScore"] == 12
