"""
Unit tests for the policy corpus and contract standards.
"""

from reviewflow.models import PolicyCategory, RiskLevel, Severity
from reviewflow.policy import (
    CONTRACT_STANDARDS,
    POLICY_CORPUS,
    find_matching_policies,
    find_matching_standards,
    get_policies_by_category,
    get_policy_by_id,
    get_standard_by_id,
)


class TestPolicyCorpus:
    """Tests for policy lookup."""

    def test_corpus_ids_are_unique(self):
        ids = [p.id for p in POLICY_CORPUS]
        assert len(ids) == 10
        assert len(set(ids)) == len(ids)

    def test_keyword_match_is_case_insensitive(self):
        matches = find_matching_policies("Investing in the TOBACCO sector")
        assert [p.id for p in matches] == ["COND-008"]
        assert matches[0].severity == Severity.CRITICAL

    def test_multiple_matches(self):
        ids = {p.id for p in find_matching_policies("Source of funds and passport copy attached")}
        assert ids == {"AML-003", "KYC-001"}

    def test_no_match(self):
        assert find_matching_policies("Office hours are Monday to Friday") == []

    def test_get_policy_by_id(self):
        assert get_policy_by_id("DOC-025").title == "Client Acknowledgment Signature"
        assert get_policy_by_id("NOPE-1") is None

    def test_get_policies_by_category(self):
        assert [p.id for p in get_policies_by_category(PolicyCategory.RISK)] == ["RISK-007", "RISK-019"]
        assert [p.id for p in get_policies_by_category("kyc")] == ["KYC-001"]


class TestContractStandards:
    """Tests for contract standard assessment."""

    def test_standards_are_numbered(self):
        assert [s.id for s in CONTRACT_STANDARDS] == [f"STD-{i:03d}" for i in range(1, 11)]

    def test_high_risk_liability_is_high(self):
        standard = get_standard_by_id("STD-001")
        assert standard.assess("The vendor accepts unlimited liability.") == RiskLevel.HIGH

    def test_high_risk_elsewhere_is_non_standard(self):
        standard = get_standard_by_id("STD-002")
        assert standard.assess("Either party may terminate immediately.") == RiskLevel.NON_STANDARD

    def test_acceptable_wording_is_low(self):
        standard = get_standard_by_id("STD-002")
        assert standard.assess("Either party may terminate with 60 days written notice.") == RiskLevel.LOW

    def test_neutral_wording_is_medium(self):
        standard = get_standard_by_id("STD-002")
        assert standard.assess("Either party may terminate.") == RiskLevel.MEDIUM

    def test_as_policy_rule(self):
        standard = get_standard_by_id("STD-003")
        rule = standard.as_policy_rule(RiskLevel.NON_STANDARD)
        assert rule.id == "STD-003"
        assert rule.severity == Severity.HIGH
        assert rule.requirement_text == standard.template_text
        assert standard.as_policy_rule(RiskLevel.LOW).severity == Severity.LOW

    def test_find_matching_standards(self):
        ids = [s.id for s in find_matching_standards("either party may terminate with written notice")]
        assert ids == ["STD-002"]
        assert get_standard_by_id("STD-999") is None
