"""
Unit tests for the document-wide checks.
"""

from unittest.mock import patch

from reviewflow.global_checks import (
    GLOBAL_CHECKS,
    check_cross_section_contradictions,
    check_disclaimer_presence,
    check_high_risk_keywords,
    check_structural_sanity,
    get_global_checks_summary,
    run_global_checks,
)
from reviewflow.models import CheckStatus
from reviewflow.scope_planner import PlannerSection

FILLER = " This paragraph is long enough to count as real section content."


class TestDisclaimerPresence:
    """Tests for check_disclaimer_presence."""

    def test_all_keywords_present(self):
        sections = [
            PlannerSection(1, "Disclaimer", "No guarantee of returns; we are not responsible for losses."),
            PlannerSection(2, "Legal", "Liability and warranty terms. See the risk disclosure."),
        ]
        result = check_disclaimer_presence(sections)
        assert result.status == CheckStatus.PASS
        assert result.check_name == "disclaimer_presence"

    def test_two_missing_is_warning(self):
        sections = [PlannerSection(1, "Disclaimer", "liability, warranty and risk disclosure")]
        result = check_disclaimer_presence(sections)
        assert result.status == CheckStatus.WARNING
        assert "no guarantee, not responsible" in result.details

    def test_many_missing_is_fail(self):
        result = check_disclaimer_presence([PlannerSection(1, "Intro", "hello")])
        assert result.status == CheckStatus.FAIL
        assert result.affected_sections == []


class TestContradictions:
    """Tests for check_cross_section_contradictions."""

    def test_differing_fees(self):
        sections = [
            PlannerSection(1, "Fees", "Management fee: 1.5% per year."),
            PlannerSection(2, "Summary", "Management fee: 2% per year."),
        ]
        result = check_cross_section_contradictions(sections)
        assert result.status == CheckStatus.WARNING
        assert result.affected_sections == [1, 2]
        assert '"fee" differs between Section 1 (1.5%) and Section 2 (2%)' in result.details

    def test_consistent_values(self):
        sections = [
            PlannerSection(1, "Fees", "Management fee: 1.5% per year."),
            PlannerSection(2, "Summary", "Management fee: 1.5% per year."),
        ]
        result = check_cross_section_contradictions(sections)
        assert result.status == CheckStatus.PASS
        assert result.affected_sections == []

    def test_many_contradictions_fail(self):
        sections = [
            PlannerSection(1, "A", "Fee: 1%"),
            PlannerSection(2, "B", "Fee: 2%"),
            PlannerSection(3, "C", "Fee: 3%"),
        ]
        result = check_cross_section_contradictions(sections)
        assert result.status == CheckStatus.FAIL
        assert "3 found" in result.details


class TestHighRiskKeywords:
    """Tests for check_high_risk_keywords."""

    def test_clean(self):
        result = check_high_risk_keywords([PlannerSection(1, "Intro", "Balanced portfolio.")])
        assert result.status == CheckStatus.PASS
        assert result.check_name == "high_risk_keyword_scan"

    def test_single_finding(self):
        result = check_high_risk_keywords([PlannerSection(4, "Returns", "We offer guaranteed returns.")])
        assert result.status == CheckStatus.WARNING
        assert result.affected_sections == [4]
        assert '"guaranteed returns" in Section 4 (Returns)' in result.details

    def test_many_findings(self):
        text = "Guaranteed returns, no risk, cannot lose."
        result = check_high_risk_keywords([PlannerSection(1, "Pitch", text)])
        assert result.status == CheckStatus.FAIL


class TestStructuralSanity:
    """Tests for check_structural_sanity."""

    def _complete(self) -> list[PlannerSection]:
        return [
            PlannerSection(1, "Disclaimer", FILLER),
            PlannerSection(2, "Risk Factors", FILLER),
            PlannerSection(3, "Limitation of Liability", FILLER),
            PlannerSection(4, "Terms and Conditions", FILLER),
        ]

    def test_complete_document(self):
        result = check_structural_sanity(self._complete())
        assert result.status == CheckStatus.PASS
        assert "4 section(s)" in result.details

    def test_one_missing_section(self):
        result = check_structural_sanity(self._complete()[:3])
        assert result.status == CheckStatus.WARNING
        assert "mostly valid" in result.details

    def test_short_section(self):
        sections = self._complete() + [PlannerSection(5, "Appendix", "tbd")]
        result = check_structural_sanity(sections)
        assert result.status == CheckStatus.WARNING
        assert result.affected_sections == [5]
        assert "1 section(s) appear empty or very short" in result.details


class TestRunGlobalChecks:
    """Tests for run_global_checks and its summary."""

    def test_runs_named_checks(self):
        sections = [PlannerSection(1, "Intro", "hello")]
        results, failed = run_global_checks(["disclaimer_presence", "high_risk_keyword_scan"], sections)
        assert [r.check_name for r in results] == ["disclaimer_presence", "high_risk_keyword_scan"]
        assert failed == []

    def test_unknown_check(self):
        results, failed = run_global_checks(["bogus"], [])
        assert results == []
        assert failed == ["bogus"]

    def test_raising_check(self):
        def boom(sections):
            raise RuntimeError("broken")

        with patch.dict(GLOBAL_CHECKS, {"boom": boom}):
            results, failed = run_global_checks(["boom"], [])
        assert failed == ["boom"]
        assert results[0].status == CheckStatus.FAIL
        assert results[0].details == "Check failed: broken"

    def test_summary(self):
        sections = [PlannerSection(1, "Intro", "hello")]
        results, _ = run_global_checks(["high_risk_keyword_scan", "disclaimer_presence"], sections)
        summary = get_global_checks_summary(results)
        assert summary == {
            "totalChecks": 2,
            "passed": 1,
            "warnings": 0,
            "failed": 1,
            "overallStatus": "fail",
        }

    def test_to_dict(self):
        results, _ = run_global_checks(["high_risk_keyword_scan"], [])
        assert results[0].to_dict() == {
            "checkName": "high_risk_keyword_scan",
            "status": "pass",
            "details": "No high-risk keywords detected.",
            "affectedSections": [],
        }
