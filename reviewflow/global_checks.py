"""
ReviewFlow - Document-wide checks.

Fast deterministic checks run across all sections of a document after a
batch review. The scope planner decides which of them to run.
"""

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any, Callable

from .models import CheckStatus
from .scope_planner import PlannerSection

logger = logging.getLogger("reviewflow.global_checks")

DISCLAIMER_KEYWORDS = [
    "disclaimer",
    "liability",
    "warranty",
    "risk disclosure",
    "no guarantee",
    "not responsible",
]

HIGH_RISK_PHRASES = [
    "guaranteed returns",
    "no risk",
    "zero risk",
    "risk-free",
    "guaranteed profit",
    "cannot lose",
    "always profitable",
]

REQUIRED_SECTION_PATTERNS = [
    re.compile(r"disclaimer", re.I),
    re.compile(r"risk", re.I),
    re.compile(r"liability", re.I),
    re.compile(r"terms.*conditions", re.I),
]

CONTRADICTION_TERMS = [
    ("fee", [re.compile(r"fee[s]?:?\s*(\d+\.?\d*%?)", re.I), re.compile(r"(\d+\.?\d*%?)\s*fee", re.I)]),
    ("rate", [re.compile(r"rate[s]?:?\s*(\d+\.?\d*%?)", re.I), re.compile(r"(\d+\.?\d*%?)\s*rate", re.I)]),
    ("percentage", [re.compile(r"percentage:?\s*(\d+\.?\d*%?)", re.I)]),
    ("minimum", [re.compile(r"minimum:?\s*\$?(\d+[,\d]*)", re.I), re.compile(r"min:?\s*\$?(\d+[,\d]*)", re.I)]),
    ("maximum", [re.compile(r"maximum:?\s*\$?(\d+[,\d]*)", re.I), re.compile(r"max:?\s*\$?(\d+[,\d]*)", re.I)]),
]


@dataclass
class GlobalCheckResult:
    """Outcome of one document-wide check."""

    check_name: str
    status: CheckStatus
    details: str
    affected_sections: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "checkName": self.check_name,
            "status": self.status.value,
            "details": self.details,
            "affectedSections": self.affected_sections,
        }


def check_disclaimer_presence(sections: list[PlannerSection]) -> GlobalCheckResult:
    found = []
    missing = []
    for keyword in DISCLAIMER_KEYWORDS:
        hits = [
            s.id
            for s in sections
            if keyword in s.title.lower() or keyword in s.content.lower()
        ]
        if hits:
            found.extend(hits)
        else:
            missing.append(keyword)

    if not missing:
        status = CheckStatus.PASS
        details = f"All required disclaimer keywords found in {len(found)} location(s)."
    elif len(missing) <= 2:
        status = CheckStatus.WARNING
        details = (
            f"Some disclaimer keywords missing: {', '.join(missing)}. "
            f"Found: {len(found)} disclaimer(s)."
        )
    else:
        status = CheckStatus.FAIL
        details = (
            f"Multiple disclaimer keywords missing: {', '.join(missing)}. "
            "Document may lack required disclaimers."
        )
    return GlobalCheckResult("disclaimer_presence", status, details, found)


def check_cross_section_contradictions(sections: list[PlannerSection]) -> GlobalCheckResult:
    """Flag sections that state different values for the same term with no value in common."""
    contradictions = []
    for term, patterns in CONTRADICTION_TERMS:
        section_values = []
        for section in sections:
            values = [
                m.group(1).strip()
                for pattern in patterns
                for m in pattern.finditer(section.content)
                if m.group(1)
            ]
            if values:
                section_values.append((section, values))

        for i in range(len(section_values)):
            for j in range(i + 1, len(section_values)):
                first, first_values = section_values[i]
                second, second_values = section_values[j]
                first_set, second_set = set(first_values), set(second_values)
                overlap = bool(first_set & second_set)
                differs = bool(first_set ^ second_set)
                if differs and not overlap:
                    contradictions.append(
                        (term, first.id, first_values[0], second.id, second_values[0])
                    )

    if not contradictions:
        status = CheckStatus.PASS
        details = "No obvious contradictions detected between sections."
    elif len(contradictions) <= 2:
        status = CheckStatus.WARNING
        described = "; ".join(
            f'"{term}" differs between Section {a} ({va}) and Section {b} ({vb})'
            for term, a, va, b, vb in contradictions
        )
        details = f"Potential contradiction(s) detected: {described}."
    else:
        status = CheckStatus.FAIL
        details = (
            f"Multiple contradictions detected ({len(contradictions)} found). "
            "Review for consistency."
        )

    affected = sorted({c[1] for c in contradictions} | {c[3] for c in contradictions})
    return GlobalCheckResult("cross_section_contradiction", status, details, affected)


def check_high_risk_keywords(sections: list[PlannerSection]) -> GlobalCheckResult:
    findings = []
    for section in sections:
        lower = section.content.lower()
        for phrase in HIGH_RISK_PHRASES:
            if phrase in lower:
                findings.append((section.id, section.title, phrase))

    if not findings:
        status = CheckStatus.PASS
        details = "No high-risk keywords detected."
    elif len(findings) <= 2:
        status = CheckStatus.WARNING
        described = "; ".join(f'"{p}" in Section {i} ({t})' for i, t, p in findings)
        details = f"High-risk keyword(s) found: {described}. Review for compliance."
    else:
        status = CheckStatus.FAIL
        details = (
            f"Multiple high-risk keywords detected ({len(findings)} instances). "
            "Document contains potentially non-compliant language."
        )
    return GlobalCheckResult("high_risk_keyword_scan", status, details, [f[0] for f in findings])


def check_structural_sanity(sections: list[PlannerSection]) -> GlobalCheckResult:
    missing = [
        p.pattern for p in REQUIRED_SECTION_PATTERNS if not any(p.search(s.title) for s in sections)
    ]
    empty = [s for s in sections if len(s.content.strip()) < 50]

    if not missing and not empty:
        details = f"All required sections present. Document has {len(sections)} section(s)."
        status = CheckStatus.PASS
    elif len(missing) <= 1 and not empty:
        details = (
            f"Document structure mostly valid. Potentially missing section: {', '.join(missing)}."
        )
        status = CheckStatus.WARNING
    else:
        issues = []
        if missing:
            issues.append(f"Missing sections: {', '.join(missing)}")
        if empty:
            issues.append(f"{len(empty)} section(s) appear empty or very short")
        details = ". ".join(issues) + "."
        status = CheckStatus.WARNING
    return GlobalCheckResult("structural_sanity", status, details, [s.id for s in empty])


GLOBAL_CHECKS: dict[str, Callable[[list[PlannerSection]], GlobalCheckResult]] = {
    "disclaimer_presence": check_disclaimer_presence,
    "cross_section_contradiction": check_cross_section_contradictions,
    "high_risk_keyword_scan": check_high_risk_keywords,
    "structural_sanity": check_structural_sanity,
}


def run_global_checks(
    check_names: list[str], sections: list[PlannerSection]
) -> tuple[list[GlobalCheckResult], list[str]]:
    """
    Run the named checks. Returns ``(results, failed_checks)``.

    Unknown names are reported as failed without a result; a check that
    raises is reported as failed with a ``fail`` result.
    """
    results = []
    failed = []
    for name in check_names:
        check = GLOBAL_CHECKS.get(name)
        if check is None:
            logger.warning(f"Unknown global check: {name}")
            failed.append(name)
            continue
        t0 = time.time()
        try:
            result = check(sections)
        except Exception as e:
            logger.error(f"Global check {name} raised: {e}")
            failed.append(name)
            results.append(GlobalCheckResult(name, CheckStatus.FAIL, f"Check failed: {e}", []))
            continue
        logger.debug(f"{name}: {result.status.value} ({int((time.time() - t0) * 1000)}ms)")
        results.append(result)
    return results, failed


def get_global_checks_summary(results: list[GlobalCheckResult]) -> dict[str, Any]:
    passed = sum(1 for r in results if r.status == CheckStatus.PASS)
    warnings = sum(1 for r in results if r.status == CheckStatus.WARNING)
    failed = sum(1 for r in results if r.status == CheckStatus.FAIL)
    if failed:
        overall = CheckStatus.FAIL
    elif warnings:
        overall = CheckStatus.WARNING
    else:
        overall = CheckStatus.PASS
    return {
        "totalChecks": len(results),
        "passed": passed,
        "warnings": warnings,
        "failed": failed,
        "overallStatus": overall.value,
    }
