"""
ReviewFlow - Policy corpus and contract standards.

The corpus is static reference data consulted by the policy-mapping agent.
In a deployment it would be loaded from a policy management system.
"""

from dataclasses import dataclass
from typing import Optional

from .models import PolicyCategory, PolicyRule, RiskLevel, Severity

POLICY_CORPUS: tuple[PolicyRule, ...] = (
    PolicyRule(
        id="KYC-001",
        title="Client Identity Verification",
        category=PolicyCategory.KYC,
        requirement_text=(
            "All clients must provide government-issued identification and proof of "
            "address before account opening."
        ),
        keywords=("identity", "verification", "kyc", "identification", "passport", "id card"),
        severity=Severity.CRITICAL,
    ),
    PolicyRule(
        id="AML-003",
        title="Source of Funds Declaration",
        category=PolicyCategory.AML,
        requirement_text=(
            "Clients must declare the source of funds for investments exceeding $100,000 USD."
        ),
        keywords=("source of funds", "money laundering", "aml", "funds origin", "wealth source"),
        severity=Severity.CRITICAL,
    ),
    PolicyRule(
        id="RISK-007",
        title="Risk Assessment Completion",
        category=PolicyCategory.RISK,
        requirement_text=(
            "A comprehensive risk assessment must be completed and documented for all "
            "investment proposals."
        ),
        keywords=("risk assessment", "risk profile", "risk tolerance", "investment risk"),
        severity=Severity.HIGH,
    ),
    PolicyRule(
        id="DISC-012",
        title="Material Information Disclosure",
        category=PolicyCategory.DISCLOSURE,
        requirement_text=(
            "All material risks, fees, and potential conflicts of interest must be "
            "disclosed to clients in writing."
        ),
        keywords=(
            "disclosure",
            "transparency",
            "material information",
            "conflicts of interest",
            "fees",
        ),
        severity=Severity.HIGH,
    ),
    PolicyRule(
        id="COND-008",
        title="Prohibited Industry Restrictions",
        category=PolicyCategory.CONDUCT,
        requirement_text=(
            "Investments in tobacco, weapons manufacturing, and certain restricted "
            "industries require special approval."
        ),
        keywords=("tobacco", "weapons", "restricted industries", "prohibited sectors", "sanctioned"),
        severity=Severity.CRITICAL,
    ),
    PolicyRule(
        id="DOC-015",
        title="Investment Proposal Documentation",
        category=PolicyCategory.DOCUMENTATION,
        requirement_text=(
            "Investment proposals must include: objectives, time horizon, instruments, "
            "risk assessment, and client acknowledgment."
        ),
        keywords=("documentation", "proposal", "investment plan", "objectives", "time horizon"),
        severity=Severity.MEDIUM,
    ),
    PolicyRule(
        id="RISK-019",
        title="High-Risk Client Review",
        category=PolicyCategory.RISK,
        requirement_text=(
            "Clients classified as high-risk must undergo enhanced due diligence and "
            "quarterly review."
        ),
        keywords=("high risk", "enhanced due diligence", "quarterly review", "risk classification"),
        severity=Severity.HIGH,
    ),
    PolicyRule(
        id="COND-022",
        title="Insider Trading Prevention",
        category=PolicyCategory.CONDUCT,
        requirement_text=(
            "All trades must be screened for potential insider trading violations. "
            "Material non-public information must not be used."
        ),
        keywords=(
            "insider trading",
            "mnpi",
            "material non-public information",
            "trading restrictions",
        ),
        severity=Severity.CRITICAL,
    ),
    PolicyRule(
        id="DOC-025",
        title="Client Acknowledgment Signature",
        category=PolicyCategory.DOCUMENTATION,
        requirement_text=(
            "All investment proposals and risk disclosures must be signed by the client "
            "before execution."
        ),
        keywords=("signature", "client acknowledgment", "signed agreement", "client consent"),
        severity=Severity.HIGH,
    ),
    PolicyRule(
        id="DISC-030",
        title="Performance Projection Disclaimer",
        category=PolicyCategory.DISCLOSURE,
        requirement_text=(
            "Any performance projections or historical returns must include disclaimers "
            "that past performance does not guarantee future results."
        ),
        keywords=("performance", "projections", "disclaimer", "past performance", "returns"),
        severity=Severity.MEDIUM,
    ),
)

INFORMATIONAL_RULE = PolicyRule(
    id="INFO-000",
    title="Informational Fact",
    category=PolicyCategory.DOCUMENTATION,
    requirement_text="No specific policy requirement",
    keywords=(),
    severity=Severity.LOW,
)


def find_matching_policies(text: str) -> list[PolicyRule]:
    """Return every policy with at least one keyword contained in ``text``."""
    lower = text.lower()
    return [p for p in POLICY_CORPUS if any(k.lower() in lower for k in p.keywords)]


def get_policy_by_id(policy_id: str) -> Optional[PolicyRule]:
    for policy in POLICY_CORPUS:
        if policy.id == policy_id:
            return policy
    return None


def get_policies_by_category(category: PolicyCategory) -> list[PolicyRule]:
    return [p for p in POLICY_CORPUS if p.category == PolicyCategory(category)]


# ---------------------------------------------------------------------------
# Contract standards
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ContractStandard:
    """A contract template clause with indicators of acceptable and risky wording."""

    id: str
    title: str
    template_text: str
    keywords: tuple[str, ...]
    acceptable: tuple[str, ...]
    high_risk: tuple[str, ...]

    def assess(self, text: str) -> RiskLevel:
        """
        Classify ``text`` against this standard.

        High-risk wording in liability or signature clauses is ``high``;
        elsewhere it is ``non_standard``. Acceptable wording is ``low``;
        neither is ``medium``.
        """
        lower = text.lower()
        if any(indicator in lower for indicator in self.high_risk):
            if self.id in _STRICT_STANDARDS:
                return RiskLevel.HIGH
            return RiskLevel.NON_STANDARD
        if any(indicator in lower for indicator in self.acceptable):
            return RiskLevel.LOW
        return RiskLevel.MEDIUM

    def as_policy_rule(self, risk_level: RiskLevel) -> PolicyRule:
        severity = {
            RiskLevel.LOW: Severity.LOW,
            RiskLevel.MEDIUM: Severity.MEDIUM,
        }.get(risk_level, Severity.HIGH)
        return PolicyRule(
            id=self.id,
            title=self.title,
            category=PolicyCategory.DOCUMENTATION,
            requirement_text=self.template_text,
            keywords=self.keywords,
            severity=severity,
        )


CONTRACT_STANDARDS: tuple[ContractStandard, ...] = (
    ContractStandard(
        id="STD-001",
        title="Standard Indemnification Clause",
        template_text="Indemnification limited to direct damages up to contract value",
        keywords=("indemnify", "indemnification", "liability", "damages", "hold harmless"),
        acceptable=(
            "limited to",
            "direct damages",
            "capped at",
            "up to contract value",
            "maximum liability",
        ),
        high_risk=("unlimited", "consequential", "indirect", "punitive", "all claims", "any and all"),
    ),
    ContractStandard(
        id="STD-002",
        title="Standard Termination Clause",
        template_text="Either party may terminate with 60 days written notice",
        keywords=("terminate", "termination", "cancel", "end agreement", "notice period"),
        acceptable=("60 days", "90 days", "written notice", "mutual agreement"),
        high_risk=("immediate", "at will", "no notice", "unilateral", "7 days", "30 days"),
    ),
    ContractStandard(
        id="STD-003",
        title="Standard Payment Terms",
        template_text="Payment due net 30 days from invoice date",
        keywords=("payment", "invoice", "fee", "compensation", "billing"),
        acceptable=("net 30", "net 45", "net 60", "upon receipt", "milestone-based"),
        high_risk=("upfront", "advance payment", "non-refundable", "no invoice", "immediate"),
    ),
    ContractStandard(
        id="STD-004",
        title="Standard Limitation of Liability",
        template_text="Total liability limited to amounts paid in preceding 12 months",
        keywords=("limitation of liability", "cap", "maximum", "aggregate liability"),
        acceptable=("limited to", "capped at", "12 months fees", "aggregate cap", "not exceed"),
        high_risk=("no limit", "unlimited", "without cap", "full liability", "no maximum"),
    ),
    ContractStandard(
        id="STD-005",
        title="Standard Confidentiality Clause",
        template_text="Confidential information protected for 3 years post-termination",
        keywords=(
            "confidential",
            "confidentiality",
            "proprietary",
            "trade secret",
            "non-disclosure",
        ),
        acceptable=("3 years", "5 years", "reasonable protection", "industry standard"),
        high_risk=("perpetual", "indefinite", "no limit", "public disclosure allowed"),
    ),
    ContractStandard(
        id="STD-006",
        title="Standard Governing Law Clause",
        template_text="Governed by laws of jurisdiction where services are provided",
        keywords=("governing law", "jurisdiction", "venue", "dispute resolution", "arbitration"),
        acceptable=("mutual jurisdiction", "local laws", "arbitration", "mediation first"),
        high_risk=("foreign jurisdiction", "one-sided venue", "no arbitration", "waive jury trial"),
    ),
    ContractStandard(
        id="STD-007",
        title="Standard Warranty Disclaimer",
        template_text='Services provided "as is" with limited warranty for material defects',
        keywords=("warranty", "guarantee", "as is", "disclaimer", "representations"),
        acceptable=(
            "limited warranty",
            "material defects",
            "reasonable efforts",
            "industry standard",
        ),
        high_risk=("no warranty", "all warranties disclaimed", "no recourse", "no remedies"),
    ),
    ContractStandard(
        id="STD-008",
        title="Standard Intellectual Property Rights",
        template_text="Client retains ownership of pre-existing IP; vendor retains tool ownership",
        keywords=("intellectual property", "ownership", "copyright", "patent", "ip rights"),
        acceptable=(
            "client owns deliverables",
            "vendor owns tools",
            "license granted",
            "clearly defined",
        ),
        high_risk=(
            "all rights to vendor",
            "undefined ownership",
            "perpetual assignment",
            "no license",
        ),
    ),
    ContractStandard(
        id="STD-009",
        title="Standard Force Majeure Clause",
        template_text="Parties excused for delays due to events beyond reasonable control",
        keywords=("force majeure", "act of god", "unforeseeable", "excused performance"),
        acceptable=(
            "beyond reasonable control",
            "temporary suspension",
            "notice required",
            "mitigation efforts",
        ),
        high_risk=("one-sided", "no termination right", "indefinite suspension", "no mitigation"),
    ),
    ContractStandard(
        id="STD-010",
        title="Standard Signature and Execution",
        template_text="Agreement effective when signed by authorized representatives of both parties",
        keywords=("signature", "execution", "authorized", "binding", "effective date"),
        acceptable=(
            "both parties sign",
            "authorized representative",
            "written consent",
            "dated",
        ),
        high_risk=("unsigned", "oral agreement", "implied consent", "missing signatures"),
    ),
)

# Liability and signature clauses escalate to ``high`` rather than ``non_standard``.
_STRICT_STANDARDS = frozenset({"STD-001", "STD-004", "STD-010"})


def find_matching_standards(text: str) -> list[ContractStandard]:
    """Return every contract standard with at least one keyword contained in ``text``."""
    lower = text.lower()
    return [s for s in CONTRACT_STANDARDS if any(k in lower for k in s.keywords)]


def get_standard_by_id(standard_id: str) -> Optional[ContractStandard]:
    for standard in CONTRACT_STANDARDS:
        if standard.id == standard_id:
            return standard
    return None
