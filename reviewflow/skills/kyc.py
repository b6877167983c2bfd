"""
ReviewFlow - In-process KYC skills.

Deterministic topic assembly and risk triage used by the local transport
and by the remote skills server in full-content mode.
"""

from typing import Any, Callable

from ..exceptions import SkillExecutionError
from ..models import Coverage, EvidenceRef, RiskTriageArtifact, TopicSection
from .catalog import RISK_TRIAGE, TOPIC_ASSEMBLE

TOPIC_KEYWORDS = {
    "client_identity": ["name", "identity", "passport", "id number", "date of birth", "nationality"],
    "source_of_wealth": ["wealth", "income", "salary", "inheritance", "business", "employment"],
    "business_relationship": ["relationship", "purpose", "account", "services", "products"],
    "beneficial_ownership": ["beneficial owner", "ownership", "shareholder", "director", "ubo"],
    "risk_profile": ["risk", "appetite", "tolerance", "aml", "rating"],
    "sanctions_pep": ["sanctions", "pep", "politically exposed", "watchlist", "screening"],
    "transaction_patterns": ["transaction", "volume", "frequency", "pattern", "activity"],
}

TOPIC_TITLES = {
    "client_identity": "Client Identity & Verification",
    "source_of_wealth": "Source of Wealth & Income",
    "business_relationship": "Business Relationship Purpose",
    "beneficial_ownership": "Beneficial Ownership Structure",
    "risk_profile": "Risk Profile & Appetite",
    "sanctions_pep": "Sanctions & PEP Screening",
    "transaction_patterns": "Expected Transaction Patterns",
    "other": "Other Information",
}

HIGH_RISK_KEYWORDS = [
    "sanctions",
    "pep",
    "politically exposed",
    "high risk",
    "shell company",
    "offshore",
    "cash intensive",
    "cryptocurrency",
    "gambling",
    "arms",
    "tobacco",
]

CRITICAL_TOPICS = ["client_identity", "source_of_wealth", "beneficial_ownership", "sanctions_pep"]

MISSING_CRITICAL_POINTS = 15
PARTIAL_COVERAGE_POINTS = 8
KEYWORD_POINTS = 10

# Inclusive upper bound of each route's score band.
ROUTE_THRESHOLDS = [
    (30, "fast", "Low risk → Fast path"),
    (60, "crosscheck", "Medium risk → Cross-check path"),
    (80, "escalate", "High risk → Escalate path"),
]

MIN_PARAGRAPH_CHARS = 20
COMPLETE_COVERAGE_CHARS = 200


def assemble_topics(documents: list[dict[str, Any]]) -> list[TopicSection]:
    """Assign each paragraph to the topic whose keywords it matches most often."""
    sections = {topic_id: TopicSection(topic_id=topic_id) for topic_id in TOPIC_KEYWORDS}

    for doc in documents:
        paragraphs = [
            p for p in (doc.get("content") or "").split("\n\n") if len(p.strip()) > MIN_PARAGRAPH_CHARS
        ]
        for index, paragraph in enumerate(paragraphs, 1):
            lower = paragraph.lower()
            best_topic = None
            best_score = 0
            for topic_id, keywords in TOPIC_KEYWORDS.items():
                score = sum(1 for kw in keywords if kw in lower)
                if score > best_score:
                    best_topic, best_score = topic_id, score
            if best_topic is None:
                continue
            section = sections[best_topic]
            section.content += ("\n\n" if section.content else "") + paragraph
            section.evidence_refs.append(
                EvidenceRef(
                    doc_name=doc.get("name", "unknown"),
                    page_or_section=f"Para {index}",
                    snippet=paragraph[:100] + ("..." if len(paragraph) > 100 else ""),
                )
            )

    for section in sections.values():
        if not section.content:
            section.coverage = Coverage.MISSING
        elif len(section.content) < COMPLETE_COVERAGE_CHARS:
            section.coverage = Coverage.PARTIAL
        else:
            section.coverage = Coverage.COMPLETE

    return list(sections.values())


def extract_high_risk_keywords(content: str) -> list[str]:
    lower = content.lower()
    return [kw for kw in HIGH_RISK_KEYWORDS if kw in lower]


def triage_risk(topic_sections: list[TopicSection]) -> RiskTriageArtifact:
    """Score coverage gaps and high-risk keywords (capped at 100) and pick a route."""
    reasons = []
    coverage_points = 0
    for section in topic_sections:
        if section.coverage == Coverage.MISSING and section.topic_id in CRITICAL_TOPICS:
            coverage_points += MISSING_CRITICAL_POINTS
            reasons.append(f"Missing critical topic: {section.topic_id}")
        elif section.coverage == Coverage.PARTIAL:
            coverage_points += PARTIAL_COVERAGE_POINTS
            reasons.append(f"Partial coverage: {section.topic_id}")

    keywords = extract_high_risk_keywords(" ".join(s.content for s in topic_sections))
    keyword_points = len(keywords) * KEYWORD_POINTS
    if keywords:
        reasons.append(f"High-risk keywords detected: {', '.join(keywords)}")

    risk_score = min(coverage_points + keyword_points, 100)

    for upper, route, reason in ROUTE_THRESHOLDS:
        if risk_score <= upper:
            route_path = route
            reasons.append(reason)
            break
    else:
        route_path = "human_gate"
        reasons.append("Critical risk → Human gate required")

    return RiskTriageArtifact(
        risk_score=risk_score,
        route_path=route_path,
        triage_reasons=reasons,
        risk_breakdown={
            "coveragePoints": coverage_points,
            "keywordPoints": keyword_points,
            "totalPoints": risk_score,
        },
    )


def _run_topic_assemble(input: dict[str, Any]) -> dict[str, Any]:
    documents = input.get("documents")
    if not isinstance(documents, list):
        raise SkillExecutionError("Invalid input: missing documents array")
    return {"topicSections": [s.to_dict() for s in assemble_topics(documents)]}


def _run_risk_triage(input: dict[str, Any]) -> dict[str, Any]:
    sections = input.get("topicSections")
    if not isinstance(sections, list):
        raise SkillExecutionError("Invalid input: missing topicSections array")
    return triage_risk([TopicSection.from_dict(s) for s in sections]).to_dict()


SKILL_IMPLEMENTATIONS: dict[str, Callable[[dict[str, Any]], dict[str, Any]]] = {
    TOPIC_ASSEMBLE: _run_topic_assemble,
    RISK_TRIAGE: _run_risk_triage,
}


def execute_skill(skill_name: str, input: dict[str, Any]) -> dict[str, Any]:
    """Run an in-process skill implementation by name."""
    implementation = SKILL_IMPLEMENTATIONS.get(skill_name)
    if implementation is None:
        raise SkillExecutionError(f"Unknown skill: {skill_name}")
    return implementation(input)
