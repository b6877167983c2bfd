"""
ReviewFlow - Content handlers: compliance and quality checks plus the
drafting helpers used while a document is being written.
"""

from typing import Any

from ...exceptions import LLMError
from ...models import AgentMode
from ...section_ids import Section
from ..base import AgentContext

REGULATORY_KEYWORDS = ["offshore", "tax haven", "cryptocurrency", "insider"]

DEFAULT_CRITERIA = [
    "Sufficient length",
    "Clear structure",
    "No prohibited content",
    "Professional tone",
]
UNPROFESSIONAL_WORDS = ["gonna", "wanna", "yeah", "nope"]

FOLLOW_UP_QUESTIONS = {
    "english": "Could you provide more details about your investment experience?",
    "chinese": "您能提供更多关于您的投资经验的详细信息吗？",
    "german": "Könnten Sie mehr Details zu Ihrer Investitionserfahrung angeben?",
    "french": "Pourriez-vous fournir plus de détails sur votre expérience d'investissement?",
    "japanese": "投資経験についてもっと詳しく教えていただけますか？",
}

TRANSITIONS = [", and", ". Additionally,", ". Furthermore,"]


def _compliance_summary(title: str, violations: list, warnings: list) -> str:
    if not violations:
        return f'Section "{title}" passed compliance check. {len(warnings)} warning(s) noted.'
    return f'Section "{title}" failed compliance check. {len(violations)} violation(s) detected.'


async def _real_compliance(input: dict[str, Any], context: AgentContext) -> dict[str, Any]:
    if context.llm is None:
        raise LLMError("No section reviewer configured for real mode")
    title = input.get("sectionTitle", "")
    section = Section(id="section-1", title=title, content=input.get("sectionContent", ""))
    result = await context.llm.review([section], mode="section", target_section_id=section.id)
    context.tokens += result.tokens

    violations = []
    warnings = []
    for issue in result.issues:
        if issue["severity"] == "FAIL":
            violations.append(
                {
                    "type": "policy_violation",
                    "severity": "critical",
                    "description": f"{issue['title']}: {issue['message']}",
                    "location": issue.get("evidence") or "Section content",
                }
            )
        else:
            warnings.append({"type": "review_note", "description": f"{issue['title']}: {issue['message']}"})

    return {
        "is_compliant": not violations,
        "violations": violations,
        "warnings": warnings,
        "summary": _compliance_summary(title, violations, warnings),
    }


async def compliance(input: dict[str, Any], context: AgentContext) -> dict[str, Any]:
    """Quick compliance check for prohibited industries, missing disclosures and regulatory terms."""
    if context.mode == AgentMode.REAL:
        return await _real_compliance(input, context)

    lower = input.get("sectionContent", "").lower()
    violations = []
    warnings = []

    if "tobacco" in lower:
        violations.append(
            {
                "type": "prohibited_industry",
                "severity": "critical",
                "description": "Reference to prohibited industry: tobacco",
                "location": "Section content",
            }
        )

    if "return" in lower and "risk" not in lower:
        warnings.append(
            {
                "type": "missing_disclosure",
                "description": "Return projections mentioned without corresponding risk disclosure",
            }
        )

    for keyword in REGULATORY_KEYWORDS:
        if keyword in lower:
            warnings.append(
                {
                    "type": "regulatory_review_required",
                    "description": f'Content mentions "{keyword}" - may require additional regulatory review',
                }
            )

    return {
        "is_compliant": not violations,
        "violations": violations,
        "warnings": warnings,
        "summary": _compliance_summary(input.get("sectionTitle", ""), violations, warnings),
    }


def _evaluate_criterion(criterion: str, content: str) -> tuple[bool, str]:
    lower = content.lower()
    if criterion == "Sufficient length":
        if len(content) < 50:
            return False, "Content is too short (minimum 50 characters required)"
        return True, f"Content length is adequate ({len(content)} characters)"
    if criterion == "Clear structure":
        if "." not in content and len(content) > 100:
            return False, "Content lacks proper sentence structure"
        return True, "Content has clear structure"
    if criterion == "No prohibited content":
        if "tobacco" in lower:
            return False, "Prohibited content detected: tobacco industry reference"
        return True, "No prohibited content detected"
    if criterion == "Professional tone":
        found = [word for word in UNPROFESSIONAL_WORDS if word in lower]
        if found:
            return False, f"Unprofessional language detected: {', '.join(found)}"
        return True, "Professional tone maintained"
    return True, "Criterion met"


async def evaluate(input: dict[str, Any], context: AgentContext) -> dict[str, Any]:
    """Score a section against quality criteria (0-100)."""
    if context.mode != AgentMode.FAKE:
        raise NotImplementedError("Real evaluation not implemented yet.")

    content = input.get("sectionContent", "")
    criteria = input.get("criteria") or DEFAULT_CRITERIA
    findings = []
    passed = 0
    for criterion in criteria:
        ok, comment = _evaluate_criterion(criterion, content)
        passed += ok
        findings.append({"criterion": criterion, "result": "pass" if ok else "fail", "comment": comment})

    total = len(criteria)
    score = int(passed / total * 100 + 0.5) if total else 0
    if score >= 80:
        status = "pass"
    elif score >= 60:
        status = "needs_review"
    else:
        status = "fail"

    return {
        "status": status,
        "score": score,
        "findings": findings,
        "summary": (
            f'Section "{input.get("sectionTitle", "")}" evaluated against {total} criteria. '
            f"Score: {score}/100. Status: {status.upper()}. "
            f"{passed}/{total} criteria passed."
        ),
    }


def validate(input: dict[str, Any], context: AgentContext) -> dict[str, Any]:
    """A message of five or more words is treated as relevant content."""
    message = input.get("userMessage", "")
    if len(message.split()) >= 5:
        return {
            "is_relevant": True,
            "content_fragment": message[:100],
            "follow_up_question": None,
            "examples": [],
        }
    language = input.get("language", "english")
    return {
        "is_relevant": False,
        "content_fragment": None,
        "follow_up_question": FOLLOW_UP_QUESTIONS.get(language, FOLLOW_UP_QUESTIONS["english"]),
        "examples": [
            "I have 5 years of experience investing in stocks",
            "I'm a beginner investor just starting out",
        ],
    }


def synthesize(input: dict[str, Any], context: AgentContext) -> dict[str, Any]:
    fragments = input.get("contentFragments") or []
    if not fragments:
        return {"synthesizedParagraph": "No content provided."}
    combined = fragments[0]
    for index, fragment in enumerate(fragments[1:], 1):
        combined += f"{TRANSITIONS[index % len(TRANSITIONS)]} {fragment.lower()}"
    return {"synthesizedParagraph": combined}


def optimize(input: dict[str, Any], context: AgentContext) -> dict[str, Any]:
    content = input.get("sectionContent", "")
    prompt = input.get("userPrompt", "")
    return {"revisedContent": f'{content}\n\n[Note: Content optimized based on: "{prompt}"]'}


def merge(input: dict[str, Any], context: AgentContext) -> dict[str, Any]:
    """Merge chat answers into the three standard document sections."""
    chat = input.get("chatContent") or {}
    name = input.get("documentName", "")

    def section(key: str, suffix: str, placeholder: str) -> str:
        text = chat.get(key)
        return f"{text}\n\n{suffix} {name}." if text else placeholder

    return {
        "section1_title": "Investment Background",
        "section1_content": section(
            "investmentBackground",
            "This profile was created in the context of",
            "Investment background information to be provided.",
        ),
        "section2_title": "Risk Assessment",
        "section2_content": section(
            "riskAssessment",
            "Risk assessment completed for",
            "Risk assessment information to be provided.",
        ),
        "section3_title": "Technical Strategy",
        "section3_content": section(
            "technicalStrategy",
            "Technical strategy aligned with",
            "Technical strategy information to be provided.",
        ),
    }
