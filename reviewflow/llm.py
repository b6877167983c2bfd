"""
ReviewFlow - Generative-model section reviewer.

Sends document sections to Claude with a strict JSON output contract and
turns the reply into review issues and proposed remediations. Used by the
batch reviewer and by the compliance agent in ``real`` mode.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

from .config import LLMConfig
from .exceptions import LLMError
from .section_ids import Section

logger = logging.getLogger("reviewflow.llm")

DEFAULT_PROHIBITED_TERMS = ["tobacco", "weapons", "adult entertainment", "gambling"]

REVIEW_PROMPT = """You are a compliance and investment document review agent ({compliance_level}). Your task is to review the following document section(s) for compliance issues.

**SECTIONS TO REVIEW:**
{sections_text}

**COMPLIANCE REQUIREMENTS:**

CRITICAL (FAIL - blocks submission):
- NO prohibited industries/terms: {prohibited_terms}
- NO misleading or fraudulent statements

IMPORTANT (WARNING - needs sign-off):
- Investment/strategy sections should include risk disclosures or regulatory compliance language
- Substantial content (not overly brief)

**EVALUATION APPROACH:**
- Be REASONABLE and PRACTICAL in your assessment
- If a section includes compliance language like "regulatory restrictions", "compliance requirements", "risk tolerance", "applicable regulations" - this is COMPLIANT
- If a section explicitly excludes restricted sectors - this is COMPLIANT
- Focus on identifying ACTUAL violations, not theoretical improvements
- Default to PASS if no clear violations exist

**YOUR TASK:**
1. Check for prohibited content (tobacco, weapons, etc.) -> FAIL if found
2. Check if investment/strategy sections lack ANY compliance/risk language -> WARNING if completely missing
3. Otherwise -> PASS (no issues)

**OUTPUT FORMAT (strict JSON):**
{{
  "issues": [
    {{
      "sectionId": "section-id",
      "severity": "FAIL" | "WARNING" | "INFO",
      "title": "Brief issue title",
      "message": "Detailed explanation",
      "evidence": "Quote from section",
      "rationale": "Why this violates policy"
    }}
  ],
  "remediations": [
    {{
      "sectionId": "section-id",
      "proposedText": "Rewritten compliant text (only if FAIL or WARNING)"
    }}
  ]
}}

**IMPORTANT:** If a section contains compliance language and no prohibited content, return {{"issues": [], "remediations": []}}

Return ONLY valid JSON, no other text."""


@dataclass
class SectionReviewResult:
    """Issues and remediations returned by a section review."""

    issues: list[dict[str, Any]] = field(default_factory=list)
    remediations: list[dict[str, Any]] = field(default_factory=list)
    tokens: int = 0


class ClaudeReviewer:
    """
    Reviews document sections with an Anthropic model.

    Args:
        config: Model settings. Defaults to ``LLMConfig.from_env()``. The API
            key must be set before ``review`` is called.
        client: Optional pre-built ``anthropic.AsyncAnthropic`` client.
        prohibited_terms: Terms that make a section fail outright.
        compliance_level: Label included in the prompt.
    """

    def __init__(
        self,
        config: Optional[LLMConfig] = None,
        client: Any = None,
        prohibited_terms: Optional[list[str]] = None,
        compliance_level: str = "Standard",
    ):
        self.config = config or LLMConfig.from_env()
        self._client = client
        self.prohibited_terms = prohibited_terms or list(DEFAULT_PROHIBITED_TERMS)
        self.compliance_level = compliance_level

    def _get_client(self) -> Any:
        if self._client is None:
            if not self.config.api_key:
                raise LLMError("ANTHROPIC_API_KEY not configured")
            try:
                import anthropic
            except ImportError:
                raise ImportError(
                    "anthropic package required. Install with: pip install anthropic"
                )
            self._client = anthropic.AsyncAnthropic(
                api_key=self.config.api_key,
                timeout=self.config.timeout_seconds,
            )
        return self._client

    def build_prompt(self, sections: list[Section]) -> str:
        sections_text = "\n\n".join(
            f"### Section {n}: {s.title}\n{s.content}" for n, s in enumerate(sections, 1)
        )
        return REVIEW_PROMPT.format(
            compliance_level=self.compliance_level,
            sections_text=sections_text,
            prohibited_terms=", ".join(self.prohibited_terms),
        )

    async def review(
        self,
        sections: list[Section],
        mode: str = "document",
        target_section_id: Optional[str] = None,
    ) -> SectionReviewResult:
        """
        Review ``sections``. In ``section`` mode only ``target_section_id``
        is sent to the model.

        Raises:
            LLMError: Missing key, no sections, API failure or a reply that
                is not the expected JSON object.
        """
        if mode == "section" and target_section_id:
            targets = [s for s in sections if s.id == target_section_id]
        else:
            targets = list(sections)
        if not targets:
            raise LLMError("No sections to review")

        client = self._get_client()
        t0 = time.time()
        try:
            response = await client.messages.create(
                model=self.config.model,
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
                messages=[{"role": "user", "content": self.build_prompt(targets)}],
            )
        except LLMError:
            raise
        except Exception as e:
            logger.error(f"Claude API error: {e}")
            raise LLMError(f"Claude API failed: {e}")

        logger.debug(f"Claude review of {len(targets)} section(s) took {int((time.time() - t0) * 1000)}ms")
        return self.parse_response(response, targets[0].id)

    def parse_response(self, response: Any, default_section_id: str) -> SectionReviewResult:
        text = _extract_text(response)
        try:
            parsed = json.loads(text)
        except (TypeError, ValueError):
            logger.error(f"Failed to parse Claude response as JSON: {text[:200]}")
            raise LLMError("LLM returned invalid JSON. Review failed.")

        if not isinstance(parsed, dict):
            raise LLMError("LLM response is not a valid object")
        if not isinstance(parsed.get("issues"), list):
            raise LLMError("LLM response missing valid issues array")

        stamp = int(time.time() * 1000)
        issues = [
            {
                "id": f"issue-{stamp}-{index}",
                "sectionId": issue.get("sectionId") or default_section_id,
                "severity": issue.get("severity") or "WARNING",
                "title": issue.get("title") or "Issue detected",
                "message": issue.get("message") or "",
                "evidence": issue.get("evidence"),
                "rationale": issue.get("rationale"),
                "ruleRef": issue.get("ruleRef"),
                "agent": {"id": "compliance-agent", "name": "Compliance Agent (Claude)"},
            }
            for index, issue in enumerate(parsed["issues"])
            if isinstance(issue, dict)
        ]
        remediations = [
            {
                "sectionId": rem.get("sectionId") or default_section_id,
                "proposedText": rem.get("proposedText"),
                "agent": {"id": "rewrite-agent", "name": "Rewrite Agent (Claude)"},
            }
            for rem in parsed.get("remediations") or []
            if isinstance(rem, dict)
        ]
        return SectionReviewResult(issues=issues, remediations=remediations, tokens=_usage_tokens(response))


def _extract_text(response: Any) -> str:
    content = getattr(response, "content", None)
    if content is None and isinstance(response, dict):
        content = response.get("content")
    if isinstance(content, list):
        return "".join(
            (block.get("text", "") if isinstance(block, dict) else getattr(block, "text", ""))
            for block in content
            if (block.get("type") if isinstance(block, dict) else getattr(block, "type", "")) == "text"
        )
    return str(content or "")


def _usage_tokens(response: Any) -> int:
    usage = getattr(response, "usage", None)
    if usage is None:
        return 0
    return (getattr(usage, "input_tokens", 0) or 0) + (getattr(usage, "output_tokens", 0) or 0)
