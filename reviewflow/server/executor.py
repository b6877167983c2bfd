"""
Skill execution on the remote skills server.

Summary-mode requests (or requests whose input carries no real content)
get deterministic, PII-safe mock outputs. Full-content requests run the
in-process skill implementation.
"""

import copy
import logging
from typing import Any

from ..exceptions import SkillExecutionError
from ..skills.catalog import RISK_TRIAGE, TOPIC_ASSEMBLE
from ..skills.kyc import execute_skill as execute_local_skill

logger = logging.getLogger("reviewflow.server.executor")

MIN_DOCUMENT_CONTENT_CHARS = 50
MIN_TOPIC_CONTENT_CHARS = 20

REDACTED = "[REDACTED - Summary Mode]"

MOCK_RESPONSES: dict[str, dict[str, Any]] = {
    TOPIC_ASSEMBLE: {
        "topicSections": [
            {
                "topicId": "client_identity",
                "content": REDACTED,
                "evidenceRefs": [],
                "coverage": "partial",
            },
            {
                "topicId": "source_of_wealth",
                "content": REDACTED,
                "evidenceRefs": [],
                "coverage": "partial",
            },
        ]
    },
    RISK_TRIAGE: {
        "riskScore": 0,
        "routePath": "fast",
        "triageReasons": ["Mock response for summary mode (PII-safe)"],
        "riskBreakdown": {"coveragePoints": 0, "keywordPoints": 0, "totalPoints": 0},
    },
}


def _has_text(items: list[Any], min_chars: int) -> bool:
    return any(
        isinstance(item, dict)
        and isinstance(item.get("content"), str)
        and len(item["content"]) > min_chars
        for item in items
    )


def is_summary_input(input: dict[str, Any]) -> bool:
    """True when the input carries metadata only, not real document content."""
    if isinstance(input.get("documents"), list):
        return not _has_text(input["documents"], MIN_DOCUMENT_CONTENT_CHARS)
    if isinstance(input.get("topicSections"), list):
        return not _has_text(input["topicSections"], MIN_TOPIC_CONTENT_CHARS)
    return True


def get_mock_response(skill_name: str) -> dict[str, Any]:
    mock = MOCK_RESPONSES.get(skill_name)
    if mock is None:
        raise SkillExecutionError(f"Mock not defined for skill: {skill_name}")
    return copy.deepcopy(mock)


def execute_skill(
    skill_name: str, input: dict[str, Any], test_mode: str, correlation_id: str
) -> dict[str, Any]:
    """
    Execute ``skill_name`` for a remote request.

    Raises:
        SkillExecutionError: Unknown skill or invalid full-content input.
    """
    if test_mode == "summary" or is_summary_input(input):
        logger.info(f"{skill_name} - summary mode: returning mock (correlation_id={correlation_id})")
        return get_mock_response(skill_name)

    logger.info(
        f"{skill_name} - full content mode: executing skill (correlation_id={correlation_id})"
    )
    return execute_local_skill(skill_name, input)
