"""
ReviewFlow - Skills: reusable capabilities invoked by name over a local
or remote transport, with an append-only invocation audit trail.
"""

from .base import SkillDef, SkillInvocation, SkillInvocationContext, TransportResult
from .catalog import DEFAULT_SKILLS, RISK_TRIAGE, TOPIC_ASSEMBLE, SkillCatalog
from .dispatcher import SkillDispatcher
from .kyc import assemble_topics, execute_skill, extract_high_risk_keywords, triage_risk
from .transports import (
    LocalSkillTransport,
    RemoteSkillTransport,
    get_safe_fallback_output,
    is_loopback_url,
    summarize_payload,
)

__all__ = [
    "DEFAULT_SKILLS",
    "LocalSkillTransport",
    "RISK_TRIAGE",
    "RemoteSkillTransport",
    "SkillCatalog",
    "SkillDef",
    "SkillDispatcher",
    "SkillInvocation",
    "SkillInvocationContext",
    "TOPIC_ASSEMBLE",
    "TransportResult",
    "assemble_topics",
    "execute_skill",
    "extract_high_risk_keywords",
    "get_safe_fallback_output",
    "is_loopback_url",
    "summarize_payload",
    "triage_risk",
]
