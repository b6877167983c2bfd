"""
ReviewFlow - Skill types and audit helpers.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from ..models import TransportKind

MAX_SUMMARY_CHARS = 300
MAX_ERROR_CHARS = 200

_EMAIL = re.compile(r"\b[\w._%+-]+@[\w.-]+\.\w{2,}\b", re.IGNORECASE)
_SSN = re.compile(r"\b\d{3}-\d{2}-\d{4}\b")
_CARD = re.compile(r"\b\d{16}\b")


@dataclass(frozen=True)
class SkillDef:
    """A reusable skill that flows can invoke by name."""

    name: str
    description: str
    owner_agent: str
    version: Optional[str] = None
    tags: tuple[str, ...] = ()
    input_schema_summary: Optional[str] = None
    output_schema_summary: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "ownerAgent": self.owner_agent,
            "version": self.version,
            "tags": list(self.tags),
            "inputSchemaSummary": self.input_schema_summary,
            "outputSchemaSummary": self.output_schema_summary,
        }


@dataclass(frozen=True)
class SkillInvocation:
    """Append-only audit record of one skill invocation."""

    id: str
    skill_name: str
    owner_agent: str
    started_at: str
    ended_at: str
    duration_ms: int
    ok: bool
    input_summary: str
    output_summary: str
    correlation_id: str
    transport: TransportKind
    target: str
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        result = {
            "id": self.id,
            "skillName": self.skill_name,
            "ownerAgent": self.owner_agent,
            "startedAt": self.started_at,
            "endedAt": self.ended_at,
            "durationMs": self.duration_ms,
            "ok": self.ok,
            "inputSummary": self.input_summary,
            "outputSummary": self.output_summary,
            "correlationId": self.correlation_id,
            "transport": self.transport.value,
            "target": self.target,
        }
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass
class TransportResult:
    """What a transport hands back to the dispatcher: the output plus audit fields."""

    output: Any
    duration_ms: int
    ok: bool
    input_summary: str
    output_summary: str
    transport: TransportKind
    target: str
    error: Optional[str] = None


@dataclass
class SkillInvocationContext:
    """
    Per-call context for ``SkillDispatcher.invoke``.

    ``trace`` is the sink that invocation records are appended to.
    ``features`` carries per-call opt-ins such as ``remote_skills``.
    """

    run_id: Optional[str] = None
    trace: Optional[list[SkillInvocation]] = None
    features: dict[str, Any] = field(default_factory=dict)


def truncate(text: str, max_length: int = MAX_ERROR_CHARS) -> str:
    if len(text) > max_length:
        return text[:max_length] + "... [truncated]"
    return text


def redact_pii(text: str) -> str:
    text = _EMAIL.sub("[EMAIL_REDACTED]", text)
    text = _SSN.sub("[SSN_REDACTED]", text)
    return _CARD.sub("[CARD_REDACTED]", text)


def summarize_for_audit(value: Any, max_length: int = MAX_SUMMARY_CHARS) -> str:
    """Serialize, redact and truncate a value for the invocation record."""
    try:
        text = value if isinstance(value, str) else json.dumps(value, default=str, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        return f"[serialization error: {e}]"
    return truncate(redact_pii(text), max_length)
