"""
ReviewFlow - Skill transports.

``LocalSkillTransport`` runs skills in-process and re-raises failures.
``RemoteSkillTransport`` posts a safety-gated payload to the remote skills
server and never raises: on any failure it returns the skill's safe
fallback output and records the failure in the invocation audit fields.
"""

import copy
import logging
import time
from ipaddress import ip_address
from typing import Any, Optional
from urllib.parse import urlparse

import httpx
from pydantic import ValidationError

from ..config import SkillTransportConfig
from ..exceptions import RemoteSkillError, SkillExecutionError
from ..models import TransportKind
from .base import (
    MAX_ERROR_CHARS,
    TransportResult,
    redact_pii,
    summarize_for_audit,
    truncate,
)
from .catalog import RISK_TRIAGE, TOPIC_ASSEMBLE
from .kyc import execute_skill
from .schemas import RemoteSkillResponse

logger = logging.getLogger("reviewflow.skills.transports")

RESULT_PASSTHROUGH_KEY = "__result"

SAFE_FALLBACK_OUTPUTS: dict[str, dict[str, Any]] = {
    TOPIC_ASSEMBLE: {"topicSections": []},
    RISK_TRIAGE: {
        "riskScore": 0,
        "routePath": "fast",
        "triageReasons": ["[degraded]"],
        "riskBreakdown": {"coveragePoints": 0, "keywordPoints": 0, "totalPoints": 0},
    },
}


def get_safe_fallback_output(skill_name: str) -> dict[str, Any]:
    return copy.deepcopy(SAFE_FALLBACK_OUTPUTS.get(skill_name, {}))


def _elapsed_ms(t0: float) -> int:
    return max(1, round((time.time() - t0) * 1000))


# ---------------------------------------------------------------------------
# Local transport
# ---------------------------------------------------------------------------


class LocalSkillTransport:
    """
    Runs a skill in the current process.

    An input carrying ``__result`` is passed through unchanged; otherwise
    the in-process implementation runs. Failures are re-raised as
    ``SkillExecutionError`` with the audit fields attached.
    """

    target = "in-process"

    async def execute(self, skill_name: str, input: dict[str, Any]) -> TransportResult:
        t0 = time.time()
        try:
            if RESULT_PASSTHROUGH_KEY in input:
                output = input[RESULT_PASSTHROUGH_KEY]
            else:
                output = execute_skill(skill_name, input)
        except Exception as e:
            error = truncate(redact_pii(str(e) or e.__class__.__name__), MAX_ERROR_CHARS)
            result = TransportResult(
                output=None,
                duration_ms=_elapsed_ms(t0),
                ok=False,
                input_summary=summarize_for_audit(input),
                output_summary="[error]",
                transport=TransportKind.LOCAL,
                target=self.target,
                error=error,
            )
            raise SkillExecutionError(error, invocation=result) from e

        return TransportResult(
            output=output,
            duration_ms=_elapsed_ms(t0),
            ok=True,
            input_summary=summarize_for_audit(input),
            output_summary=summarize_for_audit(output),
            transport=TransportKind.LOCAL,
            target=self.target,
        )


# ---------------------------------------------------------------------------
# Remote transport
# ---------------------------------------------------------------------------


def is_loopback_url(url: str) -> bool:
    hostname = (urlparse(url).hostname or "").lower()
    if hostname == "localhost":
        return True
    try:
        return ip_address(hostname).is_loopback
    except ValueError:
        return False


def _redact_documents(documents: list[Any]) -> list[dict[str, Any]]:
    redacted = []
    for doc in documents:
        doc = doc if isinstance(doc, dict) else {}
        name = doc.get("name") or "unknown"
        redacted.append(
            {
                "name": name,
                "filename": doc.get("filename") or name,
                "doc_type_hint": doc.get("doc_type_hint") or "unknown",
                "length": len(doc.get("content") or doc.get("text") or ""),
            }
        )
    return redacted


def _redact_topic_sections(sections: list[Any]) -> list[dict[str, Any]]:
    redacted = []
    for section in sections:
        section = section if isinstance(section, dict) else {}
        redacted.append(
            {
                "topicId": section.get("topicId") or "unknown",
                "coverage": section.get("coverage") or "unknown",
                "length": len(section.get("content") or ""),
            }
        )
    return redacted


def summarize_payload(input: dict[str, Any]) -> dict[str, Any]:
    """Strip document and topic content down to metadata-only summaries."""
    if RESULT_PASSTHROUGH_KEY in input and isinstance(input[RESULT_PASSTHROUGH_KEY], dict):
        input = input[RESULT_PASSTHROUGH_KEY]
    if isinstance(input.get("documents"), list):
        return {"documents": _redact_documents(input["documents"])}
    if isinstance(input.get("topicSections"), list):
        return {"topicSections": _redact_topic_sections(input["topicSections"])}
    return {"_summary": "redacted", "_type": type(input).__name__}


class RemoteSkillTransport:
    """
    Executes skills on the remote skills server over HTTP.

    Args:
        config: Server URL, timeout, test mode and the full-content switch.
    """

    def __init__(self, config: Optional[SkillTransportConfig] = None):
        self.config = config or SkillTransportConfig()

    @property
    def endpoint(self) -> str:
        return f"{self.config.remote_server_url.rstrip('/')}/skills/execute"

    def build_safe_payload(self, input: dict[str, Any]) -> tuple[dict[str, Any], str]:
        """
        Returns ``(payload, effective_test_mode)``.

        Full content is sent only when requested, the target is a loopback
        address and ``allow_full_content`` is set; anything else is
        downgraded to summary mode.
        """
        if self.config.test_mode == "full_content":
            if not is_loopback_url(self.config.remote_server_url):
                logger.error(
                    f"SECURITY: full_content blocked for non-loopback target "
                    f"{self.config.remote_server_url}"
                )
            elif not self.config.allow_full_content:
                logger.warning("full_content requested but not enabled; sending summary")
            else:
                logger.warning("SECURITY: sending full content to loopback target for testing")
                return input, "full_content"
        return summarize_payload(input), "summary"

    async def execute(self, skill_name: str, input: dict[str, Any], correlation_id: str) -> TransportResult:
        t0 = time.time()
        payload, test_mode = self.build_safe_payload(input)
        body = {
            "skill_name": skill_name,
            "input_summary": payload,
            "context_hint": self.config.context_hint,
            "correlation_id": correlation_id,
            "test_mode": test_mode,
        }
        input_summary = summarize_for_audit(payload, MAX_ERROR_CHARS)

        logger.info(f"Executing {skill_name} via {self.endpoint} (correlation_id={correlation_id})")

        error: Optional[str] = None
        try:
            async with httpx.AsyncClient(timeout=self.config.timeout_seconds) as client:
                response = await client.request("POST", self.endpoint, json=body)
            if not response.is_success:
                raise RemoteSkillError(
                    f"HTTP {response.status_code}: {response.text[:MAX_ERROR_CHARS]}",
                    status_code=response.status_code,
                )
            try:
                remote = RemoteSkillResponse.model_validate(response.json())
            except (ValidationError, ValueError) as e:
                raise RemoteSkillError(f"Invalid response schema: {e}")
        except httpx.TimeoutException:
            error = f"Remote skill execution timeout ({self.config.timeout_seconds:g}s)"
        except httpx.ConnectError:
            error = f"Remote server unreachable: {self.config.remote_server_url}"
        except RemoteSkillError as e:
            error = truncate(e.message)
        except Exception as e:
            error = truncate(str(e) or e.__class__.__name__)

        if error is None and not remote.ok:
            error = truncate(remote.error or "Remote skill reported failure")

        if error is not None:
            logger.error(f"{skill_name} failed (correlation_id={correlation_id}): {error}")
            return TransportResult(
                output=get_safe_fallback_output(skill_name),
                duration_ms=_elapsed_ms(t0),
                ok=False,
                input_summary=input_summary,
                output_summary="[error]",
                transport=TransportKind.REMOTE,
                target=self.endpoint,
                error=error,
            )

        logger.info(
            f"{skill_name} completed remotely in {remote.duration_ms}ms (correlation_id={correlation_id})"
        )
        return TransportResult(
            output=remote.output_summary,
            duration_ms=remote.duration_ms,
            ok=True,
            input_summary=input_summary,
            output_summary=summarize_for_audit(remote.output_summary, MAX_ERROR_CHARS),
            transport=TransportKind.REMOTE,
            target=self.endpoint,
        )
