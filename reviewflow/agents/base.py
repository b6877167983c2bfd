"""
ReviewFlow - Agent types shared by the registry, runner and handlers.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional, Union

from ..models import AgentMode, StepStatus


@dataclass(frozen=True)
class AgentConfig:
    """Static description of an agent."""

    id: str
    name: str
    description: str
    capabilities: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "capabilities": list(self.capabilities),
        }


@dataclass
class AgentContext:
    """
    Per-invocation context handed to a handler.

    Handlers that call a model add to ``tokens``; the runner reports the
    final count in the envelope. ``llm`` is the section reviewer used by
    ``real`` mode handlers, if one was configured.
    """

    trace_id: str
    mode: AgentMode
    timestamp: datetime
    input: Any
    llm: Optional[Any] = None
    tokens: int = 0


AgentHandler = Callable[[dict[str, Any], AgentContext], Union[Awaitable[dict[str, Any]], dict[str, Any]]]


@dataclass(frozen=True)
class AgentDefinition:
    """An agent's configuration together with its handler."""

    config: AgentConfig
    handler: AgentHandler


@dataclass
class AgentMetadata:
    latency_ms: int
    tokens: int
    status: StepStatus

    def to_dict(self) -> dict[str, Any]:
        return {
            "latency_ms": self.latency_ms,
            "tokens": self.tokens,
            "status": self.status.value,
        }


@dataclass
class AgentResponse:
    """Uniform success/error envelope returned for every agent invocation."""

    ok: bool
    agent_id: str
    trace_id: str
    mode: AgentMode
    output: Optional[dict[str, Any]]
    metadata: AgentMetadata
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        result = {
            "ok": self.ok,
            "agent_id": self.agent_id,
            "trace_id": self.trace_id,
            "mode": self.mode.value,
            "output": self.output,
            "metadata": self.metadata.to_dict(),
        }
        if self.error is not None:
            result["error"] = self.error
        return result
