"""
ReviewFlow - Agents: the registry of processing units and the runner
that invokes them.
"""

from .base import AgentConfig, AgentContext, AgentDefinition, AgentMetadata, AgentResponse
from .registry import DEFAULT_AGENTS, AgentRegistry
from .runner import AgentRunner, generate_trace_id, run_agent

__all__ = [
    "AgentConfig",
    "AgentContext",
    "AgentDefinition",
    "AgentMetadata",
    "AgentRegistry",
    "AgentResponse",
    "AgentRunner",
    "DEFAULT_AGENTS",
    "generate_trace_id",
    "run_agent",
]
