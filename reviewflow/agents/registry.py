"""
ReviewFlow - Agent registry.

Central catalog mapping agent ids to their configuration and handler.
"""

from typing import Iterable, Optional

from .base import AgentConfig, AgentDefinition, AgentHandler
from .handlers import (
    compliance,
    draft_client_comms,
    evaluate,
    extract_facts,
    map_policy,
    merge,
    optimize,
    redteam_review,
    request_evidence,
    synthesize,
    validate,
    write_audit,
)


def _agent(
    agent_id: str, name: str, description: str, capabilities: Iterable[str], handler: AgentHandler
) -> AgentDefinition:
    return AgentDefinition(
        config=AgentConfig(
            id=agent_id, name=name, description=description, capabilities=tuple(capabilities)
        ),
        handler=handler,
    )


DEFAULT_AGENTS = [
    _agent(
        "validate-agent",
        "Validate Agent",
        "Validates user input relevance for profile topics",
        ["validate", "extract", "guide"],
        validate,
    ),
    _agent(
        "synthesize-agent",
        "Synthesize Agent",
        "Synthesizes multiple user responses into coherent paragraphs",
        ["synthesize", "summarize", "combine"],
        synthesize,
    ),
    _agent(
        "optimize-agent",
        "Optimize Agent",
        "Optimizes section content based on user requests",
        ["optimize", "revise", "enhance"],
        optimize,
    ),
    _agent(
        "merge-agent",
        "Merge Agent",
        "Merges chat content with document context",
        ["merge", "enrich", "combine"],
        merge,
    ),
    _agent(
        "evaluate-agent",
        "Evaluate Agent",
        "Evaluates section content for compliance and quality",
        ["evaluate", "assess", "validate"],
        evaluate,
    ),
    _agent(
        "compliance-agent",
        "Compliance Agent",
        "Checks content for policy violations",
        ["compliance", "policy", "validate"],
        compliance,
    ),
    _agent(
        "extract-facts-agent",
        "Extract Facts Agent",
        "Extracts structured facts from document sections with evidence anchors",
        ["extract", "parse", "structure", "evidence-tracking"],
        extract_facts,
    ),
    _agent(
        "map-policy-agent",
        "Map Policy Agent",
        "Maps extracted facts to relevant policy rules using corpus",
        ["policy-mapping", "risk-assessment", "compliance-check"],
        map_policy,
    ),
    _agent(
        "redteam-review-agent",
        "Red Team Review Agent",
        "Adversarial review to find edge cases and policy violations",
        ["adversarial-review", "edge-case-detection", "critical-analysis"],
        redteam_review,
    ),
    _agent(
        "request-evidence-agent",
        "Request Evidence Agent",
        "Generates specific evidence requests based on compliance issues",
        ["evidence-request", "gap-analysis", "prioritization"],
        request_evidence,
    ),
    _agent(
        "draft-client-comms-agent",
        "Draft Client Communications Agent",
        "Drafts professional client-facing communications based on review results",
        ["communication", "multilingual", "tone-adjustment"],
        draft_client_comms,
    ),
    _agent(
        "write-audit-agent",
        "Write Audit Agent",
        "Generates structured audit log entries for compliance records",
        ["audit-logging", "compliance-trail", "documentation"],
        write_audit,
    ),
]


class AgentRegistry:
    """
    Lookup table of agent definitions.

    Example:
        ```python
        registry = AgentRegistry()
        registry.register(AgentDefinition(config, my_handler))
        agent = registry.get("compliance-agent")
        ```
    """

    def __init__(self, agents: Optional[Iterable[AgentDefinition]] = None):
        self._agents: dict[str, AgentDefinition] = {}
        for agent in DEFAULT_AGENTS if agents is None else agents:
            self.register(agent)

    def register(self, agent: AgentDefinition) -> None:
        self._agents[agent.config.id] = agent

    def get(self, agent_id: str) -> Optional[AgentDefinition]:
        return self._agents.get(agent_id)

    def list(self) -> list[AgentDefinition]:
        return list(self._agents.values())

    def __contains__(self, agent_id: str) -> bool:
        return agent_id in self._agents

    def __len__(self) -> int:
        return len(self._agents)
