"""
ReviewFlow - Flow registry.
"""

from typing import Optional

from ...exceptions import FlowNotFoundError
from .base import FlowDefinition, PlanStep
from .compliance_review import COMPLIANCE_REVIEW_FLOW
from .contract_risk_review import CONTRACT_RISK_REVIEW_FLOW
from .kyc_triage import KYC_TRIAGE_FLOW

FLOW_REGISTRY: dict[str, FlowDefinition] = {
    flow.id: flow for flow in (COMPLIANCE_REVIEW_FLOW, CONTRACT_RISK_REVIEW_FLOW, KYC_TRIAGE_FLOW)
}


def get_flow(flow_id: str, flows: Optional[dict[str, FlowDefinition]] = None) -> FlowDefinition:
    """Look up a flow by id, raising ``FlowNotFoundError`` for unknown ids."""
    flows = FLOW_REGISTRY if flows is None else flows
    flow = flows.get(flow_id)
    if flow is None:
        raise FlowNotFoundError(flow_id, list(flows))
    return flow


def list_flows() -> list[FlowDefinition]:
    return list(FLOW_REGISTRY.values())


__all__ = [
    "COMPLIANCE_REVIEW_FLOW",
    "CONTRACT_RISK_REVIEW_FLOW",
    "FLOW_REGISTRY",
    "FlowDefinition",
    "KYC_TRIAGE_FLOW",
    "PlanStep",
    "get_flow",
    "list_flows",
]
