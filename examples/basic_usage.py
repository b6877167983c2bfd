#!/usr/bin/env python3
"""
ReviewFlow - Basic Usage Example

Runs the compliance review flow on a single section in fake mode and
prints the branch decision, the executed steps and the audit record.

Prerequisites:
    pip install reviewflow

Usage:
    python basic_usage.py
"""

import asyncio

from reviewflow import (
    OrchestrateRequest,
    OrchestrationOptions,
    Orchestrator,
    RecordingObserver,
    Section,
)

SECTION = """We invest client funds of $250,000 in a diversified portfolio of
listed equities. The client will review the allocation on 2024-06-30."""


async def main():
    observer = RecordingObserver()
    orchestrator = Orchestrator(observer=observer)

    # 1. Run the compliance flow
    print("1. Running compliance-review-v1...")
    response = await orchestrator.orchestrate(
        OrchestrateRequest(
            flow_id="compliance-review-v1",
            document_id="PROPOSAL-001",
            sections=[Section(id="section-1", title="Investment Strategy", content=SECTION)],
            options=OrchestrationOptions(client_name="Ms. Rivera", tone="friendly"),
        )
    )
    print(f"   Trace: {response.parent_trace_id}")

    # 2. Decision
    decision = response.decision
    print("\n2. Decision")
    print(f"   Next action: {decision.next_action} (confidence {decision.confidence})")
    print(f"   Reason: {decision.reason}")
    for issue in decision.blocking_issues:
        print(f"   Blocking: {issue}")

    # 3. Executed steps
    print("\n3. Steps")
    for step in response.plan.steps:
        print(f"   {step.step_id:<18} {step.status}")

    # 4. Evidence requests, when the flow asked for more information
    evidence = response.artifacts.get("evidence_requests")
    if evidence:
        print("\n4. Evidence requests")
        for request in evidence["requests"]:
            print(f"   {request['id']} [{request['priority']}] {request['request_text']}")

    # 5. Audit record
    audit = response.artifacts.get("audit_log", {})
    print("\n5. Audit")
    print(f"   {audit.get('audit_id')}: {audit.get('final_decision')}")
    print(f"   Events recorded: {len(observer.events)}")


if __name__ == "__main__":
    asyncio.run(main())
