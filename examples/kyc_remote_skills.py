#!/usr/bin/env python3
"""
ReviewFlow - KYC Triage with Remote Skills

Runs the KYC triage flow with the skill dispatcher pointed at the remote
skills server. When the server is down the transport falls back to safe
outputs and the flow routes the file to manual review.

Prerequisites:
    pip install reviewflow

Usage:
    reviewflow-skills-server &
    export ENABLE_REMOTE_SKILLS=true
    python kyc_remote_skills.py
"""

import asyncio

from reviewflow import (
    OrchestrateRequest,
    OrchestrationOptions,
    Orchestrator,
    RecordingObserver,
    Section,
    SkillDispatcher,
    SkillTransportConfig,
)

KYC_FILE = """Client name is Jane Doe, passport number P998877, nationality Irish.

Source of wealth is salary income from employment as a surgeon, plus an inheritance.

The account purpose is long-term investment services for retirement products."""


async def main():
    config = SkillTransportConfig.from_env()
    print(f"Remote skills enabled: {config.enable_remote_skills} ({config.remote_server_url})")

    orchestrator = Orchestrator(
        dispatcher=SkillDispatcher(config),
        observer=RecordingObserver(),
    )
    response = await orchestrator.orchestrate(
        OrchestrateRequest(
            flow_id="kyc-triage-v1",
            document_id="KYC-2024-17",
            sections=[Section(id="section-1", title="Client file", content=KYC_FILE)],
            options=OrchestrationOptions(remote_skills=True),
        )
    )

    triage = response.artifacts.get("risk_triage", {})
    print(f"\nRisk score: {triage.get('riskScore')} -> {triage.get('routePath')}")
    for reason in triage.get("triageReasons", []):
        print(f"  - {reason}")
    print(f"\nDecision: {response.decision.next_action}")

    print("\nSkill invocations:")
    for invocation in response.skill_invocations:
        status = "ok" if invocation.ok else f"failed: {invocation.error}"
        print(f"  {invocation.skill_name} via {invocation.transport.value} ({invocation.target}) {status}")


if __name__ == "__main__":
    asyncio.run(main())
