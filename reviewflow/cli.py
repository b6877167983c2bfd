"""
ReviewFlow CLI - Command-line interface for running review flows.

Commands:
    reviewflow flows                         List registered flows
    reviewflow agents                        List registered agents
    reviewflow orchestrate section.txt       Run a flow on one section
    reviewflow plan review.json              Plan a review scope for a dirty queue
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _write_json(data: dict[str, Any], output: Optional[str]) -> None:
    text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        print(f"Result saved to: {output}", file=sys.stderr)
    else:
        print(text)


def cmd_flows(args: argparse.Namespace) -> None:
    """List registered flows and their steps."""
    from .orchestrator import list_flows

    print("Available Flows:\n")
    for flow in list_flows():
        print(f"  {flow.id}  (v{flow.version})")
        print(f"    {flow.name}")
        for phase, steps in (
            ("main", flow.main_sequence),
            ("conditional", flow.conditional_steps),
            ("finalization", flow.finalization_steps),
        ):
            for step in steps:
                marker = " [critical]" if step.critical else ""
                print(f"    - {phase}: {step.id} -> {step.unit_id}{marker}")
        print()


def cmd_agents(args: argparse.Namespace) -> None:
    """List registered agents."""
    from .agents import AgentRegistry

    print("Available Agents:\n")
    for agent in AgentRegistry().list():
        config = agent.config
        print(f"  {config.id}")
        print(f"    {config.description}")
        print(f"    Capabilities: {', '.join(config.capabilities)}")
        print()


def cmd_orchestrate(args: argparse.Namespace) -> None:
    """Run a flow on a single section read from a file or stdin."""
    from .agents import AgentRunner
    from .config import LLMConfig, SkillTransportConfig
    from .exceptions import ReviewFlowError
    from .llm import ClaudeReviewer
    from .models import AgentMode
    from .orchestrator import (
        LoggingObserver,
        OrchestrateRequest,
        OrchestrationOptions,
        Orchestrator,
        RecordingObserver,
    )
    from .section_ids import Section
    from .skills import SkillDispatcher

    try:
        content = _read_text(args.section)
    except OSError as e:
        print(f"Error: Cannot read section: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        options = OrchestrationOptions.from_dict(
            {
                "language": args.language,
                "tone": args.tone,
                "client_name": args.client_name,
                "reviewer": args.reviewer,
                "mode": args.mode,
                "skip_steps": args.skip_step,
                "remote_skills": args.remote_skills,
            }
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    request = OrchestrateRequest(
        flow_id=args.flow,
        document_id=args.document_id,
        sections=[Section(id=args.section_id, title=args.title, content=content)],
        options=options,
    )

    llm = ClaudeReviewer(LLMConfig.from_env()) if options.mode == AgentMode.REAL else None
    observer = RecordingObserver() if args.trace else LoggingObserver()
    orchestrator = Orchestrator(
        runner=AgentRunner(llm=llm),
        dispatcher=SkillDispatcher(SkillTransportConfig.from_env()),
        observer=observer,
    )

    try:
        response = asyncio.run(orchestrator.orchestrate(request))
    except ReviewFlowError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    result = response.to_dict()
    if args.trace:
        result["events"] = observer.events
    _write_json(result, args.output)

    decision = response.decision
    print(
        f"Decision: {decision.next_action} (confidence {decision.confidence})",
        file=sys.stderr,
    )
    if not response.ok:
        print(f"Error: {response.error}", file=sys.stderr)
        sys.exit(1)


def cmd_plan(args: argparse.Namespace) -> None:
    """Plan a review scope from a JSON file holding a dirty queue and sections."""
    from .batch_review import EMPTY_SCOPE_PLAN, plan_with_fallback
    from .config import PlannerConfig
    from .dirty_queue import DirtyQueue
    from .exceptions import ConfigurationError
    from .scope_planner import get_scope_plan_summary
    from .section_ids import Section, normalize_scope_plan_for_api, validate_section_ids

    try:
        data = json.loads(_read_text(args.input))
    except OSError as e:
        print(f"Error: Cannot read input: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: Invalid JSON: {e}", file=sys.stderr)
        sys.exit(1)

    if not isinstance(data, dict):
        print("Error: Input must be a JSON object with dirtyQueue and sections", file=sys.stderr)
        sys.exit(1)

    try:
        config = PlannerConfig.from_yaml(args.config) if args.config else PlannerConfig()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        queue = DirtyQueue.from_dict(data.get("dirtyQueue") or {})
        sections = [Section.from_dict(s) for s in data.get("sections") or []]
    except (KeyError, TypeError, ValueError) as e:
        print(f"Error: Invalid input: {e}", file=sys.stderr)
        sys.exit(1)

    valid, errors, queue = validate_section_ids(queue, sections)
    fallbacks = [] if valid else [f"Sanitized dirtyQueue: {'; '.join(errors)}"]

    if not queue.entries:
        result = {
            "scopePlan": dict(EMPTY_SCOPE_PLAN),
            "summary": "Nothing to review",
            "fallbacks": fallbacks,
        }
    else:
        plan, reasons = plan_with_fallback(queue, sections, config)
        result = {
            "scopePlan": normalize_scope_plan_for_api(plan),
            "summary": get_scope_plan_summary(plan),
            "fallbacks": fallbacks + reasons,
        }
    _write_json(result, args.output)


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="reviewflow",
        description="ReviewFlow CLI - Run compliance, contract and KYC review flows",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 1.0.0",
    )
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=["debug", "info", "warning", "error"],
        help="Log level for stderr output (default: warning)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Flows command
    flows_parser = subparsers.add_parser("flows", help="List registered flows")
    flows_parser.set_defaults(func=cmd_flows)

    # Agents command
    agents_parser = subparsers.add_parser("agents", help="List registered agents")
    agents_parser.set_defaults(func=cmd_agents)

    # Orchestrate command
    run_parser = subparsers.add_parser("orchestrate", help="Run a flow on one section")
    run_parser.add_argument("section", help="Path to the section text ('-' for stdin)")
    run_parser.add_argument(
        "--flow",
        "-f",
        default="compliance-review-v1",
        help="Flow id (default: compliance-review-v1)",
    )
    run_parser.add_argument(
        "--document-id",
        "-d",
        default="DOC-CLI",
        help="Document id recorded in the audit log (default: DOC-CLI)",
    )
    run_parser.add_argument("--title", default="Section 1", help="Section title")
    run_parser.add_argument("--section-id", default="section-1", help="Section id")
    run_parser.add_argument("--language", help="Client communication language")
    run_parser.add_argument("--tone", help="Client communication tone")
    run_parser.add_argument("--client-name", help="Client name used in the greeting")
    run_parser.add_argument("--reviewer", help="Reviewer recorded in the audit log")
    run_parser.add_argument(
        "--mode",
        choices=["fake", "real"],
        default="fake",
        help="Agent execution mode (default: fake)",
    )
    run_parser.add_argument(
        "--skip-step",
        action="append",
        default=[],
        help="Step id to skip (repeatable)",
    )
    run_parser.add_argument(
        "--remote-skills",
        action="store_true",
        help="Request the remote skill transport (needs ENABLE_REMOTE_SKILLS=true)",
    )
    run_parser.add_argument(
        "--trace",
        action="store_true",
        help="Include orchestration events in the output",
    )
    run_parser.add_argument("--output", "-o", help="Save result to JSON file")
    run_parser.set_defaults(func=cmd_orchestrate)

    # Plan command
    plan_parser = subparsers.add_parser("plan", help="Plan a review scope for a dirty queue")
    plan_parser.add_argument(
        "input", help="JSON file with dirtyQueue and sections ('-' for stdin)"
    )
    plan_parser.add_argument("--config", "-c", help="Planner configuration YAML")
    plan_parser.add_argument("--output", "-o", help="Save result to JSON file")
    plan_parser.set_defaults(func=cmd_plan)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    args.func(args)


if __name__ == "__main__":
    main()
