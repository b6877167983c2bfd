"""
ReviewFlow - Agent runner.

Executes one agent invocation and wraps the outcome in an ``AgentResponse``
envelope. Handler exceptions never escape: they become ``ok=False``
envelopes. Each invocation writes exactly one JSON log line.
"""

import asyncio
import json
import logging
import random
import string
import time
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from ..models import AgentMode, StepStatus
from .base import AgentContext, AgentMetadata, AgentResponse
from .registry import AgentRegistry

logger = logging.getLogger("reviewflow.agents")


def generate_trace_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=7))
    return f"trace_{int(time.time() * 1000)}_{suffix}"


def _input_summary(input: Any) -> str:
    return input[:50] if isinstance(input, str) else "object"


class AgentRunner:
    """
    Runs agents from a registry.

    Args:
        registry: Agent catalog; defaults to the twelve built-in agents.
        llm: Section reviewer made available to ``real`` mode handlers.
    """

    def __init__(self, registry: Optional[AgentRegistry] = None, llm: Any = None):
        self.registry = registry or AgentRegistry()
        self.llm = llm

    async def _call_handler(self, handler: Callable, *args: Any) -> Any:
        """Call a handler, handling both sync and async functions."""
        if asyncio.iscoroutinefunction(handler):
            return await handler(*args)
        return handler(*args)

    def _log(self, record: dict[str, Any]) -> None:
        logger.info(json.dumps(record, default=str))

    async def run(
        self, agent_id: str, input: dict[str, Any], mode: AgentMode = AgentMode.FAKE
    ) -> AgentResponse:
        mode = AgentMode(mode)
        trace_id = generate_trace_id()
        t0 = time.time()

        def latency() -> int:
            return int((time.time() - t0) * 1000)

        def failure(error: str, log_error: str, tokens: int = 0) -> AgentResponse:
            elapsed = latency()
            self._log(
                {
                    "trace_id": trace_id,
                    "agent_id": agent_id,
                    "mode": mode.value,
                    "status": StepStatus.ERROR.value,
                    "error": log_error,
                    "latency_ms": elapsed,
                    "tokens": tokens,
                }
            )
            return AgentResponse(
                ok=False,
                agent_id=agent_id,
                trace_id=trace_id,
                mode=mode,
                output=None,
                metadata=AgentMetadata(latency_ms=elapsed, tokens=tokens, status=StepStatus.ERROR),
                error=error,
            )

        agent = self.registry.get(agent_id)
        if agent is None:
            return failure("Agent not found in registry", "Agent not found")

        context = AgentContext(
            trace_id=trace_id,
            mode=mode,
            timestamp=datetime.now(timezone.utc),
            input=input,
            llm=self.llm,
        )

        try:
            output = await self._call_handler(agent.handler, input, context)
        except Exception as e:
            message = str(e) or "Unknown error"
            return failure(message, message, context.tokens)

        elapsed = latency()
        self._log(
            {
                "trace_id": trace_id,
                "agent_id": agent_id,
                "mode": mode.value,
                "status": StepStatus.SUCCESS.value,
                "latency_ms": elapsed,
                "tokens": context.tokens,
                "input_summary": _input_summary(input),
            }
        )
        return AgentResponse(
            ok=True,
            agent_id=agent_id,
            trace_id=trace_id,
            mode=mode,
            output=output,
            metadata=AgentMetadata(
                latency_ms=elapsed, tokens=context.tokens, status=StepStatus.SUCCESS
            ),
        )


_default_runner: Optional[AgentRunner] = None


async def run_agent(
    agent_id: str, input: dict[str, Any], mode: AgentMode = AgentMode.FAKE
) -> AgentResponse:
    """Run an agent with the default registry."""
    global _default_runner
    if _default_runner is None:
        _default_runner = AgentRunner()
    return await _default_runner.run(agent_id, input, mode)
