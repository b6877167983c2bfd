"""
ReviewFlow - Orchestration observers.

The engine reports lifecycle events to an injected observer instead of
logging itself. Event names:

    orchestration_started, step_started, step_completed, step_error,
    step_skipped, branching_decision, orchestration_completed,
    orchestration_error
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

logger = logging.getLogger("reviewflow.orchestrator")


class OrchestrationObserver:
    """Receives orchestration lifecycle events. The base class ignores them."""

    def on_event(self, event: str, data: dict[str, Any]) -> None:
        pass


class LoggingObserver(OrchestrationObserver):
    """Writes each event as one JSON line through the orchestrator logger."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger

    def on_event(self, event: str, data: dict[str, Any]) -> None:
        record = {
            "event": event,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **data,
        }
        level = logging.ERROR if event in ("step_error", "orchestration_error") else logging.INFO
        self.log.log(level, json.dumps(record, default=str))


class RecordingObserver(OrchestrationObserver):
    """Keeps events in memory, in the order they were reported."""

    def __init__(self) -> None:
        self.events: list[dict[str, Any]] = []

    def on_event(self, event: str, data: dict[str, Any]) -> None:
        self.events.append({"event": event, **data})

    def names(self) -> list[str]:
        return [e["event"] for e in self.events]

    def of(self, event: str) -> list[dict[str, Any]]:
        return [e for e in self.events if e["event"] == event]

    def clear(self) -> None:
        self.events.clear()
