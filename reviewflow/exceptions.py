"""
ReviewFlow - Custom exceptions for error handling.
"""

from typing import Any, Optional


class ReviewFlowError(Exception):
    """Base exception for all ReviewFlow errors."""

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigurationError(ReviewFlowError):
    """Raised for fatal configuration problems (unknown flow, agent or skill)."""

    pass


class FlowNotFoundError(ConfigurationError):
    """Raised when a flow id is not present in the flow registry."""

    def __init__(self, flow_id: str, available: Optional[list[str]] = None, **kwargs: Any) -> None:
        available = available or []
        super().__init__(
            f'Flow "{flow_id}" not found. Available: {", ".join(available)}', **kwargs
        )
        self.flow_id = flow_id
        self.available = available


class AgentNotFoundError(ConfigurationError):
    """Raised when an agent id is not present in the agent registry."""

    def __init__(self, agent_id: str, **kwargs: Any) -> None:
        super().__init__(f"Agent not found in registry: {agent_id}", **kwargs)
        self.agent_id = agent_id


class SkillNotFoundError(ConfigurationError):
    """Raised when a skill name is not present in the skill catalog."""

    def __init__(self, skill_name: str, **kwargs: Any) -> None:
        super().__init__(f"Skill not found in catalog: {skill_name}", **kwargs)
        self.skill_name = skill_name


class RequestValidationError(ReviewFlowError):
    """Raised when a request does not have the required shape."""

    def __init__(self, message: str, errors: Optional[list[Any]] = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.errors = errors or []


class StepExecutionError(ReviewFlowError):
    """Raised when a flow step fails."""

    def __init__(self, message: str, step_id: str = "", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.step_id = step_id


class CriticalStepError(StepExecutionError):
    """Raised when a critical step fails and the run must abort."""

    pass


class SkillExecutionError(ReviewFlowError):
    """Raised by the local skill transport; carries the recorded invocation."""

    def __init__(self, message: str, invocation: Optional[Any] = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.invocation = invocation


class RemoteSkillError(ReviewFlowError):
    """Raised inside the remote transport; never escapes it."""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.status_code = status_code


class LLMError(ReviewFlowError):
    """Raised when a generative-model review cannot produce a usable result."""

    pass
