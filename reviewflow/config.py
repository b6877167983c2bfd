"""
ReviewFlow - Configuration objects.

Configuration is resolved once (usually via ``from_env``) and passed into
the components that need it. Components never read the environment
themselves.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Optional

try:
    import yaml
except ImportError:
    yaml = None

from .exceptions import ConfigurationError

DEFAULT_REMOTE_SKILL_SERVER_URL = "http://127.0.0.1:4010"


@dataclass
class SkillTransportConfig:
    """
    Transport selection and safety settings for the skill dispatcher.

    ``enable_remote_skills`` is the global kill switch: when it is off every
    skill runs locally regardless of per-call flags. ``allow_full_content``
    is the second switch required (together with a loopback target) before
    raw document content may leave the process.
    """

    enable_remote_skills: bool = False
    remote_server_url: str = DEFAULT_REMOTE_SKILL_SERVER_URL
    test_mode: str = "summary"
    allow_full_content: bool = False
    timeout_seconds: float = 10.0
    context_hint: str = "KYC review"

    @classmethod
    def from_env(cls) -> "SkillTransportConfig":
        """Create configuration from environment variables."""
        test_mode = os.environ.get("SKILL_TRANSPORT_TEST_MODE", "summary")
        return cls(
            enable_remote_skills=os.environ.get("ENABLE_REMOTE_SKILLS", "").lower() == "true",
            remote_server_url=os.environ.get(
                "REMOTE_SKILL_SERVER_URL", DEFAULT_REMOTE_SKILL_SERVER_URL
            ),
            test_mode=test_mode,
            allow_full_content=test_mode == "full_content",
        )


DEFAULT_HIGH_RISK_KEYWORDS = [
    "disclaimer",
    "liability",
    "risk",
    "termination",
    "governing law",
    "warranty",
    "indemnification",
]


@dataclass
class PlannerConfig:
    """
    Tunable constants for the review scope planner.

    The keyword list and duration ranges are heuristics, not validated
    business rules, so they can be overridden from YAML.
    """

    high_risk_keywords: list[str] = field(
        default_factory=lambda: list(DEFAULT_HIGH_RISK_KEYWORDS)
    )
    section_only_seconds: tuple[int, int] = (5, 10)
    cross_section_seconds: tuple[int, int] = (8, 15)
    full_document_duration: str = "30-60 seconds"
    cross_section_threshold: int = 4

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlannerConfig":
        defaults = cls()
        return cls(
            high_risk_keywords=[
                str(k).lower() for k in data.get("high_risk_keywords", defaults.high_risk_keywords)
            ],
            section_only_seconds=tuple(
                data.get("section_only_seconds", defaults.section_only_seconds)
            ),
            cross_section_seconds=tuple(
                data.get("cross_section_seconds", defaults.cross_section_seconds)
            ),
            full_document_duration=data.get(
                "full_document_duration", defaults.full_document_duration
            ),
            cross_section_threshold=int(
                data.get("cross_section_threshold", defaults.cross_section_threshold)
            ),
        )

    @classmethod
    def from_yaml_string(cls, content: str) -> "PlannerConfig":
        """
        Parse planner configuration from a YAML string.

        The document may hold the settings at the top level or under a
        ``planner`` key.
        """
        if yaml is None:
            raise ConfigurationError(
                "PyYAML is required for YAML configuration. Install with: pip install pyyaml"
            )
        try:
            data = yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML: {e}")
        if not isinstance(data, dict):
            raise ConfigurationError("Planner configuration must be a mapping")
        return cls.from_dict(data.get("planner", data))

    @classmethod
    def from_yaml(cls, path: str) -> "PlannerConfig":
        try:
            with open(path) as f:
                content = f.read()
        except OSError as e:
            raise ConfigurationError(f"Cannot read planner configuration {path}: {e}")
        return cls.from_yaml_string(content)


@dataclass
class LLMConfig:
    """Settings for the generative-model section reviewer."""

    api_key: Optional[str] = None
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 4096
    temperature: float = 0.0
    timeout_seconds: float = 60.0

    @classmethod
    def from_env(cls) -> "LLMConfig":
        """Create configuration from environment variables."""
        return cls(
            api_key=os.environ.get("ANTHROPIC_API_KEY") or None,
            model=os.environ.get("REVIEWFLOW_LLM_MODEL", "claude-sonnet-4-20250514"),
        )
