"""
Configuration for the remote skills server.
"""

import os
from dataclasses import dataclass, field

DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


@dataclass
class SkillServerConfig:
    """Configuration for the remote skills server. Binds to loopback by default."""

    host: str = "127.0.0.1"
    port: int = 4010

    cors_origins: list = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    log_level: str = "info"

    server_version: str = "1.0.0"

    @classmethod
    def from_env(cls) -> "SkillServerConfig":
        """Create configuration from environment variables."""
        return cls(
            host=os.environ.get("REVIEWFLOW_SKILLS_HOST", "127.0.0.1"),
            port=int(os.environ.get("REVIEWFLOW_SKILLS_PORT", "4010")),
            log_level=os.environ.get("REVIEWFLOW_SKILLS_LOG_LEVEL", "info"),
        )
