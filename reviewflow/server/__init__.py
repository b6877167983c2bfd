"""
ReviewFlow Skills Server - remote execution endpoint for ReviewFlow skills.

Run with:
    reviewflow-skills-server      # CLI entry point
    python -m reviewflow.server   # Module entry point

Or programmatically:
    from reviewflow.server import SkillServer
    server = SkillServer(port=4010)
    server.run()
"""

from .app import SkillServer, create_app
from .config import SkillServerConfig

__all__ = [
    "create_app",
    "SkillServer",
    "SkillServerConfig",
]
