"""
ReviewFlow - Agent handlers.

Every handler has the signature ``async def handler(input, context) -> dict``.
``fake`` mode is deterministic and rule based; ``real`` mode is only
implemented where a model-backed reviewer exists.
"""

from .communication import draft_client_comms, write_audit
from .content import compliance, evaluate, merge, optimize, synthesize, validate
from .review import extract_facts, map_policy, redteam_review, request_evidence

__all__ = [
    "compliance",
    "draft_client_comms",
    "evaluate",
    "extract_facts",
    "map_policy",
    "merge",
    "optimize",
    "redteam_review",
    "request_evidence",
    "synthesize",
    "validate",
    "write_audit",
]
