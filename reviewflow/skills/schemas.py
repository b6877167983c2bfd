"""
ReviewFlow - Wire schemas for remote skill execution.

Shared by the remote transport (response validation) and the skills
server (request validation).
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class RemoteSkillRequest(BaseModel):
    skill_name: str = Field(min_length=1)
    input_summary: dict[str, Any]
    context_hint: Optional[str] = None
    correlation_id: str = Field(min_length=1)
    test_mode: Literal["summary", "full_content"] = "summary"


class RemoteSkillMetadata(BaseModel):
    server_version: str
    executed_at: str


class RemoteSkillResponse(BaseModel):
    ok: bool
    skill_name: str
    output_summary: dict[str, Any]
    duration_ms: int = Field(ge=0)
    error: Optional[str] = None
    metadata: Optional[RemoteSkillMetadata] = None
