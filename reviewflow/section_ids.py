"""
ReviewFlow - Section id normalization.

Planning uses numeric section ids internally. External callers use the
string form ``section-<N>``; everything crossing that boundary is converted
here and validated against the document's actual sections.
"""

import re
from dataclasses import dataclass
from typing import Any, Optional

from .dirty_queue import DirtyQueue
from .scope_planner import PlannerSection, ScopePlan

_BARE_ID = re.compile(r"^\d+$")
_SECTION_ID = re.compile(r"^section-(\d+)$")


@dataclass(frozen=True)
class Section:
    """A document section in API form (string id)."""

    id: str
    title: str
    content: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Section":
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title", ""),
            content=data.get("content", ""),
        )


def parse_api_section_id(section_id: Any) -> Optional[int]:
    """Convert ``"section-N"`` or a bare positive integer to ``N``; anything else is ``None``."""
    if isinstance(section_id, bool):
        return None
    if isinstance(section_id, int):
        return section_id if section_id > 0 else None
    text = str(section_id).strip()
    match = _BARE_ID.match(text) or _SECTION_ID.match(text)
    if not match:
        return None
    value = int(match.group(1) if match.groups() else match.group(0))
    return value if value > 0 else None


def to_api_section_id(section_id: int) -> str:
    return f"section-{section_id}"


def validate_section_ids(
    dirty_queue: DirtyQueue, sections: list[Section]
) -> tuple[bool, list[str], DirtyQueue]:
    """
    Drop dirty-queue entries whose section is not in the document.

    Returns ``(valid, errors, sanitized_queue)``.
    """
    known = {parse_api_section_id(s.id) for s in sections} - {None}
    errors = []
    valid_entries = []
    for entry in dirty_queue.entries:
        if entry.section_id in known:
            valid_entries.append(entry)
        else:
            errors.append(f"Section ID {entry.section_id} not found in document")
    return not errors, errors, DirtyQueue.from_entries(valid_entries)


def sections_to_planner_format(sections: list[Section]) -> list[PlannerSection]:
    result = []
    for section in sections:
        numeric_id = parse_api_section_id(section.id)
        if numeric_id is None:
            raise ValueError(f"Invalid section ID format: {section.id}")
        result.append(PlannerSection(id=numeric_id, title=section.title, content=section.content))
    return result


def normalize_scope_plan_for_api(plan: ScopePlan) -> dict[str, Any]:
    """Serialize a scope plan with section ids in ``section-<N>`` form."""
    data = plan.to_dict()
    data["sectionsToReview"] = [to_api_section_id(i) for i in plan.sections_to_review]
    data["relatedSectionsToCheck"] = [
        to_api_section_id(i) for i in plan.related_sections_to_check
    ]
    return data
