"""
ReviewFlow - Review scope planner.

Decides how much of a document must be re-reviewed after a batch of edits:

- section-only: review only the changed sections
- cross-section: review the changed sections plus their neighbours
- full-document: re-review everything

The planner is deterministic and rule based. Its output is validated by
``validate_scope_plan``; callers that get an invalid plan (or an exception)
substitute ``create_fallback_scope_plan``.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from .config import PlannerConfig
from .dirty_queue import DirtyQueue
from .models import EditMagnitude, ReviewMode

logger = logging.getLogger("reviewflow.scope_planner")

ALL_AGENTS = ["compliance", "evaluation", "rewrite"]
FULL_DOCUMENT_CHECKS = ["disclaimer_presence", "cross_section_contradiction", "structural_sanity"]


@dataclass(frozen=True)
class PlannerSection:
    """A document section in planner form (numeric id)."""

    id: int
    title: str
    content: str = ""


@dataclass(frozen=True)
class ScopePlan:
    """The planner's decision on review breadth, agents and document-wide checks."""

    review_mode: ReviewMode
    reasoning: str
    sections_to_review: list[int]
    related_sections_to_check: list[int] = field(default_factory=list)
    agents_to_invoke: list[str] = field(default_factory=list)
    global_checks: list[str] = field(default_factory=list)
    estimated_duration: str = ""
    confidence: float = 1.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "reviewMode": self.review_mode.value,
            "reasoning": self.reasoning,
            "sectionsToReview": self.sections_to_review,
            "relatedSectionsToCheck": self.related_sections_to_check,
            "agentsToInvoke": self.agents_to_invoke,
            "globalChecks": self.global_checks,
            "estimatedDuration": self.estimated_duration,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class ScopePlanningResult:
    """A scope plan together with the analysis that produced it."""

    scope_plan: ScopePlan
    analysis: dict[str, Any]
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "scopePlan": self.scope_plan.to_dict(),
            "analysis": self.analysis,
            "timestamp": self.timestamp,
        }


def is_high_risk_section(title: str, config: Optional[PlannerConfig] = None) -> bool:
    config = config or PlannerConfig()
    lower = title.lower()
    return any(keyword in lower for keyword in config.high_risk_keywords)


def find_adjacent_sections(dirty_ids: list[int], all_ids: list[int]) -> list[int]:
    """Immediate predecessor and successor of each dirty id, minus the dirty ids."""
    ordered = sorted(all_ids)
    adjacent = set()
    for dirty_id in dirty_ids:
        if dirty_id not in ordered:
            continue
        index = ordered.index(dirty_id)
        if index > 0:
            adjacent.add(ordered[index - 1])
        if index < len(ordered) - 1:
            adjacent.add(ordered[index + 1])
    return sorted(adjacent - set(dirty_ids))


def select_agents(review_mode: ReviewMode, has_high_risk: bool) -> list[str]:
    if review_mode == ReviewMode.FULL_DOCUMENT:
        return list(ALL_AGENTS)
    if review_mode == ReviewMode.CROSS_SECTION:
        return ["compliance", "evaluation"]
    if has_high_risk:
        return ["compliance", "evaluation"]
    return ["compliance"]


def select_global_checks(
    review_mode: ReviewMode, dirty_count: int, has_high_risk: bool
) -> list[str]:
    if review_mode == ReviewMode.FULL_DOCUMENT:
        return list(FULL_DOCUMENT_CHECKS)
    if review_mode == ReviewMode.CROSS_SECTION:
        checks = ["cross_section_contradiction"]
        if has_high_risk:
            checks.append("disclaimer_presence")
        return checks
    if dirty_count >= 2 or has_high_risk:
        return ["disclaimer_presence"]
    return []


def estimate_duration(
    review_mode: ReviewMode, section_count: int, config: Optional[PlannerConfig] = None
) -> str:
    config = config or PlannerConfig()
    if review_mode == ReviewMode.FULL_DOCUMENT:
        return config.full_document_duration
    if review_mode == ReviewMode.CROSS_SECTION:
        low, high = config.cross_section_seconds
    else:
        low, high = config.section_only_seconds
    return f"{section_count * low}-{section_count * high} seconds"


def plan_review_scope(
    dirty_queue: DirtyQueue,
    all_sections: list[PlannerSection],
    config: Optional[PlannerConfig] = None,
) -> ScopePlanningResult:
    """
    Map a dirty queue onto a scope plan. First matching rule wins:

    1. heavy edit in a high-risk section -> full-document
    2. any edit in a high-risk section -> full-document
    3. four or more dirty sections -> cross-section
    4. two or three dirty sections with a heavy edit -> cross-section
    5. two or three dirty sections -> section-only plus disclaimer check
    6. one dirty section -> section-only
    """
    config = config or PlannerConfig()
    entries = dirty_queue.entries
    dirty_count = dirty_queue.total_dirty_count
    dirty_ids = dirty_queue.section_ids
    titles = {s.id: s.title for s in all_sections}

    logger.debug(f"Planning review for {dirty_count} dirty sections")

    magnitudes = {m: sum(1 for e in entries if e.edit_magnitude == m) for m in EditMagnitude}
    heavy_edits = magnitudes[EditMagnitude.HEAVY]

    high_risk_entries = [
        e for e in entries if e.section_id in titles and is_high_risk_section(titles[e.section_id], config)
    ]
    has_high_risk = bool(high_risk_entries)
    heavy_high_risk = [e for e in high_risk_entries if e.edit_magnitude == EditMagnitude.HEAVY]

    all_ids = sorted(titles)
    adjacent = find_adjacent_sections(dirty_ids, all_ids)

    analysis = {
        "dirtyCount": dirty_count,
        "heavyEdits": heavy_edits,
        "highRiskSections": has_high_risk,
        "adjacentSections": adjacent,
    }

    def describe(selected: list) -> str:
        return ", ".join(titles.get(e.section_id) or f"Section {e.section_id}" for e in selected)

    adjacent_text = ", ".join(str(i) for i in adjacent)
    related: list[int] = []

    if heavy_high_risk:
        review_mode = ReviewMode.FULL_DOCUMENT
        reasoning = (
            f"Heavy edit detected in high-risk section ({describe(heavy_high_risk)}); "
            "performing full document review to ensure consistency and compliance."
        )
        to_review = all_ids
    elif has_high_risk:
        review_mode = ReviewMode.FULL_DOCUMENT
        reasoning = (
            f"High-risk section edited ({describe(high_risk_entries)}); "
            "performing full document review to ensure all cross-references are valid."
        )
        to_review = all_ids
    elif dirty_count >= config.cross_section_threshold:
        review_mode = ReviewMode.CROSS_SECTION
        reasoning = (
            f"{dirty_count} sections edited; reviewing changed sections plus adjacent "
            f"sections ({adjacent_text}) for cross-section consistency."
        )
        to_review = dirty_ids
        related = adjacent
    elif dirty_count >= 2 and heavy_edits > 0:
        review_mode = ReviewMode.CROSS_SECTION
        reasoning = (
            f"{dirty_count} sections edited with {heavy_edits} heavy edit(s); "
            f"checking adjacent sections ({adjacent_text}) for consistency."
        )
        to_review = dirty_ids
        related = adjacent
    elif dirty_count >= 2:
        review_mode = ReviewMode.SECTION_ONLY
        reasoning = (
            f"{dirty_count} sections edited with {magnitudes[EditMagnitude.LIGHT]} light and "
            f"{magnitudes[EditMagnitude.MODERATE]} moderate edits; reviewing changed sections "
            "only with disclaimer presence check."
        )
        to_review = dirty_ids
    else:
        review_mode = ReviewMode.SECTION_ONLY
        magnitude = entries[0].edit_magnitude.value if entries else "unknown"
        reasoning = f"Single section edited with {magnitude} edit; reviewing changed section only."
        to_review = dirty_ids

    sections_to_review = sorted(to_review)
    related = sorted(related)
    scope_plan = ScopePlan(
        review_mode=review_mode,
        reasoning=reasoning,
        sections_to_review=sections_to_review,
        related_sections_to_check=related,
        agents_to_invoke=select_agents(review_mode, has_high_risk),
        global_checks=select_global_checks(review_mode, dirty_count, has_high_risk),
        estimated_duration=estimate_duration(
            review_mode, len(sections_to_review) + len(related), config
        ),
        confidence=1.0,
    )

    logger.info(
        f"Scope plan created: {review_mode.value} "
        f"(review={sections_to_review}, agents={scope_plan.agents_to_invoke})"
    )

    return ScopePlanningResult(
        scope_plan=scope_plan,
        analysis=analysis,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


def validate_scope_plan(plan: ScopePlan, section_ids: list[int]) -> tuple[bool, list[str]]:
    """Check a plan against the document's section ids. Returns ``(valid, errors)``."""
    errors = []
    known = set(section_ids)

    if not plan.sections_to_review:
        errors.append("No sections to review")
    if any(i not in known for i in plan.sections_to_review):
        errors.append("Invalid section IDs in sectionsToReview")
    if any(i not in known for i in plan.related_sections_to_check):
        errors.append("Invalid section IDs in relatedSectionsToCheck")
    if not plan.agents_to_invoke:
        errors.append("No agents specified")
    if plan.review_mode not in list(ReviewMode):
        errors.append("Invalid review mode")

    return not errors, errors


def get_scope_plan_summary(plan: ScopePlan) -> str:
    mode = {
        ReviewMode.SECTION_ONLY: "Section-Only Review",
        ReviewMode.CROSS_SECTION: "Cross-Section Review",
    }.get(plan.review_mode, "Full Document Review")
    sections = len(plan.sections_to_review) + len(plan.related_sections_to_check)
    agents = len(plan.agents_to_invoke)
    return (
        f"{mode} ({sections} section{'s' if sections != 1 else ''}, "
        f"{agents} agent{'s' if agents != 1 else ''})"
    )


def create_fallback_scope_plan(dirty_queue: DirtyQueue) -> ScopePlan:
    """The conservative plan used when planning fails: dirty sections, compliance only."""
    sections = sorted(dirty_queue.section_ids)
    return ScopePlan(
        review_mode=ReviewMode.SECTION_ONLY,
        reasoning="Fallback: reviewing only dirty sections with minimal agents "
        "(scope planning unavailable)",
        sections_to_review=sections,
        related_sections_to_check=[],
        agents_to_invoke=["compliance"],
        global_checks=[],
        estimated_duration=estimate_duration(ReviewMode.SECTION_ONLY, len(sections)),
        confidence=0.5,
    )
