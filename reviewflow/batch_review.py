"""
ReviewFlow - Batch review of edited sections.

Plans the review scope from a dirty queue, runs the section reviewer over
the planned sections and the document-wide checks the plan asks for.
Every failure along the way degrades to a fallback that is recorded in
``fallbacks``; ``review`` itself does not raise.
"""

import logging
import random
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from .config import PlannerConfig
from .dirty_queue import DirtyQueue
from .global_checks import GlobalCheckResult, get_global_checks_summary, run_global_checks
from .llm import ClaudeReviewer
from .models import ReviewMode
from .scope_planner import (
    ScopePlan,
    create_fallback_scope_plan,
    plan_review_scope,
    validate_scope_plan,
)
from .section_ids import (
    Section,
    normalize_scope_plan_for_api,
    parse_api_section_id,
    sections_to_planner_format,
    to_api_section_id,
    validate_section_ids,
)

logger = logging.getLogger("reviewflow.batch")

EMPTY_SCOPE_PLAN = {
    "reviewMode": ReviewMode.SECTION_ONLY.value,
    "reasoning": "No valid dirty sections to review",
    "sectionsToReview": [],
    "relatedSectionsToCheck": [],
    "agentsToInvoke": [],
    "globalChecks": [],
    "estimatedDuration": "0s",
    "confidence": 1.0,
}


def _ms(t0: float) -> int:
    return int((time.time() - t0) * 1000)


def _run_id(prefix: str) -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=7))
    return f"{prefix}-{int(time.time() * 1000)}-{suffix}"


@dataclass
class BatchTiming:
    scope_planning_ms: int = 0
    review_ms: int = 0
    global_checks_ms: int = 0
    total_ms: int = 0
    llm_attempted: bool = False
    llm_succeeded: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "scopePlanningMs": self.scope_planning_ms,
            "reviewMs": self.review_ms,
            "globalChecksMs": self.global_checks_ms,
            "totalMs": self.total_ms,
            "llmAttempted": self.llm_attempted,
            "llmSucceeded": self.llm_succeeded,
        }


@dataclass
class BatchReviewResult:
    """Outcome of a batch review, with the scope plan in API form."""

    issues: list[dict[str, Any]]
    remediations: list[dict[str, Any]]
    reviewed_at: str
    run_id: str
    scope_plan: Optional[dict[str, Any]] = None
    global_check_results: list[GlobalCheckResult] = field(default_factory=list)
    timing: BatchTiming = field(default_factory=BatchTiming)
    fallbacks: list[str] = field(default_factory=list)
    degraded: bool = False
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "issues": self.issues,
            "remediations": self.remediations,
            "reviewedAt": self.reviewed_at,
            "runId": self.run_id,
            "scopePlan": self.scope_plan,
            "globalCheckResults": [r.to_dict() for r in self.global_check_results],
            "timing": self.timing.to_dict(),
        }
        if self.fallbacks:
            result["fallbacks"] = self.fallbacks
        if self.degraded:
            result["degraded"] = True
        if self.error is not None:
            result["error"] = self.error
        return result


def plan_with_fallback(
    queue: DirtyQueue, sections: list[Section], config: Optional[PlannerConfig] = None
) -> tuple[ScopePlan, list[str]]:
    """
    Plan the review scope, substituting the conservative fallback plan when
    planning raises or the plan fails validation.

    Returns ``(plan, fallbacks)``; ``fallbacks`` is empty when the planner's
    own plan was used.
    """
    try:
        result = plan_review_scope(queue, sections_to_planner_format(sections), config)
        plan = result.scope_plan
        section_ids = [i for i in (parse_api_section_id(s.id) for s in sections) if i is not None]
        valid, errors = validate_scope_plan(plan, section_ids)
        if valid:
            return plan, []
        logger.error(f"Invalid scope plan: {errors}")
        reason = f"Invalid scope plan: {'; '.join(errors)}. Using fallback."
    except Exception as e:
        logger.error(f"Scope planning failed: {e}")
        reason = f"Scope planning failed: {e or 'Unknown error'}. Using fallback."
    return create_fallback_scope_plan(queue), [reason]


class BatchReviewer:
    """
    Reviews the sections a dirty queue says need attention.

    Args:
        reviewer: Section reviewer with an async
            ``review(sections, mode, target_section_id)`` method. Defaults
            to ``ClaudeReviewer``.
        planner_config: Keyword and duration settings for the planner.
    """

    def __init__(self, reviewer: Any = None, planner_config: Optional[PlannerConfig] = None):
        self.reviewer = reviewer or ClaudeReviewer()
        self.planner_config = planner_config or PlannerConfig()

    def plan(self, queue: DirtyQueue, sections: list[Section], fallbacks: list[str]) -> ScopePlan:
        plan, reasons = plan_with_fallback(queue, sections, self.planner_config)
        fallbacks.extend(reasons)
        return plan

    @staticmethod
    def select_sections(plan: ScopePlan, sections: list[Section]) -> list[Section]:
        if plan.review_mode == ReviewMode.FULL_DOCUMENT:
            return list(sections)
        targets = {
            to_api_section_id(i) for i in plan.sections_to_review + plan.related_sections_to_check
        }
        return [s for s in sections if s.id in targets]

    async def review(
        self, document_id: str, dirty_queue: DirtyQueue, sections: list[Section]
    ) -> BatchReviewResult:
        t0 = time.time()
        fallbacks: list[str] = []
        timing = BatchTiming()

        logger.info(
            f"Starting batch review for document {document_id} "
            f"(dirty sections: {dirty_queue.section_ids})"
        )

        try:
            valid, errors, queue = validate_section_ids(dirty_queue, sections)
            if not valid:
                logger.warning(f"Invalid section IDs detected: {errors}")
                fallbacks.append(f"Sanitized dirtyQueue: {'; '.join(errors)}")

            if not queue.entries:
                logger.warning("No valid dirty sections after sanitization")
                timing.total_ms = _ms(t0)
                return BatchReviewResult(
                    issues=[],
                    remediations=[],
                    reviewed_at=datetime.now(timezone.utc).isoformat(),
                    run_id=f"batch-empty-{int(time.time() * 1000)}",
                    scope_plan=dict(EMPTY_SCOPE_PLAN),
                    timing=timing,
                    fallbacks=[f"All dirty sections invalid: {'; '.join(errors)}"],
                    degraded=True,
                )

            t_plan = time.time()
            plan = self.plan(queue, sections, fallbacks)
            timing.scope_planning_ms = _ms(t_plan)
            logger.info(f"Scope plan: {plan.review_mode.value} (sections {plan.sections_to_review})")

            t_review = time.time()
            mode = "section" if plan.review_mode == ReviewMode.SECTION_ONLY else "document"
            try:
                timing.llm_attempted = True
                result = await self.reviewer.review(self.select_sections(plan, sections), mode, None)
                issues, remediations = result.issues, result.remediations
                timing.llm_succeeded = True
            except Exception as e:
                logger.error(f"Section review failed: {e}")
                fallbacks.append(f"LLM review failed: {e or 'Unknown error'}. Returning empty issues.")
                issues, remediations = [], []
            timing.review_ms = _ms(t_review)

            check_results: list[GlobalCheckResult] = []
            if plan.global_checks:
                t_checks = time.time()
                check_results, failed = run_global_checks(
                    plan.global_checks, sections_to_planner_format(sections)
                )
                timing.global_checks_ms = _ms(t_checks)
                if failed:
                    fallbacks.append(f"Some global checks failed: {', '.join(failed)}")
                logger.info(
                    f"Global checks: {get_global_checks_summary(check_results)['overallStatus']}"
                )

            timing.total_ms = _ms(t0)
            if fallbacks:
                logger.warning(f"Batch review used fallbacks: {fallbacks}")
            logger.info(f"Batch review completed: {len(issues)} issues, {timing.total_ms}ms total")

            return BatchReviewResult(
                issues=issues,
                remediations=remediations,
                reviewed_at=datetime.now(timezone.utc).isoformat(),
                run_id=_run_id("batch"),
                scope_plan=normalize_scope_plan_for_api(plan),
                global_check_results=check_results,
                timing=timing,
                fallbacks=fallbacks,
                degraded=bool(fallbacks),
            )
        except Exception as e:
            logger.error(f"Batch review failed: {e}")
            timing.total_ms = _ms(t0)
            return BatchReviewResult(
                issues=[],
                remediations=[],
                reviewed_at=datetime.now(timezone.utc).isoformat(),
                run_id=f"error-{int(time.time() * 1000)}",
                timing=timing,
                fallbacks=fallbacks + ["Fatal error during batch review"],
                degraded=True,
                error=str(e) or "Unknown error",
            )
