"""
Unit tests for section id normalization.
"""

import pytest

from reviewflow.dirty_queue import DirtyQueue, DirtyQueueEntry
from reviewflow.models import EditMagnitude, ReviewMode
from reviewflow.scope_planner import ScopePlan
from reviewflow.section_ids import (
    Section,
    normalize_scope_plan_for_api,
    parse_api_section_id,
    sections_to_planner_format,
    to_api_section_id,
    validate_section_ids,
)


class TestParseSectionId:
    """Tests for parse_api_section_id."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("section-3", 3),
            ("3", 3),
            (3, 3),
            (" section-12 ", 12),
        ],
    )
    def test_accepted_forms(self, value, expected):
        assert parse_api_section_id(value) == expected

    @pytest.mark.parametrize(
        "value",
        [0, -1, "section-0", "0", "abc", "section-x", "Section-1", "", None, True, 2.5],
    )
    def test_rejected_forms(self, value):
        assert parse_api_section_id(value) is None

    def test_to_api_section_id(self):
        assert to_api_section_id(7) == "section-7"


class TestValidateSectionIds:
    """Tests for validate_section_ids."""

    def _queue(self, *ids: int) -> DirtyQueue:
        return DirtyQueue.from_entries(
            [DirtyQueueEntry(i, "2024-01-01T00:00:00+00:00", EditMagnitude.LIGHT, "", "") for i in ids]
        )

    def test_all_known(self):
        sections = [Section("section-1", "A"), Section("section-2", "B")]
        valid, errors, queue = validate_section_ids(self._queue(1, 2), sections)
        assert valid
        assert errors == []
        assert queue.section_ids == [1, 2]

    def test_unknown_ids_are_dropped(self):
        sections = [Section("section-1", "A")]
        valid, errors, queue = validate_section_ids(self._queue(1, 99), sections)
        assert not valid
        assert errors == ["Section ID 99 not found in document"]
        assert queue.section_ids == [1]

    def test_malformed_section_ids_are_ignored(self):
        sections = [Section("intro", "A"), Section("2", "B")]
        valid, errors, queue = validate_section_ids(self._queue(2), sections)
        assert valid
        assert queue.section_ids == [2]


class TestPlannerConversion:
    """Tests for conversion to and from the planner's numeric ids."""

    def test_sections_to_planner_format(self):
        planner = sections_to_planner_format([Section("section-4", "Fees", "1%")])
        assert planner[0].id == 4
        assert planner[0].title == "Fees"
        assert planner[0].content == "1%"

    def test_invalid_id_raises(self):
        with pytest.raises(ValueError, match="Invalid section ID format: intro"):
            sections_to_planner_format([Section("intro", "Intro")])

    def test_normalize_scope_plan_for_api(self):
        plan = ScopePlan(
            ReviewMode.CROSS_SECTION,
            "reason",
            [1, 2],
            related_sections_to_check=[3],
            agents_to_invoke=["compliance", "evaluation"],
        )
        data = normalize_scope_plan_for_api(plan)
        assert data["reviewMode"] == "cross-section"
        assert data["sectionsToReview"] == ["section-1", "section-2"]
        assert data["relatedSectionsToCheck"] == ["section-3"]

    def test_section_from_dict(self):
        section = Section.from_dict({"id": 5, "title": "T"})
        assert section.id == "5"
        assert section.content == ""
