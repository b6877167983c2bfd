"""
Unit tests for the dirty section queue.
"""

from datetime import datetime, timezone

import pytest

from reviewflow.dirty_queue import (
    DirtyQueue,
    DirtyQueueEntry,
    add_to_dirty_queue,
    calculate_edit_magnitude,
    clear_dirty_queue,
    create_empty_queue,
    get_queue_stats,
    remove_from_dirty_queue,
    simple_hash,
)
from reviewflow.models import EditMagnitude

T1 = "2024-01-01T10:00:00+00:00"
T2 = "2024-01-01T11:00:00+00:00"
T3 = "2024-01-01T12:00:00+00:00"


class TestEditMagnitude:
    """Tests for calculate_edit_magnitude."""

    def test_both_empty_is_light(self):
        assert calculate_edit_magnitude("", "") == EditMagnitude.LIGHT

    def test_small_change_is_light(self):
        assert calculate_edit_magnitude("abcdefghij", "abcdefghiX") == EditMagnitude.LIGHT

    def test_twenty_percent_is_moderate(self):
        assert calculate_edit_magnitude("abcdefghij", "abcdefghXX") == EditMagnitude.MODERATE

    def test_fifty_percent_is_heavy(self):
        assert calculate_edit_magnitude("abcdefghij", "abcdeXXXXX") == EditMagnitude.HEAVY

    def test_length_difference_counts(self):
        assert calculate_edit_magnitude("", "abc") == EditMagnitude.HEAVY
        assert calculate_edit_magnitude("abcdefghij", "abcdefghijk") == EditMagnitude.LIGHT


class TestDirtyQueue:
    """Tests for the immutable DirtyQueue."""

    def test_empty_queue(self):
        queue = create_empty_queue()
        assert queue.entries == ()
        assert queue.total_dirty_count == 0
        assert queue.oldest_edit is None
        assert queue.newest_edit is None

    def test_add_returns_new_queue(self):
        queue = DirtyQueue()
        updated = queue.add(1, "old", "new", edited_at=T1)
        assert queue.total_dirty_count == 0
        assert updated.total_dirty_count == 1
        assert updated.section_ids == [1]

    def test_add_same_section_upserts(self):
        queue = DirtyQueue().add(1, "a", "b", edited_at=T1).add(2, "a", "b", edited_at=T2)
        queue = queue.add(1, "abc", "xyz", edited_at=T3)
        assert queue.section_ids == [1, 2]
        assert queue.get_dirty_entry(1).edit_magnitude == EditMagnitude.HEAVY
        assert queue.newest_edit == T3
        assert queue.oldest_edit == T2

    def test_add_records_hashes(self):
        queue = DirtyQueue().add(3, "before", "after", edited_at=T1)
        entry = queue.get_dirty_entry(3)
        assert entry.previous_content_hash == simple_hash("before")
        assert entry.current_content_hash == simple_hash("after")

    def test_remove(self):
        queue = DirtyQueue().add(1, "a", "b", edited_at=T1).add(2, "a", "b", edited_at=T2)
        queue = remove_from_dirty_queue(queue, 1)
        assert queue.section_ids == [2]
        assert queue.oldest_edit == T2

    def test_clear(self):
        queue = add_to_dirty_queue(DirtyQueue(), 1, "a", "b")
        assert queue.clear().total_dirty_count == 0
        assert clear_dirty_queue().entries == ()

    def test_is_section_dirty(self):
        queue = DirtyQueue().add(4, "a", "b", edited_at=T1)
        assert queue.is_section_dirty(4)
        assert not queue.is_section_dirty(5)
        assert queue.get_dirty_entry(5) is None

    def test_entries_are_frozen(self):
        queue = DirtyQueue().add(1, "a", "b", edited_at=T1)
        with pytest.raises(AttributeError):
            queue.entries[0].section_id = 2

    def test_dict_form(self):
        queue = DirtyQueue().add(1, "a", "b", edited_at=T1)
        data = queue.to_dict()
        assert data["totalDirtyCount"] == 1
        assert data["entries"][0]["sectionId"] == 1
        assert data["entries"][0]["editMagnitude"] == "heavy"
        restored = DirtyQueue.from_dict(data)
        assert restored.section_ids == [1]
        assert restored.newest_edit == T1

    def test_timestamps_with_mixed_offsets(self):
        queue = DirtyQueue.from_dict(
            {
                "entries": [
                    {"sectionId": 1, "editedAt": "2024-01-01T10:00:00Z", "editMagnitude": "light"},
                    {"sectionId": 2, "editedAt": "2024-01-01T11:30:00+02:00", "editMagnitude": "light"},
                    {"sectionId": 3, "editedAt": "2024-01-01T10:15:00+00:00", "editMagnitude": "light"},
                ]
            }
        )
        assert queue.oldest_edit == "2024-01-01T11:30:00+02:00"
        assert queue.newest_edit == "2024-01-01T10:15:00+00:00"


class TestQueueStats:
    """Tests for queue statistics."""

    def _queue(self) -> DirtyQueue:
        return DirtyQueue.from_entries(
            [
                DirtyQueueEntry(1, T1, EditMagnitude.LIGHT, "", ""),
                DirtyQueueEntry(2, T2, EditMagnitude.HEAVY, "", ""),
                DirtyQueueEntry(3, T3, EditMagnitude.LIGHT, "", ""),
            ]
        )

    def test_counts(self):
        stats = self._queue().stats(now=datetime(2024, 1, 1, 12, 30, tzinfo=timezone.utc))
        assert stats["totalCount"] == 3
        assert stats["lightCount"] == 2
        assert stats["moderateCount"] == 0
        assert stats["heavyCount"] == 1

    def test_age_in_hours(self):
        stats = self._queue().stats(now=datetime(2024, 1, 1, 12, 30, tzinfo=timezone.utc))
        assert stats["oldestEditAge"] == "2 hours ago"

    def test_age_in_minutes(self):
        stats = self._queue().stats(now=datetime(2024, 1, 1, 10, 1, 30, tzinfo=timezone.utc))
        assert stats["oldestEditAge"] == "1 minute ago"

    def test_age_just_now(self):
        stats = self._queue().stats(now=datetime(2024, 1, 1, 10, 0, 20, tzinfo=timezone.utc))
        assert stats["oldestEditAge"] == "just now"

    def test_empty_queue_has_no_age(self):
        assert get_queue_stats(DirtyQueue())["oldestEditAge"] is None
