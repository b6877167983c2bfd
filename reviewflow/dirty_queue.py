"""
ReviewFlow - Dirty section queue.

Tracks which document sections were edited since their last review, when,
and how heavily. The queue is an immutable value: ``add``, ``remove`` and
``clear`` return a new queue.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from .models import EditMagnitude

LIGHT_THRESHOLD = 0.20
MODERATE_THRESHOLD = 0.50


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_timestamp(value: str) -> datetime:
    """Parse an ISO timestamp; naive values are taken as UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def simple_hash(content: str) -> str:
    """Cheap change-detection fingerprint (length plus head and tail). Not for security."""
    return f"{len(content)}-{content[:50]}-{content[-50:]}"


def calculate_edit_magnitude(previous_content: str, current_content: str) -> EditMagnitude:
    """
    Classify an edit by the fraction of characters that changed.

    Characters are compared position by position over the shorter text and
    the length difference is added on top. Below 20% is light, below 50%
    is moderate, anything else is heavy.
    """
    prev_len = len(previous_content)
    curr_len = len(current_content)
    if prev_len == 0 and curr_len == 0:
        return EditMagnitude.LIGHT

    max_len = max(prev_len, curr_len)
    diff_chars = sum(
        1 for a, b in zip(previous_content, current_content) if a != b
    )
    diff_chars += abs(prev_len - curr_len)
    change_ratio = diff_chars / max_len

    if change_ratio < LIGHT_THRESHOLD:
        return EditMagnitude.LIGHT
    if change_ratio < MODERATE_THRESHOLD:
        return EditMagnitude.MODERATE
    return EditMagnitude.HEAVY


@dataclass(frozen=True)
class DirtyQueueEntry:
    """One edited section."""

    section_id: int
    edited_at: str
    edit_magnitude: EditMagnitude
    previous_content_hash: str
    current_content_hash: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "sectionId": self.section_id,
            "editedAt": self.edited_at,
            "editMagnitude": self.edit_magnitude.value,
            "previousContentHash": self.previous_content_hash,
            "currentContentHash": self.current_content_hash,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DirtyQueueEntry":
        return cls(
            section_id=int(data["sectionId"]),
            edited_at=data.get("editedAt") or _now(),
            edit_magnitude=EditMagnitude(data.get("editMagnitude", "light")),
            previous_content_hash=data.get("previousContentHash", ""),
            current_content_hash=data.get("currentContentHash", ""),
        )


@dataclass(frozen=True)
class DirtyQueue:
    """Ordered collection of dirty sections, one entry per section id."""

    entries: tuple[DirtyQueueEntry, ...] = field(default_factory=tuple)
    oldest_edit: Optional[str] = None
    newest_edit: Optional[str] = None

    @property
    def total_dirty_count(self) -> int:
        return len(self.entries)

    @property
    def section_ids(self) -> list[int]:
        return [e.section_id for e in self.entries]

    @classmethod
    def from_entries(cls, entries: list[DirtyQueueEntry]) -> "DirtyQueue":
        """Build a queue and derive its oldest and newest timestamps."""
        if not entries:
            return cls()
        timestamps = sorted((e.edited_at for e in entries), key=_parse_timestamp)
        return cls(entries=tuple(entries), oldest_edit=timestamps[0], newest_edit=timestamps[-1])

    def add(
        self,
        section_id: int,
        previous_content: str,
        current_content: str,
        edited_at: Optional[str] = None,
    ) -> "DirtyQueue":
        """Return a queue with ``section_id`` upserted in place."""
        entry = DirtyQueueEntry(
            section_id=section_id,
            edited_at=edited_at or _now(),
            edit_magnitude=calculate_edit_magnitude(previous_content, current_content),
            previous_content_hash=simple_hash(previous_content),
            current_content_hash=simple_hash(current_content),
        )
        entries = list(self.entries)
        for index, existing in enumerate(entries):
            if existing.section_id == section_id:
                entries[index] = entry
                break
        else:
            entries.append(entry)
        return DirtyQueue.from_entries(entries)

    def remove(self, section_id: int) -> "DirtyQueue":
        return DirtyQueue.from_entries([e for e in self.entries if e.section_id != section_id])

    def clear(self) -> "DirtyQueue":
        return DirtyQueue()

    def is_section_dirty(self, section_id: int) -> bool:
        return any(e.section_id == section_id for e in self.entries)

    def get_dirty_entry(self, section_id: int) -> Optional[DirtyQueueEntry]:
        for entry in self.entries:
            if entry.section_id == section_id:
                return entry
        return None

    def stats(self, now: Optional[datetime] = None) -> dict[str, Any]:
        """Counts per edit magnitude and a human-readable age of the oldest edit."""
        counts = {m: 0 for m in EditMagnitude}
        for entry in self.entries:
            counts[entry.edit_magnitude] += 1

        oldest_edit_age = None
        if self.oldest_edit:
            now = now or datetime.now(timezone.utc)
            oldest = _parse_timestamp(self.oldest_edit)
            minutes = int((now - oldest).total_seconds() // 60)
            hours = minutes // 60
            if hours > 0:
                oldest_edit_age = f"{hours} hour{'s' if hours > 1 else ''} ago"
            elif minutes > 0:
                oldest_edit_age = f"{minutes} minute{'s' if minutes > 1 else ''} ago"
            else:
                oldest_edit_age = "just now"

        return {
            "totalCount": self.total_dirty_count,
            "lightCount": counts[EditMagnitude.LIGHT],
            "moderateCount": counts[EditMagnitude.MODERATE],
            "heavyCount": counts[EditMagnitude.HEAVY],
            "oldestEditAge": oldest_edit_age,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "entries": [e.to_dict() for e in self.entries],
            "totalDirtyCount": self.total_dirty_count,
            "oldestEdit": self.oldest_edit,
            "newestEdit": self.newest_edit,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DirtyQueue":
        return cls.from_entries([DirtyQueueEntry.from_dict(e) for e in data.get("entries", [])])


def create_empty_queue() -> DirtyQueue:
    return DirtyQueue()


def add_to_dirty_queue(
    queue: DirtyQueue, section_id: int, previous_content: str, current_content: str
) -> DirtyQueue:
    return queue.add(section_id, previous_content, current_content)


def remove_from_dirty_queue(queue: DirtyQueue, section_id: int) -> DirtyQueue:
    return queue.remove(section_id)


def clear_dirty_queue() -> DirtyQueue:
    return DirtyQueue()


def get_queue_stats(queue: DirtyQueue) -> dict[str, Any]:
    return queue.stats()
