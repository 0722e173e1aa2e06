from datetime import date
from types import SimpleNamespace

import pytest

from app.core.errors import ValidationError
from app.services.conflicts import conflict_detail, find_conflicts

DAY = date(2025, 1, 10)


def ev(id, start, end, venue="Hall A", day=DAY, title=None):
    return SimpleNamespace(id=id, title=title or f"Event {id}", date=day,
                           venue=venue, start_time=start, end_time=end)


class TestFindConflicts:
    def test_overlap_on_same_venue_and_day(self):
        existing = [ev("e1", "10:00", "12:00"), ev("e2", "14:00", "15:00")]
        hits = find_conflicts(existing, DAY, "Hall A", "11:00", "13:00")
        assert [e.id for e in hits] == ["e1"]

    def test_other_venue_or_day_never_conflicts(self):
        existing = [
            ev("e1", "10:00", "12:00", venue="Hall B"),
            ev("e2", "10:00", "12:00", day=date(2025, 1, 11)),
        ]
        assert find_conflicts(existing, DAY, "Hall A", "10:00", "12:00") == []

    def test_venue_match_is_exact(self):
        existing = [ev("e1", "10:00", "12:00", venue="hall a")]
        assert find_conflicts(existing, DAY, "Hall A", "10:00", "12:00") == []

    def test_exclude_event_id(self):
        existing = [ev("e1", "10:00", "12:00")]
        assert find_conflicts(existing, DAY, "Hall A", "10:00", "12:00", exclude_event_id="e1") == []

    def test_adjacent_slots_are_free(self):
        existing = [ev("e1", "10:00", "12:00")]
        assert find_conflicts(existing, DAY, "Hall A", "12:00", "13:00") == []

    def test_rejects_inverted_candidate(self):
        with pytest.raises(ValidationError):
            find_conflicts([], DAY, "Hall A", "13:00", "11:00")


def test_conflict_detail_shape():
    detail = conflict_detail(ev("e1", "10:00", "12:00", title="Robotics"), "11:00", "13:00")
    assert detail == {
        "eventId": "e1",
        "name": "Robotics",
        "venue": "Hall A",
        "startTime": "10:00",
        "endTime": "12:00",
        "overlapMinutes": 60,
    }
