from datetime import time, datetime

import pytest

from app.core.errors import ValidationError
from app.core.intervals import TimeInterval, normalize_time, overlaps, overlap_minutes


def iv(start, end):
    return TimeInterval.of(start, end)


class TestNormalizeTime:
    def test_pads_single_digit_hour(self):
        assert normalize_time("9:05") == "09:05"

    def test_accepts_zero_seconds(self):
        assert normalize_time("14:30:00") == "14:30"

    def test_accepts_time_and_datetime(self):
        assert normalize_time(time(8, 0)) == "08:00"
        assert normalize_time(datetime(2025, 1, 10, 17, 45)) == "17:45"

    @pytest.mark.parametrize("bad", ["", "10", "25:00", "10:60", "ab:cd", "10:00:30", None])
    def test_rejects_malformed(self, bad):
        with pytest.raises(ValidationError):
            normalize_time(bad)


class TestTimeInterval:
    def test_end_must_follow_start(self):
        with pytest.raises(ValidationError):
            iv("12:00", "12:00")
        with pytest.raises(ValidationError):
            iv("13:00", "12:00")

    def test_minutes(self):
        assert iv("10:00", "11:30").minutes == 90


class TestOverlaps:
    def test_candidate_starts_inside_existing(self):
        assert overlaps(iv("11:00", "13:00"), iv("10:00", "12:00"))

    def test_candidate_ends_inside_existing(self):
        assert overlaps(iv("09:00", "11:00"), iv("10:00", "12:00"))

    def test_candidate_contains_existing(self):
        assert overlaps(iv("09:00", "13:00"), iv("10:00", "12:00"))

    def test_candidate_inside_existing(self):
        assert overlaps(iv("10:30", "11:30"), iv("10:00", "12:00"))

    def test_identical_ranges(self):
        assert overlaps(iv("10:00", "12:00"), iv("10:00", "12:00"))

    def test_back_to_back_is_free(self):
        assert not overlaps(iv("12:00", "13:00"), iv("10:00", "12:00"))
        assert not overlaps(iv("08:00", "10:00"), iv("10:00", "12:00"))

    def test_disjoint(self):
        assert not overlaps(iv("14:00", "15:00"), iv("10:00", "12:00"))

    def test_symmetric_and_matches_interval_intersection(self):
        slots = [f"{h:02d}:{m:02d}" for h in range(8, 13) for m in (0, 30)]
        pairs = [(s, e) for s in slots for e in slots if s < e]
        for a in pairs:
            for b in pairs:
                x, y = iv(*a), iv(*b)
                expected = x.start < y.end and y.start < x.end
                assert overlaps(x, y) == overlaps(y, x) == expected, (a, b)


class TestOverlapMinutes:
    def test_partial(self):
        assert overlap_minutes(iv("11:00", "13:00"), iv("10:00", "12:00")) == 60

    def test_adjacent_is_zero(self):
        assert overlap_minutes(iv("12:00", "13:00"), iv("10:00", "12:00")) == 0
