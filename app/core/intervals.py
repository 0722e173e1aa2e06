# app/core/intervals.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time as time_type
from typing import Any

from app.core.errors import ValidationError


# =========================================================
# ---------------------- PARSERS ---------------------------
# =========================================================

def normalize_time(val: Any, field: str = "time") -> str:
    """
    Canonical wall-clock form used for storage and comparison: "HH:MM".

    Accepts:
      - time / datetime (uses .time())
      - strings: "H:MM", "HH:MM", "HH:MM:SS" (seconds must be 00)

    Fixed-width zero padding keeps string order == chronological order.
    """
    if isinstance(val, datetime):
        val = val.time()

    if isinstance(val, time_type):
        t = val
    elif isinstance(val, str):
        s = val.strip()
        parts = s.split(":")
        if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
            raise ValidationError(f"{field} must be in HH:MM format", f"Invalid {field}: {val!r}")
        try:
            t = time_type(*(int(p) for p in parts))
        except ValueError:
            raise ValidationError(f"{field} must be in HH:MM format", f"Invalid {field}: {val!r}")
    else:
        raise ValidationError(f"{field} is required", f"Missing {field}")

    if t.second or t.microsecond:
        raise ValidationError(f"{field} must not carry seconds", f"Invalid {field}: {val!r}")

    return t.strftime("%H:%M")


def _minutes(hhmm: str) -> int:
    hh, mm = hhmm.split(":")[:2]
    return int(hh) * 60 + int(mm)


# =========================================================
# ---------------------- INTERVAL -------------------------
# =========================================================

@dataclass(frozen=True)
class TimeInterval:
    """Half-open [start, end) on a single calendar day, canonical HH:MM bounds."""

    start: str
    end: str

    @classmethod
    def of(cls, start: Any, end: Any) -> "TimeInterval":
        s = normalize_time(start, "startTime")
        e = normalize_time(end, "endTime")
        if not s < e:
            raise ValidationError("endTime must be after startTime", "Invalid time range")
        return cls(s, e)

    @property
    def minutes(self) -> int:
        return _minutes(self.end) - _minutes(self.start)


def overlaps(candidate: TimeInterval, existing: TimeInterval) -> bool:
    c, e = candidate, existing

    # candidate starts inside existing
    if e.start <= c.start and e.end > c.start:
        return True
    # candidate ends inside existing
    if e.start < c.end and e.end >= c.end:
        return True
    # candidate fully contains existing
    if e.start >= c.start and e.end <= c.end:
        return True
    return False


def overlap_minutes(a: TimeInterval, b: TimeInterval) -> int:
    lo = max(_minutes(a.start), _minutes(b.start))
    hi = min(_minutes(a.end), _minutes(b.end))
    return max(0, hi - lo)
