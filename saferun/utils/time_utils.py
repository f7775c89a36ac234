"""
Time helpers: UTC timestamps and time-of-day bucketing.

Key concepts:
  - Time slots: the 24h day is split into seven ordered ``TimeSlot`` buckets.
    Route time-suitability tables and slot safety weights are keyed by them.
  - ``parse_time_slot`` accepts either a slot name or one of the legacy
    four-part day names (``morning``/``afternoon``/``evening``/``night``).
"""

from __future__ import annotations

from datetime import datetime, timezone

from saferun.taxonomy.context_taxonomy import TIME_SLOT_ALIASES, TimeSlot

# (start_hour inclusive, end_hour exclusive, slot); hours outside all ranges
# fall into LATE_NIGHT (23:00-05:00 wraps midnight).
_SLOT_HOURS: tuple[tuple[int, int, TimeSlot], ...] = (
    (5, 7, TimeSlot.EARLY_MORNING),
    (7, 10, TimeSlot.MORNING),
    (10, 12, TimeSlot.LATE_MORNING),
    (12, 17, TimeSlot.AFTERNOON),
    (17, 20, TimeSlot.EVENING),
    (20, 23, TimeSlot.NIGHT),
)


def time_slot_for_hour(hour: int) -> TimeSlot:
    """Return the ``TimeSlot`` for an hour of day (0-23).

    Raises:
        ValueError: If ``hour`` is outside 0..23.
    """
    if not 0 <= hour <= 23:
        raise ValueError(f"hour must be in [0, 23], got {hour}.")
    for start, end, slot in _SLOT_HOURS:
        if start <= hour < end:
            return slot
    return TimeSlot.LATE_NIGHT


def time_slot_for(moment: datetime) -> TimeSlot:
    """Return the ``TimeSlot`` containing ``moment`` (its own wall-clock hour)."""
    return time_slot_for_hour(moment.hour)


def parse_time_slot(value: str | TimeSlot) -> TimeSlot:
    """Parse a slot name (``"late_night"``, ``"late-night"``, ``"night"``...).

    Raises:
        ValueError: If the value names no known slot.
    """
    if isinstance(value, TimeSlot):
        return value
    normalized = value.strip().lower().replace("-", "_")
    if normalized in TIME_SLOT_ALIASES:
        return TIME_SLOT_ALIASES[normalized]
    try:
        return TimeSlot(normalized)
    except ValueError:
        raise ValueError(
            f"Unknown time slot '{value}'. Must be one of {[s.value for s in TimeSlot]}."
        ) from None


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info."""
    return datetime.now(tz=timezone.utc)
