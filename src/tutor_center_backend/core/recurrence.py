'''
Recurrence expansion.

A class definition repeats on weekly {day, time} slots between two inclusive
calendar dates. Expansion walks that range one day at a time and yields an
occurrence for every slot whose weekday matches. Dates here are plain calendar
dates with no zone attached.
'''
import calendar
from datetime import date, datetime, time, timedelta
from typing import Iterable, Iterator, Optional

from ..common.logger import log
from ..models.classes import ClassDefinition, Occurrence, RecurrenceSlot

WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

# "monday" and "mon" both map to 0
_DAY_LOOKUP = {}
for _index, _name in enumerate(WEEKDAY_NAMES):
    _DAY_LOOKUP[_name.lower()] = _index
    _DAY_LOOKUP[_name[:3].lower()] = _index


def parse_day(day: str) -> Optional[int]:
    """Returns the weekday index (0=Monday) for a full or 3-letter English name."""
    if not isinstance(day, str):
        return None
    return _DAY_LOOKUP.get(day.strip().lower())


def parse_time(value: str) -> Optional[time]:
    """Parses a 24-hour 'HH:MM' string."""
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except (AttributeError, ValueError):
        return None


def parse_date(value: str) -> Optional[date]:
    """Parses 'YYYY-MM-DD', ignoring any time-of-day part that follows."""
    try:
        return date.fromisoformat(value.strip()[:10])
    except (AttributeError, ValueError):
        return None


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def _parsed_slots(definition: ClassDefinition) -> list[tuple[int, time]]:
    slots = []
    for slot in definition.recurrence or []:
        weekday = parse_day(slot.day)
        slot_time = parse_time(slot.time)
        if weekday is None or slot_time is None:
            log.warning(f"Class {definition.id} has an unreadable slot {slot.day!r} {slot.time!r}, skipping it.")
            continue
        slots.append((weekday, slot_time))
    return slots


def expand_class(
    definition: ClassDefinition,
    window_start: Optional[date] = None,
    window_end: Optional[date] = None
) -> Iterator[Occurrence]:
    """
    Yields the occurrences of one class, optionally clipped to a window.
    Pure function of its arguments: calling it again restarts from scratch.
    """
    if not isinstance(definition.recurrence, list):
        log.warning(f"Class {definition.id} has no recurrence list, skipping it.")
        return
    start = parse_date(definition.start_date)
    end = parse_date(definition.end_date)
    if start is None or end is None:
        log.warning(f"Class {definition.id} has an unreadable date range, skipping it.")
        return

    if window_start is not None:
        start = max(start, window_start)
    if window_end is not None:
        end = min(end, window_end)

    slots = _parsed_slots(definition)
    if not slots:
        return

    day = start
    while day <= end:
        for weekday, slot_time in slots:
            if weekday == day.weekday():
                yield Occurrence(
                    class_id=definition.id,
                    name=definition.name,
                    classroom=definition.classroom,
                    teacher=definition.teacher,
                    date=day,
                    time=slot_time,
                    students=list(definition.students or []),
                )
        day += timedelta(days=1)


def group_occurrences_by_date(
    definitions: Iterable[ClassDefinition],
    window_start: date,
    window_end: date
) -> dict[date, list[Occurrence]]:
    """
    Expands every class inside the window and buckets the occurrences by date.
    Each bucket is ordered by time of day.
    """
    by_date: dict[date, list[Occurrence]] = {}
    for definition in definitions:
        for occurrence in expand_class(definition, window_start, window_end):
            by_date.setdefault(occurrence.date, []).append(occurrence)
    for occurrences in by_date.values():
        occurrences.sort(key=lambda o: o.time)
    return by_date


def format_recurrence(recurrence: Optional[list[RecurrenceSlot]]) -> str:
    if not isinstance(recurrence, list):
        return ""
    return ", ".join(f"{slot.day} {slot.time}" for slot in recurrence)
