"""Deterministic resolver for bookable slots in an operator's schedule."""

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from availability_engine.config import default_schedule
from availability_engine.schema import (
    AvailabilitySlot,
    BookedInterval,
    Delivery,
    ScheduleConfig,
    TimeWindow,
)
from availability_engine.wallclock import (
    format_civil_date,
    parse_civil_date,
    to_utc,
    wall_time_to_instant,
    weekday_in_zone,
)

logger = logging.getLogger(__name__)

Interval = tuple[datetime, datetime]


def _blocking_intervals(bookings: Iterable[BookedInterval]) -> list[Interval]:
    """(start, end) of bookings that still hold their time."""
    return [(b.start, b.end) for b in bookings if b.blocks]


def _conflicts(
    slot_start: datetime,
    slot_end: datetime,
    booked: Sequence[Interval],
    buffer: timedelta,
) -> bool:
    """Check if slot overlaps any booking widened by buffer on both sides."""
    return any(
        slot_start < b_end + buffer and slot_end > b_start - buffer
        for b_start, b_end in booked
    )


def _window_candidates(
    day: str,
    window: TimeWindow,
    schedule: ScheduleConfig,
) -> list[Interval]:
    """Slot-sized steps through one window, spaced by slot duration + buffer."""
    window_start = wall_time_to_instant(day, window.start, schedule.timezone)
    window_end = wall_time_to_instant(day, window.end, schedule.timezone)
    if window_start is None or window_end is None:
        logger.debug("Skipping window %s-%s on %s: unparsable", window.start, window.end, day)
        return []

    duration = timedelta(minutes=schedule.slot_duration_min)
    step = duration + timedelta(minutes=schedule.buffer_min)

    candidates: list[Interval] = []
    cursor = window_start
    while cursor + duration <= window_end:
        candidates.append((cursor, cursor + duration))
        cursor += step
    return candidates


def _days(start: date, end: date) -> Iterable[date]:
    current = start
    while True:
        yield current
        if current >= end:
            return
        current += timedelta(days=1)


def resolve_availability(
    schedule: Optional[ScheduleConfig],
    range_start: str,
    range_end: str,
    existing_bookings: Iterable[BookedInterval] = (),
    min_lead_hours: float = 24,
    delivery: Optional[Sequence[Delivery]] = None,
    now: Optional[datetime] = None,
) -> list[AvailabilitySlot]:
    """
    Compute bookable slots for every civil date in [range_start, range_end].

    Window times are read in the schedule's timezone; slots come back as
    UTC instants in chronological order. A slot is kept only if it starts
    strictly after now + min_lead_hours and stays buffer_min away from every
    booking that isn't cancelled or a no-show.

    Degenerate input (unparsable or inverted range, non-positive slot
    duration) yields an empty list rather than an error.
    """
    schedule = schedule if schedule is not None else default_schedule()
    delivery = list(delivery) if delivery is not None else [Delivery.VIRTUAL]
    now = to_utc(now) if now is not None else datetime.now(timezone.utc)

    first_day = parse_civil_date(range_start)
    last_day = parse_civil_date(range_end)
    if first_day is None or last_day is None or last_day <= first_day:
        logger.debug("Degenerate range %r..%r, no slots", range_start, range_end)
        return []

    if schedule.slot_duration_min <= 0:
        logger.debug("Non-positive slot duration %d, no slots", schedule.slot_duration_min)
        return []

    try:
        earliest_bookable = now + timedelta(hours=min_lead_hours)
    except (OverflowError, ValueError):
        logger.debug("Lead time %r reaches past the calendar, no slots", min_lead_hours)
        return []
    buffer = timedelta(minutes=schedule.buffer_min)
    booked = _blocking_intervals(existing_bookings)
    available_days = set(schedule.available_days)
    blocked_dates = set(schedule.blocked_dates)

    slots: list[AvailabilitySlot] = []
    for day in _days(first_day, last_day):
        day_str = format_civil_date(day)
        if weekday_in_zone(day, schedule.timezone) not in available_days:
            continue
        if day_str in blocked_dates:
            continue

        accepted: list[Interval] = []
        for window in schedule.windows:
            for slot_start, slot_end in _window_candidates(day_str, window, schedule):
                if slot_start <= earliest_bookable:
                    continue
                if _conflicts(slot_start, slot_end, booked, buffer):
                    continue
                accepted.append((slot_start, slot_end))

        # Windows listed out of order would otherwise break chronological output.
        accepted.sort(key=lambda interval: interval[0])
        slots.extend(
            AvailabilitySlot(
                start=slot_start,
                end=slot_end,
                duration_min=schedule.slot_duration_min,
                delivery=delivery,
            )
            for slot_start, slot_end in accepted
        )

    logger.debug(
        "Resolved %d slot(s) for %s..%s in %s",
        len(slots),
        range_start,
        range_end,
        schedule.timezone,
    )
    return slots
