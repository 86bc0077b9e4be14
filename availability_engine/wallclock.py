"""Civil date/time helpers and DST-safe wall-clock to instant conversion."""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

CivilDate = Union[date, str]

_ONE_DAY = timedelta(days=1)


def parse_civil_date(s: str) -> Optional[date]:
    """Parse YYYY-MM-DD. Returns None unless it is a real calendar date."""
    parts = s.split("-")
    if len(parts) != 3:
        return None
    try:
        return date(int(parts[0]), int(parts[1]), int(parts[2]))
    except ValueError:
        return None


def parse_civil_time(s: str) -> Optional[tuple[int, int]]:
    """Parse HH:MM (trailing :SS ignored) to (hour, minute).

    24:00 is accepted as the end of the civil day.
    """
    parts = s.split(":")
    if len(parts) < 2:
        return None
    try:
        hour, minute = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not 0 <= minute < 60:
        return None
    if not (0 <= hour < 24 or (hour == 24 and minute == 0)):
        return None
    return hour, minute


def format_civil_date(d: date) -> str:
    return d.isoformat()


def to_utc(dt: datetime) -> datetime:
    """Normalize to an aware UTC datetime; naive values are taken as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _as_date(day: CivilDate) -> Optional[date]:
    if isinstance(day, date):
        return day
    return parse_civil_date(day)


def _zone(name: str) -> Optional[ZoneInfo]:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return None


def _wall_fields(instant: datetime, tz: ZoneInfo) -> tuple[int, int, int, int, int]:
    """Civil (year, month, day, hour, minute) of an instant as observed in tz."""
    local = instant.astimezone(tz)
    return local.year, local.month, local.day, local.hour, local.minute


def _zone_offset(instant: datetime, tz: ZoneInfo) -> timedelta:
    """UTC offset of tz at instant, measured by re-reading its wall clock as UTC."""
    y, mo, d, h, mi = _wall_fields(instant, tz)
    reconstructed = datetime(y, mo, d, h, mi, tzinfo=timezone.utc)
    return reconstructed - instant


def wall_time_to_instant(day: CivilDate, time: str, tz_name: str) -> Optional[datetime]:
    """
    Convert a civil date + HH:MM in tz_name to the matching UTC instant.

    The requested wall time is first built as a UTC "carrier"; the zone's
    offset at the carrier is subtracted from it. At a DST transition that
    offset may belong to the wrong side, so offsets one day either side are
    tried as well:
    - ambiguous times (fall back) resolve to the earlier occurrence;
    - nonexistent times (spring forward) keep the pre-transition offset,
      which moves them forward by the size of the gap.

    Returns None when the date, time or zone can't be parsed.
    """
    civil = _as_date(day)
    hm = parse_civil_time(time)
    tz = _zone(tz_name)
    if civil is None or hm is None or tz is None:
        return None
    hour, minute = hm

    try:
        carrier = datetime(civil.year, civil.month, civil.day, tzinfo=timezone.utc) + timedelta(
            hours=hour, minutes=minute
        )
        instant = carrier - _zone_offset(carrier, tz)

        wanted = (carrier.year, carrier.month, carrier.day, carrier.hour, carrier.minute)
        candidates = {instant}
        for probe in (instant - _ONE_DAY, instant + _ONE_DAY):
            candidates.add(carrier - _zone_offset(probe, tz))
        matching = sorted(c for c in candidates if _wall_fields(c, tz) == wanted)
    except OverflowError:
        logger.debug("Wall time %s %s out of range in %s", civil, time, tz_name)
        return None

    if matching:
        return matching[0]
    # Inside a DST gap: the pre-transition offset is the smallest one.
    return max(candidates)


def weekday_in_zone(day: CivilDate, tz_name: str) -> int:
    """Weekday of a civil date in tz_name, 0=Sunday .. 6=Saturday.

    Anchored at civil noon in the zone so the offset can't push it into a
    neighbouring day. Raises ValueError for an unparsable date and
    ZoneInfoNotFoundError for an unknown zone.
    """
    civil = _as_date(day)
    if civil is None:
        raise ValueError(f"Invalid civil date: {day!r}")
    noon = wall_time_to_instant(civil, "12:00", tz_name)
    # Raises for an unknown zone, which the conversion above reports as None.
    tz = ZoneInfo(tz_name)
    if noon is None:
        return civil.isoweekday() % 7
    return noon.astimezone(tz).isoweekday() % 7
