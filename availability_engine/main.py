"""FastAPI application for the Availability Engine."""

import logging
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from fastapi import FastAPI, HTTPException, Response
from pydantic import ValidationError

from availability_engine.config import default_schedule, get_settings, merge_schedule
from availability_engine.resolver import resolve_availability
from availability_engine.schema import (
    AvailabilityRequest,
    AvailabilityResponse,
    DateRange,
    ScheduleConfig,
    ScheduleSummary,
)
from availability_engine.wallclock import format_civil_date, parse_civil_date

_settings = get_settings()
if _settings.env != "production":
    logging.basicConfig(level=_settings.log_level)
else:
    logging.basicConfig(
        level=_settings.log_level,
        format='{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}',
    )
logger = logging.getLogger(__name__)

app = FastAPI(title="Availability Engine", version="0.1.0")


@app.post("/availability", response_model=AvailabilityResponse)
def availability(request: AvailabilityRequest, response: Response) -> AvailabilityResponse:
    """
    Bookable slots for a schedule over a date range.
    The range defaults to today (in the schedule timezone) plus two weeks.
    Slots are advisory: the booking write path must re-check them.
    """
    settings = get_settings()
    policy = settings.sessions

    try:
        schedule = merge_schedule(
            request.schedule,
            request.overrides.model_dump(exclude_none=True) if request.overrides else None,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Invalid schedule overrides: {e}")

    now = datetime.now(timezone.utc)
    today = now.astimezone(ZoneInfo(schedule.timezone)).date()
    range_start = request.range_start or format_civil_date(today)
    if request.range_end:
        range_end = request.range_end
    else:
        anchor = parse_civil_date(range_start) or today
        try:
            range_end = format_civil_date(anchor + timedelta(days=settings.default_range_days))
        except OverflowError:
            range_end = format_civil_date(date.max)

    first_day = parse_civil_date(range_start)
    last_day = parse_civil_date(range_end)
    if first_day and last_day and (last_day - first_day).days > settings.max_range_days:
        raise HTTPException(
            status_code=422,
            detail=(
                f"Range {range_start}..{range_end} spans {(last_day - first_day).days} days; "
                f"maximum is {settings.max_range_days}"
            ),
        )

    slots = resolve_availability(
        schedule=schedule,
        range_start=range_start,
        range_end=range_end,
        existing_bookings=request.existing_bookings,
        min_lead_hours=(
            request.min_lead_hours if request.min_lead_hours is not None else policy.min_booking_hours
        ),
        delivery=request.delivery or policy.delivery,
        now=now,
    )
    logger.info(
        "Availability %s..%s (%s): %d slot(s)", range_start, range_end, schedule.timezone, len(slots)
    )

    response.headers["Cache-Control"] = "private, max-age=60"
    return AvailabilityResponse(
        slots=slots,
        schedule=ScheduleSummary(
            timezone=schedule.timezone,
            slot_duration_min=schedule.slot_duration_min,
            buffer_min=schedule.buffer_min,
        ),
        range=DateRange(start=range_start, end=range_end),
    )


@app.get("/schedule/default", response_model=ScheduleConfig)
def schedule_default() -> ScheduleConfig:
    """Engine default schedule applied when no schedule is supplied."""
    return default_schedule()


@app.get("/health")
def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}
