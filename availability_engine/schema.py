"""Pydantic models for schedule config, bookings, slots and the HTTP surface."""

from datetime import datetime
from enum import Enum
from typing import Annotated, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator

from availability_engine.wallclock import to_utc


class SessionStatus(str, Enum):
    """Lifecycle state of an existing booking."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"


# Bookings in these states free their time again.
NON_BLOCKING_STATUSES = frozenset({SessionStatus.CANCELLED, SessionStatus.NO_SHOW})


class Delivery(str, Enum):
    """How a session is delivered. Passed through to slots untouched."""

    VIRTUAL = "virtual"
    IN_PERSON = "in-person"


Weekday = Annotated[int, Field(ge=0, le=6)]


# --- Schedule configuration (input to the resolver) ---


class TimeWindow(BaseModel):
    """Open hours within a day, as civil HH:MM strings in the schedule timezone.

    Not validated here: a malformed window simply produces no slots.
    """

    model_config = ConfigDict(frozen=True)

    start: str = Field(..., description="Start time HH:MM")
    end: str = Field(..., description="End time HH:MM")


class ScheduleConfig(BaseModel):
    """Weekly recurring schedule. Field defaults form the engine default schedule."""

    model_config = ConfigDict(frozen=True)

    available_days: list[Weekday] = Field(
        default_factory=lambda: [1, 2, 3, 4, 5],
        description="Weekday numbers 0=Sunday, 6=Saturday",
    )
    windows: list[TimeWindow] = Field(
        default_factory=lambda: [TimeWindow(start="09:00", end="17:00")],
        description="Open windows per available day; may overlap",
    )
    slot_duration_min: int = Field(default=60, description="Length of one slot in minutes")
    buffer_min: int = Field(default=15, ge=0, description="Gap kept between slots and around bookings")
    timezone: str = Field(default="America/Bogota", description="IANA timezone of the windows")
    blocked_dates: list[str] = Field(
        default_factory=list,
        description="Civil dates YYYY-MM-DD excluded regardless of weekday",
    )

    @field_validator("timezone")
    @classmethod
    def known_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v!r}")
        return v


class ScheduleOverrides(BaseModel):
    """Partial schedule; only explicitly set fields replace the base schedule."""

    available_days: Optional[list[Weekday]] = None
    windows: Optional[list[TimeWindow]] = None
    slot_duration_min: Optional[int] = None
    buffer_min: Optional[int] = None
    timezone: Optional[str] = None
    blocked_dates: Optional[list[str]] = None


class BookedInterval(BaseModel):
    """Existing reservation. Naive datetimes are taken as UTC."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    status: SessionStatus = SessionStatus.CONFIRMED

    @field_validator("start", "end")
    @classmethod
    def as_utc(cls, v: datetime) -> datetime:
        return to_utc(v)

    @property
    def blocks(self) -> bool:
        return self.status not in NON_BLOCKING_STATUSES


class AvailabilitySlot(BaseModel):
    """A single bookable slot, in absolute UTC instants."""

    model_config = ConfigDict(frozen=True)

    start: datetime = Field(..., description="UTC start instant")
    end: datetime = Field(..., description="UTC end instant")
    duration_min: int
    delivery: list[Delivery]
    remaining: int = 1


# --- Request / Response ---


class AvailabilityRequest(BaseModel):
    """Request body for POST /availability."""

    schedule: Optional[ScheduleConfig] = Field(
        default=None,
        description="Operator schedule; engine default when omitted",
    )
    overrides: Optional[ScheduleOverrides] = Field(
        default=None,
        description="Fields overlaid on the schedule (or on the engine default)",
    )
    range_start: Optional[str] = Field(default=None, description="Start date YYYY-MM-DD")
    range_end: Optional[str] = Field(default=None, description="End date YYYY-MM-DD, inclusive")
    existing_bookings: list[BookedInterval] = Field(default_factory=list)
    min_lead_hours: Optional[float] = Field(default=None, ge=0, le=24 * 366 * 10, allow_inf_nan=False)
    delivery: Optional[list[Delivery]] = None


class ScheduleSummary(BaseModel):
    timezone: str
    slot_duration_min: int
    buffer_min: int


class DateRange(BaseModel):
    """Date range as resolved for the request (echoed verbatim)."""

    start: str
    end: str


class AvailabilityResponse(BaseModel):
    """Response from POST /availability."""

    slots: list[AvailabilitySlot] = Field(..., description="Bookable slots, chronological")
    schedule: ScheduleSummary
    range: DateRange
