"""Engine defaults, schedule merging and process settings."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional

from availability_engine.schema import Delivery, ScheduleConfig


def default_schedule() -> ScheduleConfig:
    """Fallback when an operator hasn't configured a schedule.

    Mon-Fri, 09:00-17:00, 60-min slots, 15-min buffer, America/Bogota.
    """
    return ScheduleConfig()


def merge_schedule(
    base: Optional[ScheduleConfig] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> ScheduleConfig:
    """
    Overlay explicitly set values on a base schedule (engine default if None).

    Keys whose value is None are treated as unset. The result is validated
    again, so a bad override raises pydantic.ValidationError.
    """
    base = base if base is not None else default_schedule()
    if not overrides:
        return base
    explicit = {k: v for k, v in overrides.items() if v is not None}
    return ScheduleConfig.model_validate({**base.model_dump(), **explicit})


@dataclass(frozen=True)
class SessionsPolicy:
    """
    Portal session booking rules.

    Attributes:
        session_types: Delivery modes tagged onto every slot
        min_booking_hours: Lead time before a slot can be booked
    """

    session_types: tuple[str, ...] = (Delivery.VIRTUAL.value,)
    min_booking_hours: float = 24

    @property
    def delivery(self) -> list[Delivery]:
        return [Delivery(t) for t in self.session_types]


@dataclass(frozen=True)
class Settings:
    """Process settings, read from the environment."""

    min_booking_hours: float = 24
    default_range_days: int = 14
    max_range_days: int = 366
    log_level: str = "INFO"
    env: str = "development"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            min_booking_hours=float(os.environ.get("AVAILABILITY_MIN_BOOKING_HOURS", "24")),
            default_range_days=int(os.environ.get("AVAILABILITY_DEFAULT_RANGE_DAYS", "14")),
            max_range_days=int(os.environ.get("AVAILABILITY_MAX_RANGE_DAYS", "366")),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            env=os.environ.get("ENV", "development"),
        )

    @property
    def sessions(self) -> SessionsPolicy:
        return SessionsPolicy(min_booking_hours=self.min_booking_hours)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
