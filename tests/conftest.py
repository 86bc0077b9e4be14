"""Pytest configuration and fixtures."""

from datetime import datetime, timezone

import pytest

from availability_engine.schema import ScheduleConfig, TimeWindow


@pytest.fixture
def fixed_now() -> datetime:
    """A 'now' well before every date used in resolver tests."""
    return datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def paris_schedule() -> ScheduleConfig:
    """Mon-Fri 09:00-17:00 in Paris, 60-min slots, 15-min buffer."""
    return ScheduleConfig(
        available_days=[1, 2, 3, 4, 5],
        windows=[TimeWindow(start="09:00", end="17:00")],
        slot_duration_min=60,
        buffer_min=15,
        timezone="Europe/Paris",
    )


@pytest.fixture
def utc_morning_schedule() -> ScheduleConfig:
    """Mondays only, 09:00-12:00 UTC, back-to-back 60-min slots."""
    return ScheduleConfig(
        available_days=[1],
        windows=[TimeWindow(start="09:00", end="12:00")],
        slot_duration_min=60,
        buffer_min=0,
        timezone="UTC",
    )


@pytest.fixture
def bogota_schedule() -> ScheduleConfig:
    """Every day, morning and evening windows in a fixed-offset zone (UTC-5)."""
    return ScheduleConfig(
        available_days=[0, 1, 2, 3, 4, 5, 6],
        windows=[
            TimeWindow(start="08:00", end="11:00"),
            TimeWindow(start="18:00", end="20:00"),
        ],
        slot_duration_min=45,
        buffer_min=15,
        timezone="America/Bogota",
    )
