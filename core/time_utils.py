"""
Time utilities for HorasCalc application.
Contains time conversion functions, diurnal/nocturnal boundaries, day types and ISO week keys.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, date
from typing import Optional

from config import config
from utils.error_handler import InvalidDayType

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# Time constants (in minutes)
MINUTES_PER_HOUR = 60

# Diurnal window boundaries (minutes from midnight)
DIURNAL_START_MINUTES = 6 * MINUTES_PER_HOUR    # 360 = 06:00
NOCTURNAL_START_MINUTES = 21 * MINUTES_PER_HOUR  # 1260 = 21:00

# Ordinary allowances
DAILY_ORDINARY_LIMIT = config.DAILY_ORDINARY_MINUTES    # 480 - 8 hours per day
WEEKLY_ORDINARY_LIMIT = config.WEEKLY_ORDINARY_MINUTES  # 2640 - 44 hours per week

# Weekday indices (Python's weekday())
SUNDAY = 6

# Day types
DAY_TYPE_ORDINARY = "ordinary"
DAY_TYPE_SUNDAY_HOLIDAY = "sunday_holiday"

# Override values accepted from the form
DAY_TYPE_AUTO = "auto"
DAY_TYPE_OVERRIDES = {
    "ordinario": DAY_TYPE_ORDINARY,
    "dominical": DAY_TYPE_SUNDAY_HOLIDAY,
    "festivo": DAY_TYPE_SUNDAY_HOLIDAY,
}

DAY_TYPE_LABELS = {
    DAY_TYPE_ORDINARY: "Ordinario",
    DAY_TYPE_SUNDAY_HOLIDAY: "Dominical",
}


# =============================================================================
# Date/Time Conversion Functions
# =============================================================================

def minutes_between(start: datetime, end: datetime) -> float:
    """Return the signed number of minutes from start to end."""
    return (end - start).total_seconds() / MINUTES_PER_HOUR


def minute_of_day(ts: datetime) -> int:
    """Return minutes elapsed since local midnight (seconds ignored)."""
    return ts.hour * MINUTES_PER_HOUR + ts.minute


def day_key(ts: datetime) -> date:
    """Local calendar date a segment belongs to."""
    return ts.date()


def iso_week_key(day: date) -> str:
    """Return the ISO-8601 week identifier, e.g. '2024-W07'."""
    iso_year, iso_week, _ = day.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def resolve_week_key(day: date, override: Optional[str] = None) -> str:
    """Use the explicit week override when given, otherwise the ISO week of the day."""
    if override:
        return override
    return iso_week_key(day)


def to_hours(minutes: float) -> float:
    """Convert minutes to hours rounded to two decimals."""
    return round(minutes / MINUTES_PER_HOUR, 2)


# =============================================================================
# Boundaries and Day Types
# =============================================================================

def next_boundary(ts: datetime) -> datetime:
    """
    Return the first diurnal/nocturnal or calendar-day boundary strictly after ts.

    Candidates are same-day 06:00, same-day 21:00, next midnight and the
    following day's 06:00.
    """
    midnight = datetime.combine(ts.date(), datetime.min.time())
    next_midnight = midnight + timedelta(days=1)
    candidates = [
        midnight + timedelta(minutes=DIURNAL_START_MINUTES),
        midnight + timedelta(minutes=NOCTURNAL_START_MINUTES),
        next_midnight,
        next_midnight + timedelta(minutes=DIURNAL_START_MINUTES),
    ]
    return min(c for c in candidates if c > ts)


def is_diurnal(ts: datetime) -> bool:
    """True when the clock time falls in [06:00, 21:00)."""
    minute = minute_of_day(ts)
    return DIURNAL_START_MINUTES <= minute < NOCTURNAL_START_MINUTES


def resolve_day_type(ts: datetime, override: Optional[str] = None) -> str:
    """
    Resolve the day type of an instant.

    Any override other than "auto" applies as given; otherwise Sunday is a
    Sunday/holiday day and every other weekday is ordinary.

    Raises:
        InvalidDayType: override is not one of DAY_TYPE_OVERRIDES
    """
    if override and override != DAY_TYPE_AUTO:
        if override not in DAY_TYPE_OVERRIDES:
            raise InvalidDayType(
                f"Unknown day type: {override!r}",
                details={'day_type': override},
                user_message="El tipo de día no es válido."
            )
        return DAY_TYPE_OVERRIDES[override]

    if ts.weekday() == SUNDAY:
        return DAY_TYPE_SUNDAY_HOLIDAY
    return DAY_TYPE_ORDINARY


def day_type_label(ts: datetime, override: Optional[str] = None) -> str:
    """Display label for the day type of an instant ("Ordinario", "Dominical", "Festivo")."""
    if override and override != DAY_TYPE_AUTO:
        resolve_day_type(ts, override)
        return override.capitalize()
    return DAY_TYPE_LABELS[resolve_day_type(ts)]
