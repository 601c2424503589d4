"""
Wage category allocation engine for HorasCalc application.
Classifies every worked minute of a shift as ordinary, RN, HED, HEDF or HEN,
per calendar day, and values the result against an hourly rate.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from config import config
from core.constants import (
    CATEGORIES, CATEGORY_MULTIPLIERS,
    ORDINARY, RN, HED, HEDF, HEN,
)
from core.ledger import AllocationLedger, WeekLedger
from core.segments import RestSpec, apply_rest, split_into_segments
from core.time_utils import (
    DAY_TYPE_ORDINARY,
    MINUTES_PER_HOUR,
    day_key, day_type_label, is_diurnal, resolve_day_type, resolve_week_key,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Category Policies
# =============================================================================

@dataclass(frozen=True)
class CategoryPolicy:
    """
    Classification rules that differ between deployments.

    Attributes:
        sunday_residual_ordinary: on Sunday/holiday diurnal hours, let the
            remaining ordinary budget absorb minutes before the rest become HEDF
        holiday_night_category: category for Sunday/holiday nocturnal hours (HEN or RN)
        night_priority: allow nocturnal hours to reclaim weekly room from the
            same day's diurnal ordinary minutes
    """
    name: str
    sunday_residual_ordinary: bool = False
    holiday_night_category: str = HEN
    night_priority: bool = True

    def __post_init__(self):
        if self.holiday_night_category not in (HEN, RN):
            raise ValueError(f"holiday_night_category must be '{HEN}' or '{RN}'")


CATEGORY_POLICIES: Dict[str, CategoryPolicy] = {
    "standard": CategoryPolicy("standard"),
    "residual": CategoryPolicy("residual", sunday_residual_ordinary=True, holiday_night_category=RN),
}


def get_policy(name: Optional[str] = None) -> CategoryPolicy:
    """Return a named policy preset, defaulting to the configured one."""
    return CATEGORY_POLICIES[name or config.CATEGORY_POLICY]


# =============================================================================
# Results
# =============================================================================

@dataclass(frozen=True)
class CategoryMinutes:
    """Minutes per labor-time category."""
    ordinary: int = 0
    rn: int = 0
    hed: int = 0
    hedf: int = 0
    hen: int = 0

    @classmethod
    def from_mapping(cls, values: Mapping[str, float]) -> CategoryMinutes:
        return cls(**{cat: values.get(cat, 0) for cat in CATEGORIES})

    @property
    def total(self) -> int:
        return self.ordinary + self.rn + self.hed + self.hedf + self.hen

    def as_dict(self) -> Dict[str, int]:
        return {cat: getattr(self, cat) for cat in CATEGORIES}

    def __add__(self, other: CategoryMinutes) -> CategoryMinutes:
        return CategoryMinutes(*(getattr(self, cat) + getattr(other, cat) for cat in CATEGORIES))


@dataclass(frozen=True)
class ShiftResult:
    """Outcome of one allocation run."""
    start: datetime
    end: datetime
    day_type: str
    per_day: Mapping[date, CategoryMinutes] = field(default_factory=dict)
    week_keys: Mapping[date, str] = field(default_factory=dict)
    totals: CategoryMinutes = field(default_factory=CategoryMinutes)

    def __post_init__(self):
        object.__setattr__(self, "per_day", MappingProxyType(dict(self.per_day)))
        object.__setattr__(self, "week_keys", MappingProxyType(dict(self.week_keys)))

    def as_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "day_type": self.day_type,
            "per_day": {d.isoformat(): m.as_dict() for d, m in sorted(self.per_day.items())},
            "week_keys": {d.isoformat(): w for d, w in sorted(self.week_keys.items())},
            "totals": self.totals.as_dict(),
        }


def _empty_totals() -> Dict[str, int]:
    return {cat: 0 for cat in CATEGORIES}


# =============================================================================
# Shift Allocation
# =============================================================================

def calculate_shift(
    start: datetime,
    end: datetime,
    day_type_override: Optional[str] = "auto",
    rest: RestSpec = None,
    week_key_override: Optional[str] = None,
    ledger: Optional[WeekLedger] = None,
    policy: Optional[CategoryPolicy] = None
) -> ShiftResult:
    """
    Cálculo de las categorías de horas de una jornada.

    Splits the shift at 06:00, 21:00 and midnight, removes the rest period and
    walks the segments in order, booking ordinary time against the daily and
    weekly budgets.

    Args:
        start, end: shift bounds (local wall-clock, truncated to the minute; end > start)
        day_type_override: "auto" or an explicit day type for the whole shift
        rest: rest spec (None, CountdownRest, RestWindow or AutoRest)
        week_key_override: week key to book against instead of the ISO week
        ledger: weekly ledger shared across shifts; a fresh one when omitted
        policy: category policy; the configured preset when omitted

    Returns:
        ShiftResult with minutes per category per day and grand totals.
        The week ledger is updated in place.
    """
    start = start.replace(second=0, microsecond=0)
    end = end.replace(second=0, microsecond=0)
    policy = policy or get_policy()
    week_ledger = ledger if ledger is not None else WeekLedger()
    budgets = AllocationLedger(week_ledger)

    segments = apply_rest(split_into_segments(start, end), rest, start, end)

    totals = _empty_totals()
    minutes_by_day: Dict[date, Dict[str, int]] = {}
    week_keys: Dict[date, str] = {}

    def book(day_totals: Dict[str, int], category: str, minutes: int):
        if minutes <= 0:
            return
        day_totals[category] += minutes
        totals[category] += minutes

    for seg in segments:
        minutes = int(round(seg.minutes))
        if minutes <= 0:
            continue

        seg_day = day_key(seg.start)
        week_key = resolve_week_key(seg_day, week_key_override)
        day_type = resolve_day_type(seg.start, day_type_override)
        diurnal = is_diurnal(seg.start)

        day_totals = minutes_by_day.setdefault(seg_day, _empty_totals())
        week_keys[seg_day] = week_key

        if day_type == DAY_TYPE_ORDINARY:
            if not diurnal and policy.night_priority:
                reclaimed = _reclassify_for_night(budgets, day_totals, seg_day, week_key, minutes)
                if reclaimed:
                    totals[ORDINARY] -= reclaimed
                    totals[HED] += reclaimed

            usable = min(
                minutes,
                budgets.remaining_day_budget(seg_day),
                budgets.remaining_week_budget(week_key),
            )
            budgets.consume(seg_day, week_key, usable)

            if diurnal:
                book(day_totals, ORDINARY, usable)
                book(day_totals, HED, minutes - usable)
            else:
                book(day_totals, RN, usable)
                book(day_totals, HEN, minutes - usable)

        elif diurnal:
            usable = 0
            if policy.sunday_residual_ordinary:
                usable = min(
                    minutes,
                    budgets.remaining_day_budget(seg_day),
                    budgets.remaining_week_budget(week_key),
                )
                budgets.consume(seg_day, week_key, usable)
            book(day_totals, ORDINARY, usable)
            book(day_totals, HEDF, minutes - usable)

        else:
            book(day_totals, policy.holiday_night_category, minutes)

    logger.debug(
        f"Allocated shift {start} - {end} ({policy.name}): "
        f"{sum(totals.values())} minutes over {len(minutes_by_day)} day(s)"
    )

    return ShiftResult(
        start=start,
        end=end,
        day_type=day_type_label(start, day_type_override),
        per_day={d: CategoryMinutes.from_mapping(v) for d, v in minutes_by_day.items()},
        week_keys=week_keys,
        totals=CategoryMinutes.from_mapping(totals),
    )


def _reclassify_for_night(
    budgets: AllocationLedger,
    day_totals: Dict[str, int],
    seg_day: date,
    week_key: str,
    minutes: int
) -> int:
    """
    Free weekly room for a nocturnal segment by turning the day's ordinary
    minutes into HED.

    Only the part of the segment that the daily budget allows but the weekly
    budget blocks is covered. The transfer is bounded by the day's ordinary
    minutes, the minutes needed and the week's consumed minutes.
    """
    within_day = min(minutes, budgets.remaining_day_budget(seg_day))
    needed = within_day - min(within_day, budgets.remaining_week_budget(week_key))
    if needed <= 0 or day_totals[ORDINARY] <= 0:
        return 0

    amount = min(day_totals[ORDINARY], needed, budgets.week_ledger.consumed(week_key))
    reclaimed = int(budgets.reclaim(seg_day, week_key, amount))
    if reclaimed:
        day_totals[ORDINARY] -= reclaimed
        day_totals[HED] += reclaimed
        logger.debug(f"Reclassified {reclaimed} ordinary minutes of {seg_day} as HED for night hours")
    return reclaimed


# =============================================================================
# Valuation
# =============================================================================

def calculate_pay(minutes: CategoryMinutes, hourly_rate: float) -> Dict[str, float]:
    """
    Value category minutes at an hourly rate.

    Each category is paid rate x hours x multiplier; "total" is their sum.
    """
    pay = {}
    for cat in CATEGORIES:
        hours = getattr(minutes, cat) / MINUTES_PER_HOUR
        pay[cat] = round(hourly_rate * hours * CATEGORY_MULTIPLIERS[cat], 2)
    pay["total"] = round(sum(pay.values()), 2)
    return pay
