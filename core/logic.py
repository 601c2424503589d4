"""
Session logic for HorasCalc application.
Holds submitted shift records and the shared week ledger, and projects
records into per-person / per-week / per-day rows and totals.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from core.constants import CATEGORIES
from core.ledger import WeekLedger
from core.time_utils import to_hours
from core.validation import ShiftRequest, validate_shift
from core.wage_calculator import CategoryMinutes, ShiftResult, calculate_shift
from utils.utils import person_sort_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DayEntry:
    """Minutes of one record that fall on one calendar day."""
    day_key: date
    week: str
    values: CategoryMinutes


@dataclass(frozen=True)
class ShiftRecord:
    """A submitted shift with its allocation result."""
    person: str
    start: datetime
    end: datetime
    result: ShiftResult
    entries: List[DayEntry] = field(default_factory=list)

    @property
    def totals(self) -> CategoryMinutes:
        return self.result.totals

    def as_dict(self) -> Dict[str, Any]:
        data = self.result.as_dict()
        data["person"] = self.person
        return data


def build_record(request: ShiftRequest, result: ShiftResult) -> ShiftRecord:
    entries = [
        DayEntry(day_key=d, week=result.week_keys[d], values=values)
        for d, values in sorted(result.per_day.items())
    ]
    return ShiftRecord(
        person=request.person,
        start=request.start,
        end=request.end,
        result=result,
        entries=entries,
    )


# =============================================================================
# Session
# =============================================================================

class Session:
    """
    One logical calculation session (one browser user / one process).

    Owns the week ledger so every submitted shift shares the weekly ordinary
    allowance until reset() is called.
    """

    def __init__(self, ledger: Optional[WeekLedger] = None):
        self.ledger = ledger if ledger is not None else WeekLedger()
        self.records: List[ShiftRecord] = []

    def calculate(self, request: ShiftRequest) -> ShiftResult:
        """Run the allocation engine for a validated request against the session ledger."""
        with self.ledger.transaction():
            return calculate_shift(
                request.start,
                request.end,
                day_type_override=request.day_type,
                rest=request.rest,
                week_key_override=request.week_key,
                ledger=self.ledger,
                policy=request.policy,
            )

    def submit(self, **fields) -> ShiftRecord:
        """
        Validate a raw submission, allocate it and store the record.

        Validation errors propagate before the ledger is touched.
        """
        request = validate_shift(**fields)
        result = self.calculate(request)
        record = build_record(request, result)
        self.records.append(record)
        logger.info(
            f"Shift recorded for {record.person}: {record.start} - {record.end}, "
            f"{record.totals.total} minutes"
        )
        return record

    def preview(self, **fields) -> ShiftRecord:
        """Allocate a submission without keeping it or its ledger changes."""
        request = validate_shift(**fields)
        with self.ledger.transaction():
            snapshot = self.ledger.snapshot()
            try:
                result = self.calculate(request)
            finally:
                self.ledger.restore(snapshot)
        return build_record(request, result)

    def reset(self):
        """Forget every record and the weekly consumption."""
        with self.ledger.transaction():
            self.records.clear()
            self.ledger.clear()
        logger.info("Session reset")


# =============================================================================
# Totals Projection
# =============================================================================

def _relevant_entries(record: ShiftRecord, week: Optional[str]) -> List[DayEntry]:
    if week:
        return [e for e in record.entries if e.week == week]
    return list(record.entries)


def filter_records(
    records: Iterable[ShiftRecord],
    person: Optional[str] = None,
    week: Optional[str] = None
) -> List[ShiftRecord]:
    """Records of the person (if given) having at least one day in the week (if given)."""
    filtered = []
    for record in records:
        if person and record.person != person:
            continue
        if week and not any(e.week == week for e in record.entries):
            continue
        filtered.append(record)
    return filtered


def project_rows(records: Iterable[ShiftRecord], week: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Group record entries person -> week -> day and sum the minutes.

    Persons are sorted ignoring case and accents; weeks and days ascending.
    Each row carries minutes per category and the row total.
    """
    grouped: Dict[str, Dict[str, Dict[date, CategoryMinutes]]] = {}

    for record in records:
        for entry in _relevant_entries(record, week):
            days = grouped.setdefault(record.person, {}).setdefault(entry.week, {})
            days[entry.day_key] = days.get(entry.day_key, CategoryMinutes()) + entry.values

    rows = []
    for person in sorted(grouped, key=person_sort_key):
        weeks = grouped[person]
        for week_key in sorted(weeks):
            for day in sorted(weeks[week_key]):
                values = weeks[week_key][day]
                row = {"person": person, "week": week_key, "day": day}
                row.update(values.as_dict())
                row["total"] = values.total
                rows.append(row)
    return rows


def summarize(records: Iterable[ShiftRecord], week: Optional[str] = None) -> CategoryMinutes:
    """Grand totals per category over the records' relevant entries."""
    totals = CategoryMinutes()
    for record in records:
        for entry in _relevant_entries(record, week):
            totals = totals + entry.values
    return totals


def available_filters(records: Iterable[ShiftRecord]) -> Dict[str, List[str]]:
    """Distinct persons and weeks present in the records, sorted."""
    records = list(records)
    persons = sorted({r.person for r in records}, key=person_sort_key)
    weeks = sorted({e.week for r in records for e in r.entries})
    return {"persons": persons, "weeks": weeks}


def totals_in_hours(totals: CategoryMinutes) -> Dict[str, float]:
    hours = {cat: to_hours(getattr(totals, cat)) for cat in CATEGORIES}
    hours["total"] = to_hours(totals.total)
    return hours


# Process-wide session used by the web layer
_session = Session()


def get_session() -> Session:
    return _session
