"""
Ordinary-time ledger for HorasCalc application.

Two budgets constrain how many minutes may be booked as ordinary time:

- the daily budget (8 hours per calendar day), which lives only for one
  allocation run, and
- the weekly budget (44 hours per week key), which is shared by every shift
  submitted in a session until the session is reset.

WeekLedger holds the weekly side and is owned by a session object; an
AllocationLedger wraps it together with the per-run daily budgets.
"""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import date
from typing import Dict, Iterator

from core.time_utils import DAILY_ORDINARY_LIMIT, WEEKLY_ORDINARY_LIMIT
from utils.error_handler import LedgerInvariantError

logger = logging.getLogger(__name__)


class WeekLedger:
    """
    Minutes of ordinary time already consumed per week key.

    Mutations are expected to happen inside transaction(), which serializes
    allocations on the same ledger.
    """

    def __init__(self, weekly_limit: int = WEEKLY_ORDINARY_LIMIT):
        self.weekly_limit = weekly_limit
        self._consumed: Dict[str, float] = {}
        self.lock = threading.RLock()

    def consumed(self, week_key: str) -> float:
        return self._consumed.get(week_key, 0)

    def remaining(self, week_key: str) -> float:
        return max(0, self.weekly_limit - self.consumed(week_key))

    def add(self, week_key: str, minutes: float):
        """Record consumed minutes (negative values give minutes back)."""
        value = self.consumed(week_key) + minutes
        if value < 0:
            raise LedgerInvariantError(
                f"Week {week_key} consumption would become negative",
                details={'week_key': week_key, 'consumed': self.consumed(week_key), 'delta': minutes}
            )
        self._consumed[week_key] = value

    def snapshot(self) -> Dict[str, float]:
        """Copy of the current state, for preview-then-restore."""
        with self.lock:
            return dict(self._consumed)

    def restore(self, snapshot: Dict[str, float]):
        with self.lock:
            self._consumed = dict(snapshot)

    def clear(self):
        with self.lock:
            self._consumed.clear()
            logger.info("Week ledger cleared")

    def weeks(self) -> Dict[str, float]:
        return dict(self._consumed)

    @contextmanager
    def transaction(self) -> Iterator[WeekLedger]:
        """Hold the ledger for one allocation at a time."""
        with self.lock:
            yield self


class AllocationLedger:
    """Daily budgets for one allocation run on top of a shared WeekLedger."""

    def __init__(self, week_ledger: WeekLedger, daily_limit: int = DAILY_ORDINARY_LIMIT):
        self.week_ledger = week_ledger
        self.daily_limit = daily_limit
        self._day_budget: Dict[date, float] = {}

    def remaining_day_budget(self, day: date) -> float:
        if day not in self._day_budget:
            self._day_budget[day] = self.daily_limit
        return self._day_budget[day]

    def remaining_week_budget(self, week_key: str) -> float:
        return self.week_ledger.remaining(week_key)

    def consume(self, day: date, week_key: str, minutes: float):
        """Book ordinary minutes against both the day and the week."""
        if minutes <= 0:
            return
        budget = self.remaining_day_budget(day) - minutes
        if budget < 0:
            raise LedgerInvariantError(
                f"Day budget for {day} would become negative",
                details={'day': str(day), 'minutes': minutes}
            )
        self._day_budget[day] = budget
        self.week_ledger.add(week_key, minutes)

    def reclaim(self, day: date, week_key: str, minutes: float) -> float:
        """
        Give ordinary minutes back to the day and week budgets.

        The amount is clamped so week consumption never goes negative and the
        day budget never exceeds its limit. Returns the minutes actually reclaimed.
        """
        day_room = self.daily_limit - self.remaining_day_budget(day)
        amount = min(minutes, self.week_ledger.consumed(week_key), day_room)
        if amount <= 0:
            return 0

        self._day_budget[day] += amount
        self.week_ledger.add(week_key, -amount)
        return amount
