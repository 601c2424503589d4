"""
Utility functions for HorasCalc application.
Contains helper functions for formatting and sorting.
"""
from __future__ import annotations

import logging
import unicodedata
from datetime import datetime, date

logger = logging.getLogger(__name__)

# Abbreviated Spanish weekday names, Monday first (datetime.weekday())
WEEKDAYS_SHORT_ES = ("lun", "mar", "mié", "jue", "vie", "sáb", "dom")


def person_sort_key(name: str) -> str:
    """Sort key comparing names without case or accents ("Álvaro" next to "alvaro")."""
    decomposed = unicodedata.normalize("NFKD", name)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def format_currency(value: float | int | None) -> str:
    """Format number as Colombian pesos (e.g., 1234567.5 -> $ 1.234.567,50)."""
    if value is None:
        value = 0
    formatted = f"{float(value):,.2f}"
    # Swap separators: 1,234,567.50 -> 1.234.567,50
    formatted = formatted.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"$ {formatted}"


def format_hours(minutes: float | int | None) -> str:
    """Minutes rendered as hours with two decimals (e.g., 90 -> 1.50)."""
    if not minutes:
        return "0.00"
    return f"{round(minutes / 60, 2):.2f}"


def human_date(ts: datetime | date | None) -> str:
    """Format a date or datetime as dd/mm/yyyy."""
    if ts is None:
        return "-"
    return ts.strftime("%d/%m/%Y")


def format_day_label(day: date | None) -> str:
    """Short Spanish day label, e.g. 'lun, 05/02/2024'."""
    if day is None:
        return "-"
    return f"{WEEKDAYS_SHORT_ES[day.weekday()]}, {human_date(day)}"
