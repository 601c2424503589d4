"""
JSON API routes for HorasCalc application.
Validation errors raised here are turned into JSON responses by the
application-level exception handlers.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from core.logic import (
    available_filters, filter_records, get_session, project_rows, summarize, totals_in_hours,
)
from core.validation import parse_hourly_rate
from core.wage_calculator import calculate_pay
from utils.error_handler import ValidationError

logger = logging.getLogger(__name__)

SHIFT_FIELDS = (
    "person", "start", "end", "day_type", "rest_mode", "rest_minutes",
    "rest_start", "rest_end", "auto_rest_preset", "week_key", "policy",
)


async def _read_shift_fields(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError(
            "Request body is not valid JSON",
            user_message="El cuerpo de la solicitud no es JSON válido."
        )
    if not isinstance(body, dict):
        raise ValidationError(
            "Request body must be an object",
            user_message="El cuerpo de la solicitud debe ser un objeto JSON."
        )
    return {name: body.get(name) for name in SHIFT_FIELDS}


async def create_shift(request: Request) -> JSONResponse:
    """Submit a shift; the weekly ledger keeps its consumption."""
    fields = await _read_shift_fields(request)
    record = get_session().submit(**fields)
    return JSONResponse(record.as_dict(), status_code=201)


async def preview_shift(request: Request, hourly_rate: Optional[str] = None) -> JSONResponse:
    """Allocate a shift without recording it; optionally value it at an hourly rate."""
    fields = await _read_shift_fields(request)
    record = get_session().preview(**fields)
    data = record.as_dict()
    rate = parse_hourly_rate(hourly_rate)
    if rate is not None:
        data["pay"] = calculate_pay(record.totals, rate)
    return JSONResponse(data)


def list_records(
    person: Optional[str] = None,
    week: Optional[str] = None,
    hourly_rate: Optional[str] = None
) -> JSONResponse:
    """Projected rows and totals for the current filters."""
    session = get_session()
    filtered = filter_records(session.records, person, week)
    rows = project_rows(filtered, week)
    totals = summarize(filtered, week)

    data = {
        "rows": [dict(row, day=row["day"].isoformat()) for row in rows],
        "totals": totals.as_dict(),
        "totals_hours": totals_in_hours(totals),
    }
    rate = parse_hourly_rate(hourly_rate)
    if rate is not None:
        data["pay"] = calculate_pay(totals, rate)
    return JSONResponse(data)


def list_filters() -> JSONResponse:
    return JSONResponse(available_filters(get_session().records))


def reset() -> JSONResponse:
    get_session().reset()
    return JSONResponse({"success": True})
