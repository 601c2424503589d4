"""
Home page routes for HorasCalc application.
Shift form, filters, results table and totals.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from config import config
from core.constants import AUTO_REST_PRESETS, CATEGORY_LABELS, REST_MODES
from core.logic import (
    available_filters, filter_records, get_session, project_rows, summarize, totals_in_hours,
)
from core.time_utils import DAY_TYPE_AUTO, DAY_TYPE_OVERRIDES
from core.validation import parse_hourly_rate
from core.wage_calculator import CATEGORY_POLICIES, calculate_pay
from utils.error_handler import ValidationError, log_error
from utils.utils import format_currency, format_day_label, format_hours, human_date

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(config.TEMPLATES_DIR))
templates.env.filters["human_date"] = human_date
templates.env.filters["format_currency"] = format_currency
templates.env.filters["format_hours"] = format_hours
templates.env.filters["day_label"] = format_day_label
templates.env.globals["app_version"] = config.VERSION

FORM_FIELDS = (
    "person", "start", "end", "day_type", "rest_mode", "rest_minutes",
    "rest_start", "rest_end", "auto_rest_preset", "week_key", "policy",
)


def render_home(
    request: Request,
    person: Optional[str] = None,
    week: Optional[str] = None,
    errors: Optional[str] = None,
    form: Optional[dict] = None,
    status_code: int = 200,
    hourly_rate: Optional[float] = None
) -> HTMLResponse:
    """Render the main page for the current session."""
    session = get_session()
    filters = available_filters(session.records)

    # Drop filter values that no longer match any record
    person = person if person in filters["persons"] else ""
    week = week if week in filters["weeks"] else ""

    filtered = filter_records(session.records, person or None, week or None)
    rows = project_rows(filtered, week or None)
    totals = summarize(filtered, week or None)
    pay = calculate_pay(totals, hourly_rate) if hourly_rate is not None else None

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "request": request,
            "rows": rows,
            "totals": totals_in_hours(totals),
            "pay": pay,
            "hourly_rate": hourly_rate,
            "filters": filters,
            "selected_person": person,
            "selected_week": week,
            "errors": errors,
            "form": form or {},
            "category_labels": CATEGORY_LABELS,
            "day_types": [DAY_TYPE_AUTO, *DAY_TYPE_OVERRIDES],
            "rest_modes": REST_MODES,
            "default_rest_mode": config.DEFAULT_REST_MODE,
            "auto_rest_presets": AUTO_REST_PRESETS,
            "policies": list(CATEGORY_POLICIES),
            "default_policy": config.CATEGORY_POLICY,
        },
        status_code=status_code,
    )


def home(
    request: Request,
    person: Optional[str] = None,
    week: Optional[str] = None,
    hourly_rate: Optional[str] = None
) -> HTMLResponse:
    """Home page route showing the form, the recorded shifts and, with a rate, their value."""
    try:
        rate = parse_hourly_rate(hourly_rate)
    except ValidationError as e:
        log_error(e, context={'path': request.url.path})
        return render_home(request, person, week, errors=e.user_message, status_code=400)
    return render_home(request, person, week, hourly_rate=rate)


async def submit_shift(request: Request) -> HTMLResponse:
    """Handle the shift form; on error re-render with the message and the entered values."""
    form_data = await request.form()
    fields = {name: (form_data.get(name) or None) for name in FORM_FIELDS}

    try:
        get_session().submit(**fields)
    except ValidationError as e:
        log_error(e, context={'path': request.url.path, 'person': fields.get("person")})
        return render_home(request, errors=e.user_message, form=fields, status_code=400)

    return RedirectResponse(url="/", status_code=303)


def reset_session(request: Request) -> RedirectResponse:
    """Full reset: clears records and the weekly ledger."""
    get_session().reset()
    return RedirectResponse(url="/", status_code=303)
