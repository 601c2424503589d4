"""
Main application file for HorasCalc.
Uses modular structure with separate route handlers.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles

from config import config
from core.logic import get_session
from routes import api
from routes.home import home, submit_shift, reset_session
from utils.error_handler import HorasCalcError, handle_application_error, handle_unexpected_error

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# FastAPI app setup
app = FastAPI(title="Calculadora de horas extra y recargos")

# Mount static files
if config.STATIC_DIR:
    app.mount("/static", StaticFiles(directory=str(config.STATIC_DIR)), name="static")

app.add_exception_handler(HorasCalcError, handle_application_error)
app.add_exception_handler(Exception, handle_unexpected_error)


# Route registrations
@app.get("/health")
def health_check():
    """Health check endpoint reporting the in-memory session size."""
    session = get_session()
    return {
        "status": "ok",
        "version": config.VERSION,
        "records": len(session.records),
        "weeks": len(session.ledger.weeks()),
    }


@app.get("/", response_class=HTMLResponse)
def home_route(
    request: Request,
    person: Optional[str] = None,
    week: Optional[str] = None,
    hourly_rate: Optional[str] = None
):
    """Home page route."""
    return home(request, person, week, hourly_rate)


@app.post("/shifts", response_class=HTMLResponse)
async def submit_shift_route(request: Request):
    """Shift form submission."""
    return await submit_shift(request)


@app.post("/reset")
def reset_route(request: Request):
    """Clear every record and the weekly ledger."""
    return reset_session(request)


# JSON API
@app.post("/api/shifts")
async def create_shift_route(request: Request):
    """Record a shift."""
    return await api.create_shift(request)


@app.post("/api/shifts/preview")
async def preview_shift_route(request: Request, hourly_rate: Optional[str] = None):
    """Classify a shift without recording it."""
    return await api.preview_shift(request, hourly_rate)


@app.get("/api/records")
def list_records_route(person: Optional[str] = None, week: Optional[str] = None, hourly_rate: Optional[str] = None):
    """Recorded shifts grouped by person, week and day."""
    return api.list_records(person, week, hourly_rate)


@app.get("/api/filters")
def list_filters_route():
    """Persons and weeks available for filtering."""
    return api.list_filters()


@app.post("/api/reset")
def api_reset_route():
    """Clear every record and the weekly ledger."""
    return api.reset()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app:app",
        host=config.HOST,
        port=config.PORT,
        reload=config.DEBUG
    )
