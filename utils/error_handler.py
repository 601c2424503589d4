"""
Error handling module for HorasCalc application.
Provides centralized error handling, logging, and user-friendly error messages.
"""

from __future__ import annotations
import logging
import re
from typing import Optional
from datetime import datetime
from fastapi import Request
from fastapi.responses import HTMLResponse, JSONResponse

from config import config

# Configure logging with more detail
logging.basicConfig(
    level=logging.DEBUG if config.DEBUG else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(config.LOG_FILE, encoding='utf-8'),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)


class HorasCalcError(Exception):
    """Base exception for all HorasCalc errors"""
    def __init__(self, message: str, details: Optional[dict] = None, user_message: Optional[str] = None):
        self.message = message
        self.details = details or {}
        self.user_message = user_message or message
        super().__init__(self.message)


class ValidationError(HorasCalcError):
    """Input validation errors"""
    pass


class InvalidInterval(ValidationError):
    """Shift dates missing, unparsable, or end not after start"""
    pass


class InvalidRestSpec(ValidationError):
    """Rest minutes or rest window inconsistent with the shift"""
    pass


class MissingRestTiming(ValidationError):
    """Rest declared but its timing was not supplied"""
    pass


class InvalidDayType(ValidationError):
    """Unknown day-type override"""
    pass


class CalculationError(HorasCalcError):
    """Calculation-related errors"""
    pass


class LedgerInvariantError(CalculationError):
    """A day or week budget went outside its allowed range"""
    pass


def log_error(error: Exception, context: Optional[dict] = None) -> str:
    """
    Log an error with full context and return error ID.

    Args:
        error: The exception that occurred
        context: Additional context (operation, parameters)

    Returns:
        Error ID for tracking
    """
    error_id = f"{datetime.now().timestamp():.0f}"

    error_details = {
        'error_id': error_id,
        'error_type': type(error).__name__,
        'error_message': str(error),
        'timestamp': datetime.now().isoformat(),
        'context': context or {}
    }

    # Input errors are expected; only unexpected ones carry a traceback
    if isinstance(error, ValidationError):
        logger.warning(f"Validation error {error_id}: {error_details}")
    elif isinstance(error, HorasCalcError):
        logger.error(f"Application error {error_id}: {error_details}")
    else:
        logger.error(f"Unexpected error {error_id}: {error_details}", exc_info=True)

    return error_id


async def handle_application_error(request: Request, exc: HorasCalcError) -> HTMLResponse:
    """
    Handle application-specific errors with user-friendly messages.
    """
    error_id = log_error(exc, context={'path': request.url.path, 'method': request.method})
    status_code = 400 if isinstance(exc, ValidationError) else 500

    # For API endpoints, return JSON
    if request.url.path.startswith('/api/'):
        return JSONResponse(
            status_code=status_code,
            content={
                'error': exc.user_message,
                'error_type': type(exc).__name__,
                'error_id': error_id,
                'details': exc.details
            }
        )

    # For web pages, render the main page with the message
    from routes.home import render_home
    return render_home(request, errors=exc.user_message, status_code=status_code)


async def handle_unexpected_error(request: Request, exc: Exception) -> HTMLResponse:
    """
    Handle unexpected errors with generic message (no sensitive info).
    """
    error_id = log_error(exc, context={'path': request.url.path, 'method': request.method})

    # For API endpoints
    if request.url.path.startswith('/api/'):
        return JSONResponse(
            status_code=500,
            content={
                'error': 'Ocurrió un error inesperado',
                'error_id': error_id
            }
        )

    return HTMLResponse(
        content=sanitize_error_message(f"Ocurrió un error inesperado (código {error_id})."),
        status_code=500
    )


def sanitize_error_message(message: str) -> str:
    """
    Remove sensitive information from error messages before showing to users.
    """
    # Remove file paths
    message = re.sub(r'(?:[A-Z]:)?[\\/][\w\\/\-\.]+\.py', '[PATH]', message)

    # Remove stack traces
    message = re.sub(r'File ".*", line \d+.*', '[TRACE]', message)

    return message
