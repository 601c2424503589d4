"""
Input validation for HorasCalc application.
Turns raw form/API values into a ShiftRequest ready for the allocation engine.

Every check runs before the ledger is touched, so a rejected submission has no
side effects.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from config import config
from core.constants import (
    AUTO_REST_PRESETS, DEFAULT_AUTO_REST_PRESET, REST_DURATION_TOLERANCE,
    REST_MODES, REST_MODE_AUTO, REST_MODE_COUNTDOWN, REST_MODE_NONE,
)
from core.segments import AutoRest, CountdownRest, RestSpec, RestWindow, compute_auto_rest_window
from core.time_utils import DAY_TYPE_AUTO, DAY_TYPE_OVERRIDES, minutes_between
from core.wage_calculator import CATEGORY_POLICIES, CategoryPolicy, get_policy
from utils.error_handler import (
    InvalidDayType, InvalidInterval, InvalidRestSpec, MissingRestTiming, ValidationError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShiftRequest:
    """A validated shift submission."""
    person: str
    start: datetime
    end: datetime
    day_type: str = DAY_TYPE_AUTO
    rest: RestSpec = None
    week_key: Optional[str] = None
    policy: Optional[CategoryPolicy] = None

    @property
    def total_minutes(self) -> float:
        return minutes_between(self.start, self.end)


def parse_datetime(value: Any, field_name: str) -> Optional[datetime]:
    """Parse an ISO 'YYYY-MM-DDTHH:MM' value (or datetime) truncated to the minute."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip())
        except ValueError:
            error_cls = InvalidRestSpec if field_name.startswith("rest") else InvalidInterval
            raise error_cls(
                f"Unparsable {field_name}: {value!r}",
                details={'field': field_name, 'value': str(value)},
                user_message="Las fechas proporcionadas no son válidas."
            )
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(config.LOCAL_TZ).replace(tzinfo=None)
    return parsed.replace(second=0, microsecond=0)


def parse_rest_minutes(value: Any) -> int:
    """Rest minutes must be a non-negative integer; blank means zero."""
    if value is None or value == "":
        return 0
    try:
        minutes = int(value)
    except (TypeError, ValueError):
        minutes = -1
    if minutes < 0:
        raise InvalidRestSpec(
            f"Invalid rest minutes: {value!r}",
            details={'rest_minutes': str(value)},
            user_message="Los minutos de descanso deben ser un número positivo."
        )
    return minutes


def parse_hourly_rate(value: Any) -> Optional[float]:
    """Hourly rate used to value category hours; blank means no valuation."""
    if value is None or value == "":
        return None
    try:
        rate = float(value)
    except (TypeError, ValueError):
        rate = -1
    if not 0 <= rate < float("inf"):
        raise ValidationError(
            f"Invalid hourly rate: {value!r}",
            details={'hourly_rate': str(value)},
            user_message="El valor de la hora debe ser un número positivo."
        )
    return rate


def parse_text(value: Any, field_name: str, error_cls=ValidationError) -> Optional[str]:
    """Text fields must arrive as strings; blank means not given."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise error_cls(
            f"Field {field_name} must be text, got {type(value).__name__}",
            details={'field': field_name, 'value': repr(value)},
            user_message="Los datos de la jornada no tienen el formato esperado."
        )
    return value.strip() or None


def validate_interval(start: Optional[datetime], end: Optional[datetime]) -> None:
    if start is None or end is None:
        raise InvalidInterval(
            "Shift start and end are required",
            user_message="Debe indicar las fechas de inicio y fin de la jornada."
        )
    if end <= start:
        raise InvalidInterval(
            "Shift end must be after start",
            details={'start': start.isoformat(), 'end': end.isoformat()},
            user_message="La hora de fin debe ser posterior a la de inicio."
        )


def validate_rest_window(
    start: datetime,
    end: datetime,
    rest_start: datetime,
    rest_end: datetime,
    declared_minutes: float
) -> RestWindow:
    """
    Check an explicit rest window against the shift.

    The rest must start within [start, end), end after it starts and no later
    than the shift end, and last exactly the declared minutes.
    """
    if not (start <= rest_start < end):
        raise InvalidRestSpec(
            "Rest start outside the shift",
            details={'rest_start': rest_start.isoformat()},
            user_message="El inicio del descanso debe estar dentro de la jornada."
        )
    if rest_end <= rest_start:
        raise InvalidRestSpec(
            "Rest end must be after rest start",
            details={'rest_start': rest_start.isoformat(), 'rest_end': rest_end.isoformat()},
            user_message="El fin del descanso debe ser posterior a su inicio."
        )
    if rest_end > end:
        raise InvalidRestSpec(
            "Rest end outside the shift",
            details={'rest_end': rest_end.isoformat()},
            user_message="El fin del descanso debe estar dentro de la jornada."
        )

    window = RestWindow(rest_start, rest_end)
    if abs(window.minutes - declared_minutes) > REST_DURATION_TOLERANCE:
        raise InvalidRestSpec(
            "Declared rest minutes do not match the rest window",
            details={'declared': declared_minutes, 'window': window.minutes},
            user_message="La duración del descanso no coincide con el horario indicado."
        )
    return window


def validate_shift(
    person: Any,
    start: Any,
    end: Any,
    day_type: Optional[str] = DAY_TYPE_AUTO,
    rest_mode: Optional[str] = None,
    rest_minutes: Any = 0,
    rest_start: Any = None,
    rest_end: Any = None,
    auto_rest_preset: Optional[str] = None,
    week_key: Optional[str] = None,
    policy: Optional[str] = None
) -> ShiftRequest:
    """
    Validate raw shift input and build a ShiftRequest.

    Raises:
        InvalidInterval: missing person, missing/unparsable dates, end <= start
        InvalidRestSpec: bad rest minutes or rest window
        MissingRestTiming: rest declared for the window policy without its times
        InvalidDayType: unknown day-type override
        ValidationError: unknown rest mode, preset or category policy
    """
    person = parse_text(person, "person", InvalidInterval)
    if not person:
        raise InvalidInterval(
            "Person is required",
            user_message="Debe indicar la persona asociada a la jornada."
        )

    start_dt = parse_datetime(start, "start")
    end_dt = parse_datetime(end, "end")
    validate_interval(start_dt, end_dt)
    total = minutes_between(start_dt, end_dt)

    day_type = parse_text(day_type, "day_type", InvalidDayType) or DAY_TYPE_AUTO
    if day_type != DAY_TYPE_AUTO and day_type not in DAY_TYPE_OVERRIDES:
        raise InvalidDayType(
            f"Unknown day type: {day_type!r}",
            details={'day_type': day_type},
            user_message="El tipo de día no es válido."
        )

    rest_mode = parse_text(rest_mode, "rest_mode") or config.DEFAULT_REST_MODE
    if rest_mode not in REST_MODES:
        raise ValidationError(
            f"Unknown rest mode: {rest_mode!r}",
            details={'rest_mode': rest_mode},
            user_message="La modalidad de descanso no es válida."
        )

    minutes = parse_rest_minutes(rest_minutes)
    rest = _build_rest(
        rest_mode, minutes, start_dt, end_dt, total,
        parse_datetime(rest_start, "rest_start"),
        parse_datetime(rest_end, "rest_end"),
        parse_text(auto_rest_preset, "auto_rest_preset"),
    )

    policy = parse_text(policy, "policy")
    if policy and policy not in CATEGORY_POLICIES:
        raise ValidationError(
            f"Unknown category policy: {policy!r}",
            details={'policy': policy},
            user_message="La política de clasificación no es válida."
        )

    return ShiftRequest(
        person=person,
        start=start_dt,
        end=end_dt,
        day_type=day_type,
        rest=rest,
        week_key=parse_text(week_key, "week_key"),
        policy=get_policy(policy),
    )


def _build_rest(
    rest_mode: str,
    minutes: int,
    start: datetime,
    end: datetime,
    total: float,
    rest_start: Optional[datetime],
    rest_end: Optional[datetime],
    auto_rest_preset: Optional[str]
) -> RestSpec:
    if rest_mode == REST_MODE_NONE:
        return None

    if rest_mode == REST_MODE_AUTO:
        preset = auto_rest_preset or DEFAULT_AUTO_REST_PRESET
        if preset not in AUTO_REST_PRESETS:
            raise ValidationError(
                f"Unknown auto rest preset: {preset!r}",
                details={'preset': preset},
                user_message="La configuración de descanso automático no es válida."
            )
        threshold, duration = AUTO_REST_PRESETS[preset]
        window = compute_auto_rest_window(start, end, threshold, duration)
        if window is not None and window.minutes >= total:
            raise InvalidRestSpec(
                "Automatic rest covers the whole shift",
                details={'preset': preset, 'rest_minutes': window.minutes, 'shift_minutes': total},
                user_message="El descanso no puede ser igual o mayor al tiempo total trabajado."
            )
        return AutoRest(threshold, duration)

    if minutes == 0:
        return None

    if minutes >= total:
        raise InvalidRestSpec(
            "Rest must be shorter than the shift",
            details={'rest_minutes': minutes, 'shift_minutes': total},
            user_message="El descanso no puede ser igual o mayor al tiempo total trabajado."
        )
    if minutes > config.MAX_REST_MINUTES:
        raise InvalidRestSpec(
            "Rest exceeds the configured maximum",
            details={'rest_minutes': minutes, 'max': config.MAX_REST_MINUTES},
            user_message=f"El descanso no debería exceder {config.MAX_REST_MINUTES} minutos."
        )

    if rest_mode == REST_MODE_COUNTDOWN:
        return CountdownRest(minutes)

    if rest_start is None or rest_end is None:
        raise MissingRestTiming(
            "Rest window times are required",
            details={'rest_minutes': minutes},
            user_message="Debe indicar el inicio y fin del descanso."
        )
    return validate_rest_window(start, end, rest_start, rest_end, minutes)
