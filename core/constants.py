"""
Central constants for HorasCalc application.
All category keys, surcharge multipliers and rest presets should be defined here.

This module serves as the single source of truth for constants used across:
- core/segments.py
- core/wage_calculator.py
- core/validation.py
- core/logic.py
- routes/*.py
"""
from typing import Dict, Tuple

# =============================================================================
# Labor-Time Categories
# =============================================================================

ORDINARY = "ordinary"   # horas ordinarias diurnas
RN = "rn"               # recargo nocturno
HED = "hed"             # hora extra diurna
HEDF = "hedf"           # hora extra dominical/festiva diurna
HEN = "hen"             # hora extra nocturna

CATEGORIES: Tuple[str, ...] = (ORDINARY, RN, HED, HEDF, HEN)

CATEGORY_LABELS: Dict[str, str] = {
    ORDINARY: "Ordinarias",
    RN: "RN",
    HED: "HED",
    HEDF: "HEDF",
    HEN: "HEN",
}

# =============================================================================
# Pay Multipliers (applied to the base hourly rate)
# =============================================================================

CATEGORY_MULTIPLIERS: Dict[str, float] = {
    ORDINARY: 1.00,
    RN: 1.35,
    HED: 1.25,
    HEDF: 2.00,
    HEN: 1.75,
}

# =============================================================================
# Rest Policies
# =============================================================================

REST_MODE_NONE = "none"
REST_MODE_COUNTDOWN = "countdown"   # descanso descontado desde el final
REST_MODE_WINDOW = "window"         # ventana de descanso explícita
REST_MODE_AUTO = "auto"             # ventana automática en la mitad del turno

REST_MODES: Tuple[str, ...] = (REST_MODE_NONE, REST_MODE_COUNTDOWN, REST_MODE_WINDOW, REST_MODE_AUTO)

# Automatic midpoint rest presets: name -> (threshold_minutes, rest_minutes)
AUTO_REST_PRESETS: Dict[str, Tuple[int, int]] = {
    "short": (60, 60),
    "full_day": (480, 60),
}
DEFAULT_AUTO_REST_PRESET = "full_day"

# Allowed difference between declared rest minutes and an explicit window
REST_DURATION_TOLERANCE = 1e-6
